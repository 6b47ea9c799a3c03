"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, autenticación y logging de cada llamada.
- Implementa `core.interfaces.transport.APITransport`: la fachada de packages
  no conoce httpx y se puede testear con un transporte sustituto.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from loguru import logger
from pydantic import BaseModel, TypeAdapter

from core.config import AppSettings
from core.interfaces.transport import RequestOptions

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"

# Mismo conjunto que encodeURIComponent deja sin escapar (además de A-Z a-z 0-9 -_.~).
_URI_COMPONENT_SAFE = "!*'()"


class APIError(Exception):
    """Respuesta no-2xx del servidor.

    Por qué una única excepción:
    - El servidor ya clasifica el fallo (`code`); no lo reinterpretamos.
    - `body` conserva el payload crudo para diagnóstico.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        *,
        code: str | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code
        self.body = body

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        body: Any = None
        code = None
        message = response.reason_phrase or "request failed"
        try:
            body = response.json()
        except ValueError:
            body = response.text or None
        if isinstance(body, dict):
            if isinstance(body.get("message"), str) and body["message"]:
                message = body["message"]
            if isinstance(body.get("code"), str):
                code = body["code"]
        elif isinstance(body, str) and body.strip():
            message = body.strip()
        return cls(response.status_code, message, code=code, body=body)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` apuntando al servidor configurado.

    Por qué un builder:
    - Centraliza base URL/timeouts/headers para que todas las llamadas se
      comporten igual (CLI, doctor, fachada).
    - `transport` permite inyectar `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": JSON_CONTENT_TYPE,
    }
    if settings.token:
        headers["Authorization"] = f"Token {settings.token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


def _as_mapping(request: BaseModel | Mapping[str, Any] | None) -> Mapping[str, Any]:
    if request is None:
        return {}
    if isinstance(request, BaseModel):
        return request.model_dump(mode="json", by_alias=True)
    return request


def build_query_string(
    request: BaseModel | Mapping[str, Any] | None,
    fields: Sequence[str],
) -> str:
    """Serializa solo `fields` (nombres de la API) en el orden dado.

    Devuelve `""` si ningún campo tiene valor; si no, `"?k=v&..."`.
    Los campos que no se nombran nunca llegan a la URL (p.ej. `body`).
    """

    values = _as_mapping(request)
    parts: list[str] = []
    for name in fields:
        value = values.get(name)
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        key = quote(name, safe=_URI_COMPONENT_SAFE)
        parts.append(f"{key}={quote(str(value), safe=_URI_COMPONENT_SAFE)}")
    if not parts:
        return ""
    return "?" + "&".join(parts)


@functools.lru_cache(maxsize=None)
def _type_adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


def _encode_body(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return body


def _request_body(request: BaseModel | Mapping[str, Any] | None) -> Any:
    if request is None:
        return None
    if isinstance(request, BaseModel):
        return getattr(request, "body", None)
    return request.get("body")


class APIBase:
    """Transporte compartido: un round trip por llamada, sin reintentos.

    Puede recibir un `httpx.AsyncClient` ya construido (prestado, no se cierra)
    o crear el suyo a partir de `AppSettings`.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def __aenter__(self) -> "APIBase":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def query_string(
        self,
        request: BaseModel | Mapping[str, Any] | None,
        fields: Sequence[str],
    ) -> str:
        return build_query_string(request, fields)

    async def request(
        self,
        method: str,
        path: str,
        request: BaseModel | Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
        content_type: str | None = None,
        response_model: type[T] | None = None,
    ) -> Any:
        headers: dict[str, str] = {}
        if content_type:
            headers["Content-Type"] = content_type
        if options is not None:
            headers.update(options.headers)

        kwargs: dict[str, Any] = {"headers": headers}
        if options is not None and options.timeout is not None:
            kwargs["timeout"] = httpx.Timeout(options.timeout)

        body = _request_body(request)
        if body is not None:
            kwargs["json"] = _encode_body(body)

        logger.debug("{} {}", method, path)
        response = await self._client.request(method, path, **kwargs)

        if response.is_error:
            error = APIError.from_response(response)
            logger.warning("{} {} failed: {}", method, path, error)
            raise error

        if response.status_code == 204 or not response.content:
            return None

        payload = response.json()
        if response_model is None:
            return payload
        return _type_adapter(response_model).validate_python(payload)
