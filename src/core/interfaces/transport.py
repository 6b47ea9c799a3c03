"""Contrato del transporte HTTP.

Por qué Protocol:
- La fachada de packages depende de una abstracción, no de httpx.
- Permite sustituir el transporte real por uno de pruebas (grabador/stub)
  sin herencia ni monkeypatching.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, Field

T = TypeVar("T")


class RequestOptions(BaseModel):
    """Opciones por llamada que la fachada reenvía sin examinar."""

    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Cabeceras adicionales para esta llamada.",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Timeout específico de la llamada (segundos).",
    )


@runtime_checkable
class APITransport(Protocol):
    """Contrato mínimo que consume `PackagesAPI`.

    Reglas de diseño:
    - `request` es asíncrono: hace exactamente un round trip.
    - `query_string` solo serializa los campos nombrados, en ese orden.
    """

    async def request(
        self,
        method: str,
        path: str,
        request: BaseModel | Mapping[str, Any] | None = None,
        options: RequestOptions | None = None,
        content_type: str | None = None,
        response_model: type[T] | None = None,
    ) -> Any:
        ...

    def query_string(
        self,
        request: BaseModel | Mapping[str, Any] | None,
        fields: Sequence[str],
    ) -> str:
        ...
