"""Fachada de la API de packages y stacks (`/api/v2/packages`).

Cada método es un mapeo directo: request tipado -> verbo + ruta + query
string + cuerpo JSON. No hay estado, caché ni reintentos; el transporte
inyectado hace el round trip y su resultado (o su excepción) llega al
llamador sin tocar.

Referencia de operaciones: CreatePkg, ApplyPkg, ListStacks, CreateStack,
ReadStack, UpdateStack, DeleteStack, ExportStack.
"""

from __future__ import annotations

from core.domain.models import (
    ApplyPkgRequest,
    CreatePkgRequest,
    CreateStackRequest,
    DeleteStackRequest,
    ExportStackRequest,
    ListStacksRequest,
    Pkg,
    PkgSummary,
    ReadStackRequest,
    Stack,
    StackList,
    UpdateStackRequest,
)
from core.interfaces.transport import APITransport, RequestOptions

JSON = "application/json"

PACKAGES_PATH = "/api/v2/packages"
STACKS_PATH = f"{PACKAGES_PATH}/stacks"

# Campos (nombres de la API) que viajan como query string, por operación.
LIST_STACKS_QUERY = ("orgID", "name", "stackID")
DELETE_STACK_QUERY = ("orgID",)
EXPORT_STACK_QUERY = ("orgID",)


class PackagesAPI:
    """Operaciones de packages/stacks sobre un transporte compartido.

    El transporte es prestado: la fachada no lo crea ni lo cierra.
    """

    def __init__(self, base: APITransport) -> None:
        self._base = base

    async def create_pkg(
        self,
        request: CreatePkgRequest,
        options: RequestOptions | None = None,
    ) -> Pkg:
        """Crea un package nuevo a partir de recursos existentes."""

        return await self._base.request(
            "POST",
            PACKAGES_PATH,
            request,
            options,
            JSON,
            response_model=Pkg,
        )

    async def apply_pkg(
        self,
        request: ApplyPkgRequest,
        options: RequestOptions | None = None,
    ) -> PkgSummary:
        """Aplica un package, o lo simula si `body.dry_run` es True."""

        return await self._base.request(
            "POST",
            f"{PACKAGES_PATH}/apply",
            request,
            options,
            JSON,
            response_model=PkgSummary,
        )

    async def list_stacks(
        self,
        request: ListStacksRequest,
        options: RequestOptions | None = None,
    ) -> StackList:
        """Lista los stacks instalados de una organización."""

        query = self._base.query_string(request, LIST_STACKS_QUERY)
        return await self._base.request(
            "GET",
            f"{STACKS_PATH}{query}",
            request,
            options,
            response_model=StackList,
        )

    async def create_stack(
        self,
        request: CreateStackRequest,
        options: RequestOptions | None = None,
    ) -> Stack:
        return await self._base.request(
            "POST",
            STACKS_PATH,
            request,
            options,
            JSON,
            response_model=Stack,
        )

    async def read_stack(
        self,
        request: ReadStackRequest,
        options: RequestOptions | None = None,
    ) -> Stack:
        return await self._base.request(
            "GET",
            f"{STACKS_PATH}/{request.stack_id}",
            request,
            options,
            response_model=Stack,
        )

    async def update_stack(
        self,
        request: UpdateStackRequest,
        options: RequestOptions | None = None,
    ) -> Stack:
        return await self._base.request(
            "PATCH",
            f"{STACKS_PATH}/{request.stack_id}",
            request,
            options,
            JSON,
            response_model=Stack,
        )

    async def delete_stack(
        self,
        request: DeleteStackRequest,
        options: RequestOptions | None = None,
    ) -> None:
        """Borra un stack y todos sus recursos asociados."""

        query = self._base.query_string(request, DELETE_STACK_QUERY)
        return await self._base.request(
            "DELETE",
            f"{STACKS_PATH}/{request.stack_id}{query}",
            request,
            options,
        )

    async def export_stack(
        self,
        request: ExportStackRequest,
        options: RequestOptions | None = None,
    ) -> Pkg:
        """Exporta los recursos de un stack como package.

        Nota:
        - El verbo es DELETE, tal como lo declara la descripción de la API de
          la que sale este cliente. No se cambia a GET sin confirmarlo contra
          el servidor.
        """

        query = self._base.query_string(request, EXPORT_STACK_QUERY)
        return await self._base.request(
            "DELETE",
            f"{STACKS_PATH}/{request.stack_id}/export{query}",
            request,
            options,
            response_model=Pkg,
        )
