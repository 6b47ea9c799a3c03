"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los nombres de la API (`orgID`, `stackID`, `createdAt`...) viven como alias;
  en Python se usan nombres snake_case.

Nota:
- Estos modelos describen *qué* viaja por la API, no *cómo* se envía.
"""

from __future__ import annotations

from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, Field, RootModel
from pydantic.config import ConfigDict

T = TypeVar("T")


def _none_as_empty(value: Any) -> Any:
    return [] if value is None else value


# Listas que el servidor puede devolver como `null`.
NullableList = Annotated[list[T], BeforeValidator(_none_as_empty)]


class PkgObject(BaseModel):
    """Una definición de recurso dentro de un package (bucket, dashboard, label...)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str | None = Field(
        default=None,
        alias="apiVersion",
        description="Versión del esquema de package (p.ej. 'influxdata.com/v2alpha1').",
    )
    kind: str | None = Field(
        default=None,
        description="Tipo de recurso (Bucket, Dashboard, Label, Task...).",
    )
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Metadatos del recurso (típicamente `name`).",
    )
    spec: dict[str, Any] | None = Field(
        default=None,
        description="Definición específica del recurso; el servidor la interpreta.",
    )


class Pkg(RootModel):
    """Package: lista ordenada de definiciones de recursos."""

    root: list[PkgObject] = Field(default_factory=list)

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)


class PkgOrgFilter(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    org_id: str | None = Field(default=None, alias="orgID")
    resource_filters: dict[str, list[str]] | None = Field(
        default=None,
        alias="resourceFilters",
        description="Filtros por label (`byLabel`) o tipo (`byResourceKind`).",
    )


class PkgResourceRef(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    kind: str
    name: str | None = None


class PkgCreate(BaseModel):
    """Cuerpo para crear (exportar a package) recursos existentes.

    Es opaco para la fachada: se envía tal cual, campos extra incluidos.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    org_ids: list[PkgOrgFilter] | None = Field(
        default=None,
        alias="orgIDs",
        description="Organizaciones (y filtros) cuyos recursos se exportan.",
    )
    resources: list[PkgResourceRef] | None = Field(
        default=None,
        description="Recursos concretos a incluir en el package.",
    )


class PkgRemote(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str
    content_type: str | None = Field(default=None, alias="contentType")


class PkgApply(BaseModel):
    """Cuerpo para aplicar (o simular con `dry_run`) un package."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    dry_run: bool | None = Field(
        default=None,
        alias="dryRun",
        description="Si es True, el servidor evalúa el package sin persistir cambios.",
    )
    org_id: str | None = Field(default=None, alias="orgID")
    stack_id: str | None = Field(
        default=None,
        alias="stackID",
        description="Stack al que se asocian los recursos aplicados.",
    )
    package: Pkg | None = None
    packages: list[Pkg] | None = None
    secrets: dict[str, str] | None = None
    remotes: list[PkgRemote] | None = None


class PkgSummary(BaseModel):
    """Resultado de aplicar un package (definido por el servidor)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    summary: dict[str, Any] = Field(
        default_factory=dict,
        description="Recursos resultantes agrupados por tipo (buckets, dashboards...).",
    )
    diff: dict[str, Any] = Field(
        default_factory=dict,
        description="Diferencias entre el estado actual y el package.",
    )
    errors: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Errores de validación por recurso.",
    )


class StackResource(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str | None = Field(default=None, alias="apiVersion")
    resource_id: str | None = Field(default=None, alias="resourceID")
    kind: str | None = None
    pkg_name: str | None = Field(default=None, alias="pkgName")
    associations: NullableList[dict[str, Any]] = Field(default_factory=list)


class Stack(BaseModel):
    """Unidad desplegable con nombre, descripción y URLs de origen.

    Por qué existe:
    - Agrupa los recursos materializados por uno o varios packages aplicados,
      para poder actualizarlos, exportarlos o borrarlos juntos.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = Field(default=None, description="Identificador del stack.")
    org_id: str | None = Field(default=None, alias="orgID")
    name: str | None = None
    description: str | None = None
    sources: NullableList[str] = Field(default_factory=list)
    urls: NullableList[str] = Field(
        default_factory=list,
        description="URLs de packages remotos asociados al stack.",
    )
    resources: NullableList[StackResource] = Field(default_factory=list)
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")


class StackList(BaseModel):
    model_config = ConfigDict(extra="allow")

    stacks: NullableList[Stack] = Field(default_factory=list)


class StackCreate(BaseModel):
    """Cuerpo de createStack. Los campos ausentes no se envían."""

    model_config = ConfigDict(populate_by_name=True)

    org_id: str | None = Field(default=None, alias="orgID")
    name: str | None = None
    description: str | None = None
    urls: list[str] | None = None


class StackUpdate(BaseModel):
    """Cuerpo de updateStack. Los campos ausentes no se envían."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | None = None
    urls: list[str] | None = None


# Request objects: uno por operación, inmutables tras construirse.

_REQUEST_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


class CreatePkgRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    body: PkgCreate = Field(..., description="Package a crear.")


class ApplyPkgRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    body: PkgApply = Field(..., description="Package a aplicar o simular.")


class ListStacksRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    org_id: str = Field(..., alias="orgID", description="Organización de los stacks.")
    name: str | None = Field(default=None, description="Filtra por nombre.")
    stack_id: str | None = Field(default=None, alias="stackID", description="Filtra por ID.")


class CreateStackRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    body: StackCreate


class ReadStackRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    stack_id: str


class UpdateStackRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    stack_id: str
    body: StackUpdate


class DeleteStackRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    stack_id: str
    org_id: str = Field(..., alias="orgID")


class ExportStackRequest(BaseModel):
    model_config = _REQUEST_CONFIG

    stack_id: str
    org_id: str = Field(..., alias="orgID")
