"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los payloads de la API (formularios/campos) se mantienen como dicts crudos:
  su esquema pertenece a Gravity Forms, no a nosotros.

Nota:
- Estos modelos describen *qué* se pide, no *cómo* se obtiene.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

FormSummary = dict[str, Any]
FormDetail = dict[str, Any]


class ApiCredentials(BaseModel):
    """Credenciales OAuth (consumer key/secret) de la REST API.

    Solo se usan para producir la firma de cada request.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Consumer key.")
    secret: str = Field(..., min_length=1, description="Consumer secret.")


class BasicAuthCredentials(BaseModel):
    """Credencial HTTP Basic.

    El Core la trata como opaca: solo el adaptador HTTP la interpreta.
    """

    model_config = ConfigDict(frozen=True)

    username: str = Field(..., min_length=1)
    password: str = Field(default="")


class RequestDescriptor(BaseModel):
    """Request a ejecutar (se reutiliza idéntico entre reintentos)."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(..., description="Raíz del sitio (sin '/' final).")
    route: str = Field(..., description="Fragmento de path, p.ej. '/wp-json/gf/v2/forms'.")
    method: str = Field(default="GET")
    params: dict[str, str] = Field(
        default_factory=dict,
        description="Query params del caller (se firman junto a los OAuth).",
    )

    @property
    def url(self) -> str:
        return self.base_url + self.route


class AggregationFilters(BaseModel):
    """Filtros include/exclude por ID de formulario.

    Reglas:
    - `include=None` no filtra; un set (aunque vacío) admite solo esos IDs.
    - `exclude` gana siempre sobre `include`.
    - `from_lists` es la puerta de CLI/env: ahí una lista vacía equivale a
      "no configurado" (None), nunca a `frozenset()`.
    """

    model_config = ConfigDict(frozen=True)

    include: frozenset[int] | None = None
    exclude: frozenset[int] | None = None

    @classmethod
    def from_lists(
        cls,
        *,
        include: Iterable[int] | None = None,
        exclude: Iterable[int] | None = None,
    ) -> AggregationFilters:
        """Construye filtros desde listas de CLI/env; listas vacías = sin filtro."""

        inc = frozenset(include) if include else None
        exc = frozenset(exclude) if exclude else None
        return cls(include=inc, exclude=exc)

    def admits(self, form_id: int) -> bool:
        if self.include is not None and form_id not in self.include:
            return False
        if self.exclude is not None and form_id in self.exclude:
            return False
        return True
