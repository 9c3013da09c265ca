"""Resultado discriminado de una llamada a la API.

Por qué no `False`/`None`:
- Un listado vacío pero válido nunca debe confundirse con un fallo de red.
- La clasificación del error viaja con el fallo (útil para CLI y tests).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    """Clasificación terminal de un fallo de fetch."""

    RESPONSE = "response"
    NO_RESPONSE = "no_response"
    SETUP = "setup"


@dataclass(frozen=True)
class FetchSuccess(Generic[T]):
    value: T


@dataclass(frozen=True)
class FetchFailure:
    """No hay datos disponibles para esta llamada."""

    kind: FailureKind
    message: str
    url: str
    status_code: int | None = None
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "url": self.url,
            "status_code": self.status_code,
            "detail": self.detail,
        }


FetchResult = Union[FetchSuccess[Any], FetchFailure]
