"""Contrato del fetcher firmado que consume el agregador.

Reglas de diseño:
- `get` es asíncrono porque hace I/O (HTTP) y puede esperar entre reintentos.
- Nunca lanza por fallos de red/API: devuelve `FetchFailure`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ApiCredentials, BasicAuthCredentials
from core.domain.results import FetchResult


@runtime_checkable
class SignedGetter(Protocol):
    async def get(
        self,
        *,
        base_url: str,
        route: str,
        credentials: ApiCredentials,
        basic_auth: BasicAuthCredentials | None,
        method: str = "GET",
        params: dict[str, str] | None = None,
    ) -> FetchResult:
        """Ejecuta un GET firmado y devuelve el payload JSON o un fallo clasificado."""

        ...

    def reset_budget(self) -> None:
        """Reinicia el contador compartido de fallos (nueva ejecución)."""

        ...
