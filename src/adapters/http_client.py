"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y la conversión de Basic auth.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.models import BasicAuthCredentials


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros para la REST API.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las llamadas se comporten igual.
    - `transport` permite sustituir la red en tests sin parchear httpx.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def to_httpx_auth(basic_auth: BasicAuthCredentials | None) -> httpx.BasicAuth | None:
    if basic_auth is None:
        return None
    return httpx.BasicAuth(basic_auth.username, basic_auth.password)
