"""Contratos de firma de requests.

Por qué Protocol:
- La firma OAuth es una función pura provista por un adaptador (oauthlib).
- El fetcher solo conoce la forma de la función, no el algoritmo: en tests se
  puede sustituir por una firma fija o por una que falle.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class AuthParamsFactory(Protocol):
    """Genera los parámetros OAuth (nonce/timestamp/...) para un consumer key."""

    def __call__(self, consumer_key: str) -> dict[str, str]:
        ...


class RequestSigner(Protocol):
    """Firma `(method, url, params)` con el secret compartido."""

    def __call__(
        self,
        method: str,
        url: str,
        params: Mapping[str, str],
        secret: str,
    ) -> str:
        ...
