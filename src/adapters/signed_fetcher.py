"""GET firmado con reintentos acotados.

Política de resiliencia:
- Espera fija entre intentos (sin backoff exponencial).
- Un único contador de fallos compartido por *todas* las llamadas del fetcher:
  al llegar al techo, cualquier fallo posterior se reporta sin reintentar.
- Nunca lanza por fallos de red/API: devuelve `FetchFailure` clasificado.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from adapters.http_client import to_httpx_auth
from adapters.oauth_signer import new_oauth_parameters, sign_request
from core.domain.models import ApiCredentials, BasicAuthCredentials, RequestDescriptor
from core.domain.results import FailureKind, FetchFailure, FetchResult, FetchSuccess
from core.interfaces.signer import AuthParamsFactory, RequestSigner

logger = logging.getLogger(__name__)

DEFAULT_MAX_GLOBAL_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 5.0

API_NAME = "Gravity Forms API"


class MalformedResponseError(ValueError):
    """La API respondió 2xx pero el cuerpo no es JSON válido."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"Malformed JSON body from {response.request.url}")
        self.response = response


class AttemptBudget:
    """Contador de fallos compartido (circuit breaker grueso).

    Vive mientras viva el fetcher; `FormAggregator.collect` lo reinicia al
    comienzo de cada ejecución.
    """

    def __init__(self, ceiling: int = DEFAULT_MAX_GLOBAL_ATTEMPTS) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be >= 1")
        self.ceiling = ceiling
        self.failures = 0

    @property
    def exhausted(self) -> bool:
        return self.failures >= self.ceiling

    def record_failure(self) -> int:
        self.failures += 1
        return self.failures

    def reset(self) -> None:
        self.failures = 0


def classify_error(exc: BaseException, url: str) -> FetchFailure:
    """Clasifica un fallo terminal según en qué punto del request ocurrió."""

    response = getattr(exc, "response", None)
    if isinstance(exc, (httpx.HTTPStatusError, MalformedResponseError)) and response is not None:
        return FetchFailure(
            kind=FailureKind.RESPONSE,
            message="Request was made, but there was an issue",
            url=url,
            status_code=response.status_code,
            detail=f"Error {response.status_code} from {API_NAME}",
        )

    # Errores locales del transporte: el request nunca salió.
    if isinstance(exc, (httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
        return FetchFailure(
            kind=FailureKind.SETUP,
            message="Something happened setting up the request",
            url=url,
            detail=str(exc) or type(exc).__name__,
        )

    if isinstance(exc, httpx.RequestError):
        return FetchFailure(
            kind=FailureKind.NO_RESPONSE,
            message="Request was made, but no response",
            url=url,
            detail=f"No response from {API_NAME} ({type(exc).__name__})",
        )

    return FetchFailure(
        kind=FailureKind.SETUP,
        message="Something happened setting up the request",
        url=url,
        detail=str(exc) or type(exc).__name__,
    )


class SignedFetcher:
    """Ejecuta GETs firmados (OAuth 1.0a en query + Basic auth) contra la API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        budget: AttemptBudget | None = None,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
        auth_params_factory: AuthParamsFactory = new_oauth_parameters,
        signer: RequestSigner = sign_request,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.budget = budget or AttemptBudget()
        self._retry_delay_seconds = retry_delay_seconds
        self._auth_params_factory = auth_params_factory
        self._signer = signer
        self._sleep = sleep

    def reset_budget(self) -> None:
        self.budget.reset()

    async def get(
        self,
        *,
        base_url: str,
        route: str,
        credentials: ApiCredentials,
        basic_auth: BasicAuthCredentials | None,
        method: str = "GET",
        params: dict[str, Any] | None = None,
    ) -> FetchResult:
        url = f"{base_url}{route}"
        descriptor: RequestDescriptor | None = None

        while True:
            try:
                # Un descriptor inválido (p.ej. base_url=None) es un fallo de setup, no una excepción.
                if descriptor is None:
                    descriptor = RequestDescriptor(
                        base_url=base_url,
                        route=route,
                        method=method,
                        params={str(k): str(v) for k, v in (params or {}).items()},
                    )
                payload = await self._send(descriptor, credentials, basic_auth)
                return FetchSuccess(payload)
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
                attempt = self.budget.record_failure()
                logger.warning("Gravity Forms fetch attempt %s failed: %s", attempt, url)
                if self.budget.exhausted:
                    failure = classify_error(exc, url)
                    logger.error(
                        "%s: %s (%s)",
                        failure.message,
                        failure.detail,
                        failure.url,
                    )
                    return failure
                await self._sleep(self._retry_delay_seconds)

    async def _send(
        self,
        descriptor: RequestDescriptor,
        credentials: ApiCredentials,
        basic_auth: BasicAuthCredentials | None,
    ) -> Any:
        # Nonce/timestamp nuevos en cada intento: la firma no es reutilizable.
        auth_params = self._auth_params_factory(credentials.key)
        signed_params = {**auth_params, **descriptor.params}
        signature = self._signer(descriptor.method, descriptor.url, signed_params, credentials.secret)

        response = await self._client.get(
            descriptor.url,
            params={**signed_params, "oauth_signature": signature},
            auth=to_httpx_auth(basic_auth),
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(response) from exc
