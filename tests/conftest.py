"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from adapters.signed_fetcher import AttemptBudget, SignedFetcher
from core.domain.models import ApiCredentials, BasicAuthCredentials
from core.services.form_aggregator import FORMS_LISTING_ROUTE

BASE_URL = "https://example.com"
LISTING_URL = BASE_URL + FORMS_LISTING_ROUTE


class FakeFormsApi:
    """In-memory stand-in for the Gravity Forms REST API.

    `failures` maps a URL path to a queue of outcomes served before the real
    answer: an int is returned as that HTTP status, the string "connect" raises
    `httpx.ConnectError`.
    """

    def __init__(
        self,
        listing: Any,
        details: dict[str, Any] | None = None,
        failures: dict[str, list[Any]] | None = None,
    ) -> None:
        self.listing = listing
        self.details = details if details is not None else self._details_from_listing(listing)
        self.failures = failures or {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _details_from_listing(listing: Any) -> dict[str, Any]:
        if not isinstance(listing, dict):
            return {}
        details: dict[str, Any] = {}
        for summary in listing.values():
            form_id = str(summary["id"])
            details[form_id] = {
                "id": form_id,
                "title": summary.get("title"),
                "fields": [{"id": 1, "type": "text", "label": "Name"}],
            }
        return details

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        queue = self.failures.get(path)
        if queue:
            outcome = queue.pop(0)
            if outcome == "connect":
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(outcome, json={"code": "rest_error"})

        if path == FORMS_LISTING_ROUTE:
            return httpx.Response(200, json=self.listing)

        form_id = path.rsplit("/", 1)[-1]
        if form_id in self.details:
            return httpx.Response(200, json=self.details[form_id])
        return httpx.Response(404, json={"code": "not_found"})


def make_listing(*forms: tuple[int, str]) -> dict[str, Any]:
    return {
        str(form_id): {"id": str(form_id), "title": title, "entries": "3"}
        for form_id, title in forms
    }


@pytest.fixture
def credentials() -> ApiCredentials:
    return ApiCredentials(key="ck_test", secret="cs_test")


@pytest.fixture
def basic_auth() -> BasicAuthCredentials:
    return BasicAuthCredentials(username="staging", password="hunter2")


@pytest.fixture
def sleeps() -> list[float]:
    """Records every retry wait instead of actually sleeping."""

    return []


@pytest.fixture
def fetcher_factory(sleeps: list[float]) -> Iterator[Callable[..., SignedFetcher]]:
    clients: list[httpx.AsyncClient] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    def factory(api: Callable[[httpx.Request], httpx.Response], ceiling: int = 3, **kwargs: Any) -> SignedFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(api))
        clients.append(client)
        return SignedFetcher(client, budget=AttemptBudget(ceiling), sleep=fake_sleep, **kwargs)

    yield factory

    for client in clients:
        asyncio.run(client.aclose())
