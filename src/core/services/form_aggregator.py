"""Form discovery and field-detail aggregation.

This module owns the two logical API calls of a run: list every form, then
fetch the field detail of each admitted form. Filtering happens up front
(filter-then-map) so the detail loop only sees forms it must fetch, and the
loop itself is strictly sequential to keep load on the remote site bounded.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from core.domain.models import (
    AggregationFilters,
    ApiCredentials,
    BasicAuthCredentials,
    FormDetail,
    FormSummary,
)
from core.domain.results import FetchFailure, FetchResult, FetchSuccess
from core.interfaces.fetcher import SignedGetter

logger = logging.getLogger(__name__)

WP_ROUTE = "/wp-json"
GF_ROUTE = "/gf/v2"
FORMS_ROUTE = "/forms"
FORMS_LISTING_ROUTE = WP_ROUTE + GF_ROUTE + FORMS_ROUTE

ResultMapping = dict[str, FormDetail | FetchFailure]

_WHITESPACE_RE = re.compile(r"\s+")
_NON_WORD_RE = re.compile(r"[^\w\-]+", re.ASCII)
_DASH_RUN_RE = re.compile(r"-{2,}")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def slugify(text: object) -> str:
    """URL-safe slug from a human readable title ("Contact Us!" -> "contact-us")."""

    value = str(text).strip().lower()
    value = _WHITESPACE_RE.sub("-", value)
    value = _NON_WORD_RE.sub("", value)
    value = _DASH_RUN_RE.sub("-", value)
    return value.strip("-")


def form_key(form_id: int) -> str:
    return f"form-{form_id}"


def detail_route(form_id: object) -> str:
    return f"{FORMS_LISTING_ROUTE}/{form_id}"


def _iter_listing(listing: Any) -> Iterable[Any]:
    # The API returns an object keyed by form id; tolerate a plain list too.
    if isinstance(listing, Mapping):
        return listing.values()
    if isinstance(listing, list):
        return listing
    logger.warning("Unexpected forms listing payload (%s); treating it as empty", type(listing).__name__)
    return ()


def _parse_form_id(summary: Mapping[str, Any]) -> int | None:
    # Leading integer prefix only: "12abc" -> 12, 1.0 -> 1, "abc" -> None.
    match = _LEADING_INT_RE.match(str(summary.get("id")))
    if match is None:
        return None
    return int(match.group(1))


def admit_forms(listing: Any, filters: AggregationFilters | None = None) -> list[FormSummary]:
    """Return cloned, `entries`-free summaries of the forms that pass `filters`.

    Order follows the listing. The id is read from its leading integer prefix;
    summaries without one are skipped.
    """

    filters = filters or AggregationFilters()
    admitted: list[FormSummary] = []
    for raw in _iter_listing(listing):
        if not isinstance(raw, Mapping):
            continue
        summary = dict(raw)
        form_id = _parse_form_id(summary)
        if form_id is None:
            logger.warning("Skipping form with non-numeric id: %r", summary.get("id"))
            continue
        if not filters.admits(form_id):
            continue
        summary["id"] = form_id
        summary.pop("entries", None)
        admitted.append(summary)
    return admitted


class FormAggregator:
    """Lists forms and enriches each admitted one with its field detail."""

    def __init__(self, fetcher: SignedGetter) -> None:
        self._fetcher = fetcher

    async def list_forms(
        self,
        *,
        basic_auth: BasicAuthCredentials | None,
        credentials: ApiCredentials,
        base_url: str,
    ) -> FetchResult:
        logger.debug("Fetching form ids")
        return await self._fetcher.get(
            base_url=base_url,
            route=FORMS_LISTING_ROUTE,
            credentials=credentials,
            basic_auth=basic_auth,
        )

    async def fetch_form_detail(
        self,
        *,
        basic_auth: BasicAuthCredentials | None,
        credentials: ApiCredentials,
        base_url: str,
        form: FormSummary,
    ) -> FetchResult:
        logger.debug("Fetching fields for form %s", form.get("id"))

        route = detail_route(form.get("id"))
        result = await self._fetcher.get(
            base_url=base_url,
            route=route,
            credentials=credentials,
            basic_auth=basic_auth,
        )
        if isinstance(result, FetchFailure):
            return result

        payload = result.value
        if not isinstance(payload, Mapping):
            payload = {"data": payload}
        detail: FormDetail = {
            **payload,
            "slug": slugify(form.get("title", "")),
            "apiURL": base_url + route,
        }
        return FetchSuccess(detail)

    async def collect(
        self,
        *,
        basic_auth: BasicAuthCredentials | None,
        credentials: ApiCredentials,
        base_url: str,
        filters: AggregationFilters | None = None,
    ) -> FetchResult:
        """Run one aggregation: `FetchSuccess(ResultMapping)` or the listing failure."""

        self._fetcher.reset_budget()

        listing = await self.list_forms(
            basic_auth=basic_auth,
            credentials=credentials,
            base_url=base_url,
        )
        if isinstance(listing, FetchFailure):
            return listing

        forms: ResultMapping = {}
        if not listing.value:
            logger.info("We could not find any forms. Have you made any?")
            return FetchSuccess(forms)

        for summary in admit_forms(listing.value, filters):
            detail = await self.fetch_form_detail(
                basic_auth=basic_auth,
                credentials=credentials,
                base_url=base_url,
                form=summary,
            )
            forms[form_key(summary["id"])] = detail.value if isinstance(detail, FetchSuccess) else detail

        return FetchSuccess(forms)
