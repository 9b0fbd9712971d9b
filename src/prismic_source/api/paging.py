"""Bulk document retrieval."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from prismic_source.api.client import MAX_PAGE_SIZE, PrismicClient


logger = logging.getLogger(__name__)


async def fetch_all_documents(
    client: PrismicClient,
    *,
    lang: str = "*",
    fetch_links: Sequence[str] = (),
    ref: str | None = None,
    page_size: int = MAX_PAGE_SIZE,
) -> list[dict[str, Any]]:
    """Collect every document visible at *ref* (master when omitted).

    Pages are requested in order until ``page * page_size`` reaches the
    reported ``total_results_size``. A failing page aborts the whole fetch.
    """

    ref = ref or await client.master_ref()
    documents: list[dict[str, Any]] = []
    page = 1
    while True:
        payload = await client.query(ref=ref, page=page, page_size=page_size, lang=lang, fetch_links=fetch_links)
        documents.extend(payload.get("results") or [])
        total = int(payload.get("total_results_size") or 0)
        if page * page_size >= total:
            break
        page += 1

    logger.info("Fetched %s documents in %s page(s)", len(documents), page)
    return documents
