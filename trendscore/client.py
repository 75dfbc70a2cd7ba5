"""Sync HTTP client for the Trendscore API."""

from __future__ import annotations

from typing import Any

import httpx

from trendscore.state import DEFAULT_PORT


class TrendscoreClient:
    """Sync httpx client wrapping the Trendscore HTTP API."""

    def __init__(self, base_url: str | None = None, timeout: float = 30.0):
        url = base_url or f"http://localhost:{DEFAULT_PORT}/api"
        self._client = httpx.Client(base_url=url, timeout=timeout)

    # ── lifecycle ─────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> TrendscoreClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── helpers ───────────────────────────────────────────────

    def _post(self, path: str, **kwargs: Any) -> dict:
        r = self._client.post(path, json=kwargs)
        r.raise_for_status()
        return r.json()

    def _get(self, path: str, params: dict | None = None) -> Any:
        r = self._client.get(path, params=params)
        r.raise_for_status()
        return r.json()

    # ── health ────────────────────────────────────────────────

    def health(self) -> dict:
        return self._get("/health")

    def policies(self) -> dict:
        return self._get("/policies")

    # ── scoring ───────────────────────────────────────────────

    def scoreFull(
        self,
        item_id: int,
        windows: list[dict] | None = None,
        events: list[dict] | None = None,
        period: str | int | None = None,
    ) -> dict:
        return self._post(
            "/score/full",
            item_id=item_id,
            period=period,
            windows=windows or [],
            events=events or [],
        )

    def scoreDirect(self, item_id: int, counters: dict, period: str | int | None = None) -> dict:
        return self._post("/score/direct", item_id=item_id, period=period, counters=counters)

    def scoreApprox(self, item_id: int, counters: dict, period: str | int | None = None) -> dict:
        return self._post("/score/approx", item_id=item_id, period=period, counters=counters)

    # ── ranking ───────────────────────────────────────────────

    def rank(
        self,
        items: list[dict],
        period: str | int | None = None,
        strategy: str | None = None,
        top_n: int | None = None,
    ) -> dict:
        return self._post("/rank", items=items, period=period, strategy=strategy, top_n=top_n)
