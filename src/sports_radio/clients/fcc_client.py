"""Async FCC query client: sequential requests with a fixed pause between them."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from sports_radio.sources import SOURCE_FOR_SERVICE, SOURCES, SourceConfig

logger = logging.getLogger(__name__)


class FCCFetchError(RuntimeError):
    """A query failed; the run should stop so someone can re-run it."""


class RequestPacer:
    """Enforces a minimum pause between consecutive requests."""

    def __init__(self, delay_seconds: float):
        self.min_interval = max(delay_seconds, 0.0)
        self._last_call: float | None = None

    async def acquire(self, min_interval: float | None = None) -> None:
        interval = self.min_interval if min_interval is None else min_interval
        if self._last_call is not None:
            elapsed = time.monotonic() - self._last_call
            if elapsed < interval:
                await asyncio.sleep(interval - elapsed)
        self._last_call = time.monotonic()


class FCCClient:
    """Async HTTP client for the FCC fmq/amq query pages and radio-locator.

    No retries: any transport error or non-200 response raises FCCFetchError.
    """

    def __init__(
        self,
        sources: dict[str, SourceConfig] | None = None,
        delay_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.sources = sources or SOURCES
        # Overrides every source's own delay when set
        self._delay = delay_seconds
        self._pacer = RequestPacer(0.0 if delay_seconds is None else delay_seconds)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(transport=self._transport, follow_redirects=True)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> FCCClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch_state(self, service: str, state: str) -> str:
        """All licensed stations of one band in a state, as pipe-delimited text."""
        config = self.sources[SOURCE_FOR_SERVICE[service]]
        logger.info("Fetching all %s %s stations...", state, service)
        return await self._get(config, {**config.params, "state": state})

    async def fetch_call_sign(self, call_sign: str, service: str) -> str:
        """One call sign's facilities, any state, as pipe-delimited text."""
        config = self.sources[SOURCE_FOR_SERVICE[service]]
        params = {**config.params, "call": call_sign, "freq": "", "fre2": ""}
        logger.info("Querying %s %s", call_sign, service)
        return await self._get(config, params)

    async def fetch_radio_locator(self, call_sign: str, state: str, service: str = "AM") -> str:
        """radio-locator.com finder page for a call sign (HTML)."""
        config = self.sources["radio_locator"]
        params = {"call": call_sign.lower(), "state": state.lower(), "service": service, **config.params}
        logger.info("Querying radio-locator: %s %s in %s", call_sign, service, state)
        return await self._get(config, params)

    async def _get(self, config: SourceConfig, params: dict) -> str:
        client = await self._get_client()
        await self._pacer.acquire(config.request_delay_seconds if self._delay is None else self._delay)
        try:
            resp = await client.get(config.base_url, params=params, timeout=config.timeout_seconds)
            resp.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            raise FCCFetchError(f"{config.name}: request failed ({exc})") from exc
        if resp.status_code != 200:
            raise FCCFetchError(f"{config.name}: HTTP {resp.status_code}")
        return resp.text
