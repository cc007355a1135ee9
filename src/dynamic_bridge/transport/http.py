"""
HTTP reachability probe for the frontend start URL.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from dynamic_bridge.errors import ConnectionError

logger = logging.getLogger(__name__)

USER_AGENT = "dynamic-bridge/1.0.0"


class ProbeResult:
    __slots__ = ("url", "ok", "status_code", "elapsed_ms", "error")

    def __init__(self, url: str, ok: bool, status_code: Optional[int] = None,
                 elapsed_ms: float = 0.0, error: Optional[str] = None):
        self.url = url
        self.ok = ok
        self.status_code = status_code
        self.elapsed_ms = elapsed_ms
        self.error = error

    def as_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "ok": self.ok,
            "status_code": self.status_code,
            "elapsed_ms": round(self.elapsed_ms, 1),
            "error": self.error,
        }

    def __repr__(self) -> str:
        return f"ProbeResult(url={self.url!r}, ok={self.ok}, status_code={self.status_code})"


class FrontendProbe:
    """Checks that the configured start URL answers before the panel preloads it."""

    def __init__(
        self,
        timeout: float = 10.0,
        attempts: int = 1,
        retry_delay: float = 1.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._attempts = max(attempts, 1)
        self._retry_delay = retry_delay
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "text/html,application/json"},
            timeout=timeout,
            follow_redirects=True,
        )

    async def probe(self, url: str) -> ProbeResult:
        last: Optional[ProbeResult] = None
        for attempt in range(1, self._attempts + 1):
            last = await self._probe_once(url)
            if last.ok:
                return last
            logger.debug("Probe attempt %d/%d for %s failed: %s", attempt, self._attempts, url, last.error)
            if attempt < self._attempts:
                await asyncio.sleep(self._retry_delay)
        return last  # type: ignore[return-value]

    async def require(self, url: str) -> ProbeResult:
        result = await self.probe(url)
        if not result.ok:
            raise ConnectionError(f"Frontend unreachable at {url}: {result.error}")
        return result

    async def _probe_once(self, url: str) -> ProbeResult:
        started = time.perf_counter()
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            return ProbeResult(url, ok=False, error=f"{type(e).__name__}: {e}")
        elapsed = (time.perf_counter() - started) * 1000
        if resp.status_code >= 400:
            return ProbeResult(url, ok=False, status_code=resp.status_code, elapsed_ms=elapsed,
                               error=f"HTTP {resp.status_code}: {resp.text[:200]}")
        return ProbeResult(url, ok=True, status_code=resp.status_code, elapsed_ms=elapsed)

    async def close(self) -> None:
        await self._client.aclose()
