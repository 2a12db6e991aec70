"""HTTP readiness probe for load balancers and web frontends."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal

import aiohttp
from loguru import logger

from tunnelward.types import ProbeOutcome


@dataclass(frozen=True, slots=True)
class HttpProbe:
    """Readiness probe for an HTTP endpoint (e.g. a load balancer frontend).

    Ready when the endpoint answers with a status below 400 and, if
    ``expect_text`` is set, the body contains it. An unreachable endpoint
    is simply not ready yet.

    Example:
        >>> probe = HttpProbe("http://203.0.113.10", expect_text="Welcome")
        >>> ReadinessPoller().wait(probe, interval=5, deadline=120)
    """

    url: str
    expect_text: str | None = None
    method: Literal["GET", "HEAD"] = "GET"
    timeout: float = 5.0

    async def check(self) -> ProbeOutcome:
        log = logger.bind(component="http")
        client_timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session, session.request(
                self.method, self.url
            ) as resp:
                status = resp.status
                body = "" if self.method == "HEAD" else await resp.text(errors="replace")
        except (aiohttp.ClientError, TimeoutError) as e:
            log.debug(f"{self.method} {self.url} unreachable: {type(e).__name__}: {e}")
            return ProbeOutcome(ready=False)

        if status >= 400:
            log.debug(f"{self.method} {self.url} -> HTTP {status}")
            return ProbeOutcome(ready=False, text=body)

        ready = self.expect_text is None or self.expect_text in body
        log.debug(f"{self.method} {self.url} -> HTTP {status}, ready={ready}")
        return ProbeOutcome(ready=ready, text=body)

    def __call__(self) -> ProbeOutcome:
        """Run ``check`` on a fresh event loop. Async callers should ``await probe.check()``."""
        return asyncio.run(self.check())
