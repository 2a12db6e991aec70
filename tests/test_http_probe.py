from __future__ import annotations

import asyncio
import socket

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from tunnelward import HttpProbe, ProbeOutcome

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]


def make_app() -> web.Application:
    app = web.Application()

    async def index(_: web.Request) -> web.Response:
        return web.Response(text="<h1>Welcome to web-server-1</h1>")

    async def bad_gateway(_: web.Request) -> web.Response:
        return web.Response(status=502, text="upstream not ready")

    async def slow(_: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.Response(text="late")

    app.router.add_get("/", index)
    app.router.add_get("/bad-gateway", bad_gateway)
    app.router.add_get("/slow", slow)
    return app


@pytest.fixture
async def server():
    srv = TestServer(make_app())
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture
def base_url(server: TestServer) -> str:
    return f"http://{server.host}:{server.port}"


def closed_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestCheck:
    async def test_reachable_without_marker(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/").check()
        assert outcome.ready
        assert "Welcome" in outcome.text

    async def test_marker_present(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/", expect_text="web-server-1").check()
        assert outcome.ready

    async def test_marker_absent(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/", expect_text="web-server-2").check()
        assert not outcome.ready
        assert "web-server-1" in outcome.text

    async def test_error_status_not_ready(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/bad-gateway").check()
        assert outcome == ProbeOutcome(ready=False, text="upstream not ready")

    async def test_head_request(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/", method="HEAD").check()
        assert outcome == ProbeOutcome(ready=True, text="")

    async def test_timeout_not_ready(self, base_url: str):
        outcome = await HttpProbe(f"{base_url}/slow", timeout=0.2).check()
        assert outcome == ProbeOutcome(ready=False, text="")

    async def test_unreachable_not_ready(self):
        outcome = await HttpProbe(f"http://127.0.0.1:{closed_port()}/").check()
        assert outcome == ProbeOutcome(ready=False, text="")


class TestSyncCall:
    def test_unreachable_endpoint(self):
        probe = HttpProbe(f"http://127.0.0.1:{closed_port()}/", timeout=1)
        assert probe() == ProbeOutcome(ready=False, text="")

    @pytest.mark.filterwarnings("ignore::RuntimeWarning")
    async def test_inside_running_loop_needs_check(self, base_url: str):
        probe = HttpProbe(f"{base_url}/")
        with pytest.raises(RuntimeError):
            probe()
        assert (await probe.check()).ready
