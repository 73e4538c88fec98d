"""
单元测试：HTTP 探测器（使用 httpx.MockTransport）
"""

import asyncio

import httpx
import pytest

from uptime_monitor.prober import HttpProber


def run_probe(prober: HttpProber, transport: httpx.MockTransport):
    async def _run():
        async with httpx.AsyncClient(transport=transport) as client:
            await prober.probe_once(client)

    asyncio.run(_run())


class TestHttpProber:

    def test_response_reported_as_success(self):
        successes = []
        prober = HttpProber(
            "example.com",
            on_success=lambda code, body, headers, timing: successes.append((code, timing)),
            on_failure=lambda error, code: pytest.fail("unexpected failure"),
        )
        transport = httpx.MockTransport(lambda request: httpx.Response(503))

        run_probe(prober, transport)

        assert successes[0][0] == 503
        assert successes[0][1].total_time >= 0

    def test_transport_error_reported_as_failure(self):
        failures = []

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        prober = HttpProber(
            "http://example.com",
            on_success=lambda *args: pytest.fail("unexpected success"),
            on_failure=lambda error, code: failures.append((error, code)),
        )

        run_probe(prober, httpx.MockTransport(handler))

        assert isinstance(failures[0][0], httpx.ConnectError)
        assert failures[0][1] is None

    def test_uses_head_request(self):
        methods = []

        def handler(request):
            methods.append((request.method, request.url.scheme, request.url.host))
            return httpx.Response(200)

        prober = HttpProber("example.com", on_success=lambda *a: None, on_failure=lambda *a: None)
        run_probe(prober, httpx.MockTransport(handler))

        assert methods == [("HEAD", "http", "example.com")]

    def test_interval_must_exceed_timeout(self):
        with pytest.raises(ValueError):
            HttpProber("http://a", on_success=None, on_failure=None, interval=2, timeout=2)

    def test_empty_url(self):
        with pytest.raises(ValueError):
            HttpProber("", on_success=None, on_failure=None)

    def test_start_stop_loop(self):
        codes = []
        prober = HttpProber(
            "http://example.com",
            on_success=lambda code, *rest: codes.append(code),
            on_failure=lambda *a: None,
            interval=0.02,
            timeout=0.01,
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
        )

        async def _run():
            prober.start()
            await asyncio.sleep(0.07)
            prober.stop()

        asyncio.run(_run())

        assert len(codes) >= 2
        assert prober.running is False
