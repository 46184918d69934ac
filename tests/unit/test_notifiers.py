import io

import pytest

from discount_monitor.alerts.notifiers import ConsoleGateway


@pytest.mark.asyncio
async def test_console_gateway_prints_and_reports_success():
    buf = io.StringIO()
    gw = ConsoleGateway(stream=buf)

    res = await gw.send("111", "hello")

    assert res.ok is True
    assert "111" in buf.getvalue()
    assert "hello" in buf.getvalue()


@pytest.mark.asyncio
async def test_console_gateway_closed_stream_is_a_failure():
    buf = io.StringIO()
    buf.close()
    res = await ConsoleGateway(stream=buf).send("111", "hello")
    assert res.ok is False
