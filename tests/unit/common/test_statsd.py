"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Test that StatsClient works as advertised.

"""
from graphbr.common import statsd
from typing import Any

import asyncio
import pytest
import socket


class _Protocol(asyncio.DatagramProtocol):
    def __init__(self, queue: asyncio.Queue):
        self.received_queue = queue

    def datagram_received(self, data: bytes, addr: tuple[str | Any, int]) -> None:
        self.received_queue.put_nowait(data)


async def _receiver() -> tuple[asyncio.DatagramTransport, asyncio.Queue, int]:
    loop = asyncio.get_running_loop()
    received: asyncio.Queue = asyncio.Queue()
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    transport, _ = await loop.create_datagram_endpoint(lambda: _Protocol(received), sock=sock)
    port = transport.get_extra_info("socket").getsockname()[-1]
    return transport, received, port


async def test_statsd() -> None:
    transport, received, port = await _receiver()
    try:
        # Ensure that no config = no action
        c = statsd.StatsClient(config=None)
        c.increase("foo")

        c = statsd.StatsClient(config=statsd.StatsdConfig(port=port))
        c.increase("bar")

        data = await received.get()
        assert data == b"bar:1|c"

        c.gauge("spaces", 3, tags={"cluster": "c1"})
        assert await received.get() == b"spaces,cluster=c1:3|g"

        with c.timing_manager("sync_timing"):
            pass
        data = await received.get()
        assert data.startswith(b"sync_timing,success=1:") and data.endswith(b"|ms")

        with pytest.raises(ValueError):
            async with c.async_timing_manager("async_timing"):
                raise ValueError("failed")
        data = await received.get()
        assert data.startswith(b"async_timing,success=0:") and data.endswith(b"|ms")
    finally:
        transport.close()


async def test_statsd_datadog_tags() -> None:
    transport, received, port = await _receiver()
    try:
        c = statsd.StatsClient(
            config=statsd.StatsdConfig(port=port, message_format=statsd.MessageFormat.datadog, tags={"cluster": "c1"})
        )
        c.increase("graphbr_transfer_failure", tags={"phase": "upload_meta", "flag": None})
        assert await received.get() == b"graphbr_transfer_failure:1|c|#cluster:c1,phase:upload_meta,flag"
    finally:
        transport.close()
