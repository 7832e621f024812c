import asyncio
from contextlib import suppress

import pytest
import websockets

from client.ws_client import MessagingClient
from conftest import default_server_ws
from server.server import EchoServer


async def start_echo_server(port):
    server = EchoServer(host="127.0.0.1", port=port)
    task = asyncio.create_task(server.start_server())
    await asyncio.sleep(0.2)
    return server, task


async def stop(task):
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_counted_messages_are_echoed_in_order(unused_tcp_port):
    server, task = await start_echo_server(unused_tcp_port)
    records = []
    client = MessagingClient(
        default_server_ws(unused_tcp_port),
        interval=0.05,
        max_messages=3,
        sink=lambda message: records.append(message.to_record()),
    )

    try:
        assert await asyncio.wait_for(client.run(), timeout=5.0) is True
    finally:
        await stop(task)

    assert records == [
        {"messageLength": len(f"send message count: {n}"), "messageType": "text", "messageData": f"send message count: {n}"}
        for n in (1, 2, 3)
    ]
    assert client.close_code == 1000
    assert server.frames_echoed == 3


@pytest.mark.asyncio
async def test_echo_server_preserves_frame_kind(unused_tcp_port):
    server, task = await start_echo_server(unused_tcp_port)
    try:
        async with websockets.connect(default_server_ws(unused_tcp_port)) as ws:
            await ws.send("hello")
            assert await asyncio.wait_for(ws.recv(), timeout=1.0) == "hello"

            await ws.send(b"\x00\x01\x02")
            assert await asyncio.wait_for(ws.recv(), timeout=1.0) == b"\x00\x01\x02"

            assert server.get_status()["open_connections"] == 1
    finally:
        await stop(task)

    assert server.get_status()["frames_echoed"] == 2


@pytest.mark.asyncio
async def test_server_pushed_text_and_binary_frames_are_logged(unused_tcp_port):
    payload = bytes(range(10))

    async def push(websocket):
        await websocket.send("hello")
        await websocket.send(payload)
        await websocket.close()

    records = []
    async with websockets.serve(push, "127.0.0.1", unused_tcp_port):
        client = MessagingClient(
            default_server_ws(unused_tcp_port),
            interval=10,
            sink=lambda message: records.append(message.to_record()),
        )
        assert await asyncio.wait_for(client.run(), timeout=5.0) is True

    assert records == [
        {"messageLength": 5, "messageType": "text", "messageData": "hello"},
        {"messageLength": 10, "messageType": "binary", "messageData": payload},
    ]
    assert client.counter.value == 0


@pytest.mark.asyncio
async def test_oversized_frame_closes_connection(unused_tcp_port):
    async def push(websocket):
        await websocket.send(b"x" * 2048)
        with suppress(websockets.exceptions.ConnectionClosed):
            await websocket.wait_closed()

    records = []
    errors = []

    async def on_error(error):
        errors.append(error)

    async with websockets.serve(push, "127.0.0.1", unused_tcp_port):
        client = MessagingClient(
            default_server_ws(unused_tcp_port),
            interval=10,
            max_size=1024,
            sink=lambda message: records.append(message),
        )
        client.on("error", on_error)
        await asyncio.wait_for(client.run(), timeout=5.0)

    assert records == []
    assert len(errors) == 1
    assert isinstance(errors[0], websockets.exceptions.ConnectionClosedError)
    assert client.state.value == "closed"
