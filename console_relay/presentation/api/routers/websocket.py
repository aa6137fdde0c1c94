"""
WebSocket relay endpoint.

Adapts Starlette WebSockets to the relay's channel interface and hands each
accepted socket to the session registry.
"""

from typing import Optional

from fastapi import WebSocket
from loguru import logger
from starlette.websockets import WebSocketState

from ....core.exceptions import ChannelClosedError, SessionRejectedError
from ....core.interfaces.channel import ChannelMessage, IChannel
from ..dependencies import get_registry


class WebSocketChannel(IChannel):
    """Message channel backed by an accepted Starlette WebSocket."""

    def __init__(self, websocket: WebSocket):
        self._websocket = websocket
        self._closed = False
        client = websocket.client
        self._remote = f"{client.host}:{client.port}" if client else "unknown"

    @property
    def remote(self) -> str:
        return self._remote

    @property
    def is_open(self) -> bool:
        return (not self._closed
                and self._websocket.client_state == WebSocketState.CONNECTED
                and self._websocket.application_state == WebSocketState.CONNECTED)

    async def send(self, message: ChannelMessage) -> None:
        if not self.is_open:
            raise ChannelClosedError("Channel is not open")

        try:
            if isinstance(message, bytes):
                await self._websocket.send_bytes(message)
            else:
                await self._websocket.send_text(message)
        except Exception as e:
            self._closed = True
            raise ChannelClosedError(f"Send failed: {e}") from e

    async def receive(self) -> ChannelMessage:
        if self._closed:
            raise ChannelClosedError("Channel is not open")

        try:
            event = await self._websocket.receive()
        except Exception as e:
            self._closed = True
            raise ChannelClosedError(f"Receive failed: {e}") from e

        if event["type"] == "websocket.disconnect":
            self._closed = True
            code = event.get("code", 1000)
            raise ChannelClosedError(f"Client disconnected with code {code}", code)

        text: Optional[str] = event.get("text")
        if text is not None:
            return text
        return event.get("bytes") or b""

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self._closed = True
        if (self._websocket.application_state != WebSocketState.CONNECTED
                or self._websocket.client_state != WebSocketState.CONNECTED):
            return

        try:
            await self._websocket.close(code=code, reason=reason)
        except Exception as e:
            logger.debug(f"Error closing WebSocket for {self._remote}: {e}")


async def relay_endpoint(websocket: WebSocket) -> None:
    """Accept a browser connection and relay it until either side goes away."""
    registry = get_registry(websocket)
    await websocket.accept()

    channel = WebSocketChannel(websocket)
    logger.info(f"WebSocket connection from {channel.remote}")

    try:
        await registry.serve(channel)
    except SessionRejectedError as e:
        logger.warning(f"Rejected WebSocket from {channel.remote}: {e.message}")
        await channel.close(e.close_code, e.message)
