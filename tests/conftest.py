"""
Shared fixtures: in-memory channel, destination and connector fakes.
"""

import asyncio
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from console_relay.core.exceptions import (
    ChannelClosedError,
    DestinationClosedError,
    DestinationConnectError,
    DestinationError,
)
from console_relay.core.interfaces.channel import ChannelMessage, IChannel
from console_relay.core.interfaces.connector import IDestination, IDestinationConnector


class FakeChannel(IChannel):
    """Channel driven by a queue; records everything the relay sends."""

    def __init__(self, remote: str = "127.0.0.1:50000") -> None:
        self._remote = remote
        self._inbox: "asyncio.Queue[Union[ChannelMessage, ChannelClosedError]]" = asyncio.Queue()
        self._open = True
        self.sent: List[ChannelMessage] = []
        self.close_code: Optional[int] = None
        self.send_gate: Optional[asyncio.Event] = None

    @property
    def remote(self) -> str:
        return self._remote

    @property
    def is_open(self) -> bool:
        return self._open

    def push(self, message: ChannelMessage) -> None:
        self._inbox.put_nowait(message)

    def disconnect(self, code: int = 1000) -> None:
        self._inbox.put_nowait(ChannelClosedError("Client disconnected", code))

    async def send(self, message: ChannelMessage) -> None:
        if self.send_gate is not None:
            await self.send_gate.wait()
        if not self._open:
            raise ChannelClosedError("Channel is not open")
        self.sent.append(message)

    async def receive(self) -> ChannelMessage:
        item = await self._inbox.get()
        if isinstance(item, ChannelClosedError):
            self._open = False
            raise item
        return item

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.close_code is None:
            self.close_code = code
        self._open = False


class FakeDestination(IDestination):
    """Destination whose inbound chunks are fed by the test."""

    def __init__(self, host: str, port: int, connector: "FakeConnector") -> None:
        self._host = host
        self._port = port
        self._connector = connector
        self._chunks: "asyncio.Queue[Union[bytes, BaseException]]" = asyncio.Queue()
        self._closed = False
        self.written: List[bytes] = []
        self.write_error: Optional[DestinationError] = None

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def is_open(self) -> bool:
        return not self._closed

    def feed(self, data: bytes) -> None:
        self._chunks.put_nowait(data)

    def feed_eof(self) -> None:
        self._chunks.put_nowait(b"")

    def fail(self, error: BaseException) -> None:
        self._chunks.put_nowait(error)

    @property
    def pending(self) -> int:
        """Chunks fed but not yet read."""
        return self._chunks.qsize()

    async def read(self) -> bytes:
        if self._closed:
            raise DestinationClosedError()
        item = await self._chunks.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise DestinationClosedError()
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)

    async def close(self) -> None:
        self.abort()

    def abort(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._connector.closes += 1


class FakeConnector(IDestinationConnector):
    """Connector that counts opened and closed destinations."""

    def __init__(self) -> None:
        self.opens = 0
        self.closes = 0
        self.max_open = 0
        self.calls: List[Tuple[str, int]] = []
        self.destinations: List[FakeDestination] = []
        self.failures: Dict[Tuple[str, int], DestinationConnectError] = {}
        self.gates: Dict[Tuple[str, int], asyncio.Event] = {}

    @property
    def open_count(self) -> int:
        return self.opens - self.closes

    def hold(self, host: str, port: int) -> asyncio.Event:
        """Make dials to host:port wait until the returned event is set."""
        gate = asyncio.Event()
        self.gates[(host, port)] = gate
        return gate

    def get_stats(self) -> Dict[str, int]:
        return {"total_connections": self.opens, "active_connections": self.open_count}

    async def connect(self, host: str, port: int) -> FakeDestination:
        self.calls.append((host, port))

        gate = self.gates.get((host, port))
        if gate is not None:
            await gate.wait()

        error = self.failures.get((host, port))
        if error is not None:
            raise error

        destination = FakeDestination(host, port, self)
        self.opens += 1
        self.max_open = max(self.max_open, self.open_count)
        self.destinations.append(destination)
        return destination


async def _eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def eventually() -> Callable:
    """Await until a predicate holds, failing after a timeout."""
    return _eventually


@pytest.fixture
def make_channel() -> Callable[..., FakeChannel]:
    return FakeChannel
