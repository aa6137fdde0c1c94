"""
TCP destination connector.

Dials outbound TCP connections with asyncio streams and wraps each one in a
``TCPDestination`` handle with idle-timeout detection.
"""

import asyncio
import errno
import socket
import time
from typing import Any, Callable, Dict, Optional

from loguru import logger

from ...core.exceptions import (
    ConnectFailure,
    DestinationClosedError,
    DestinationConnectError,
    DestinationError,
    DestinationTimeoutError,
)
from ...core.interfaces.connector import IDestination, IDestinationConnector
from ..config.models import DestinationConfig
from .stats import ConnectionStats, ConnectorStats

_UNREACHABLE_ERRNOS = {errno.ENETUNREACH, errno.EHOSTUNREACH}


class TCPDestination(IDestination):
    """Established TCP connection to a destination."""

    def __init__(
        self,
        host: str,
        port: int,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        read_buffer_size: int = 8192,
        idle_timeout: float = 0.0,
        on_close: Optional[Callable[["TCPDestination"], None]] = None
    ):
        self._host = host
        self._port = port
        self._reader = reader
        self._writer = writer
        self._read_buffer_size = read_buffer_size
        self._idle_timeout = idle_timeout
        self._on_close = on_close
        self._closed = False
        self._stats = ConnectionStats(connection_time=time.time())

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def is_open(self) -> bool:
        return not self._closed

    @property
    def stats(self) -> ConnectionStats:
        return self._stats

    async def read(self) -> bytes:
        while True:
            if self._closed:
                raise DestinationClosedError()

            timeout = self._remaining_idle_time()
            try:
                if timeout is None:
                    chunk = await self._reader.read(self._read_buffer_size)
                else:
                    chunk = await asyncio.wait_for(
                        self._reader.read(self._read_buffer_size), timeout=timeout)
            except asyncio.TimeoutError:
                # Writes also count as activity, so re-check before giving up
                if self._remaining_idle_time() == 0:
                    logger.warning(
                        f"Destination {self._host}:{self._port} idle for {self._idle_timeout:g}s, closing")
                    self.abort()
                    raise DestinationTimeoutError(
                        f"Idle for more than {self._idle_timeout:g}s", self._idle_timeout)
                continue
            except (ConnectionError, OSError) as e:
                self._stats.errors += 1
                self.abort()
                raise DestinationError(f"Read failed: {e}") from e

            if chunk:
                self._stats.record_received(len(chunk))
            return chunk

    async def write(self, data: bytes) -> None:
        if self._closed or self._writer.is_closing():
            raise DestinationClosedError()

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (ConnectionError, OSError) as e:
            self._stats.errors += 1
            self.abort()
            raise DestinationClosedError(f"Write failed: {e}") from e

        self._stats.record_sent(len(data))

    async def close(self) -> None:
        if self._closed:
            return
        self._mark_closed()

        try:
            self._writer.close()
            await self._writer.wait_closed()
        except Exception as e:
            logger.debug(f"Error closing writer: {e}")

        logger.debug(f"Destination {self._host}:{self._port} closed")

    def abort(self) -> None:
        if self._closed:
            return
        self._mark_closed()

        transport = self._writer.transport
        if transport is not None:
            transport.abort()

    def _mark_closed(self) -> None:
        self._closed = True
        if self._on_close:
            self._on_close(self)

    def _remaining_idle_time(self) -> Optional[float]:
        if self._idle_timeout <= 0:
            return None
        return max(0.0, self._idle_timeout - self._stats.get_idle_time())


class TCPConnector(IDestinationConnector):
    """Dials TCP destinations."""

    def __init__(self, config: DestinationConfig):
        self._config = config
        self._stats = ConnectorStats()

    @property
    def config(self) -> DestinationConfig:
        return self._config

    async def connect(self, host: str, port: int) -> TCPDestination:
        timeout = self._config.connect_timeout
        logger.debug(f"Dialing {host}:{port} (timeout {timeout:g}s)")

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=timeout
            )
        except asyncio.TimeoutError as e:
            raise self._failed(
                host, port, f"Timed out after {timeout:g}s", ConnectFailure.TIMEOUT, e) from e
        except socket.gaierror as e:
            raise self._failed(
                host, port, f"Cannot resolve host {host}: {e.strerror or e}", ConnectFailure.DNS, e) from e
        except ConnectionRefusedError as e:
            raise self._failed(
                host, port, "Connection refused", ConnectFailure.REFUSED, e) from e
        except OSError as e:
            kind = ConnectFailure.UNREACHABLE if e.errno in _UNREACHABLE_ERRNOS else ConnectFailure.ERROR
            raise self._failed(host, port, e.strerror or str(e), kind, e) from e
        except (OverflowError, ValueError) as e:
            raise self._failed(host, port, str(e), ConnectFailure.ERROR, e) from e

        sock = writer.get_extra_info('socket')
        if sock is not None:
            self._apply_socket_options(sock)

        self._stats.total_connections += 1
        self._stats.active_connections += 1
        logger.info(f"Connected to TCP server: {host}:{port}")

        return TCPDestination(
            host,
            port,
            reader,
            writer,
            read_buffer_size=self._config.read_buffer_size,
            idle_timeout=self._config.idle_timeout,
            on_close=self._on_destination_closed
        )

    def get_stats(self) -> Dict[str, Any]:
        return self._stats.to_dict()

    def _apply_socket_options(self, sock: socket.socket) -> None:
        if self._config.nodelay and sock.family in (socket.AF_INET, socket.AF_INET6):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    def _failed(
        self,
        host: str,
        port: int,
        message: str,
        kind: ConnectFailure,
        cause: BaseException
    ) -> DestinationConnectError:
        self._stats.failed_connections += 1
        logger.warning(f"TCP connection to {host}:{port} failed ({kind.value}): {message}")
        return DestinationConnectError(message, kind, cause)

    def _on_destination_closed(self, destination: TCPDestination) -> None:
        self._stats.active_connections -= 1
