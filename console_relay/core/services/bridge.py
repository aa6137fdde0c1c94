"""
Session bridge between one browser channel and at most one destination.

All inputs of a session (channel messages, destination chunks, dial
completion and shutdown requests) are funnelled into one ordered queue and
handled by the session's own task. Helper tasks only read and enqueue, so
every state transition and every channel send happens in one place and a
redial can never overlap the teardown of the previous destination.
"""

import asyncio
import codecs
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from loguru import logger

from ..domain import notices
from ..domain.commands import (
    ConnectCommand,
    DisconnectCommand,
    HelpCommand,
    StatusCommand,
)
from ..domain.session import Session, SessionState, Target, Trigger
from ..exceptions import (
    ChannelClosedError,
    CommandUsageError,
    DestinationConnectError,
    DestinationError,
)
from ..interfaces.channel import ChannelMessage, IChannel
from ..interfaces.connector import IDestination, IDestinationConnector
from .parser import parse_command

NORMAL_CLOSURE = 1000
GOING_AWAY = 1001

# Destination chunks read but not yet sent to the channel
MAX_PENDING_CHUNKS = 16


@dataclass
class _ChannelMessage:
    message: ChannelMessage


@dataclass
class _ChannelLost:
    error: Optional[BaseException] = None


@dataclass
class _DialFinished:
    task: "asyncio.Task[IDestination]"


@dataclass
class _DestinationChunk:
    destination: IDestination
    data: bytes
    credit: asyncio.Semaphore


@dataclass
class _DestinationLost:
    destination: IDestination
    error: Optional[DestinationError] = None


@dataclass
class _Shutdown:
    pass


_Event = Union[_ChannelMessage, _ChannelLost, _DialFinished,
               _DestinationChunk, _DestinationLost, _Shutdown]


class SessionBridge:
    """
    Per-channel relay state machine.

    The bridge dials ``target`` as soon as it runs, interprets control
    directives from the channel, forwards everything else to the destination
    and pushes destination bytes back to the channel, one message per chunk.
    """

    def __init__(
        self,
        channel: IChannel,
        connector: IDestinationConnector,
        target: Target,
        encoding: Optional[str] = "utf-8",
        send_banner: bool = True,
        max_pending_chunks: int = MAX_PENDING_CHUNKS
    ):
        """
        Initialize the bridge.

        Args:
            channel: Browser-side channel, already accepted
            connector: Dials destinations
            target: Default destination dialed on start
            encoding: Text encoding used between channel and destination;
                empty or None forwards destination bytes as binary messages
            send_banner: Send the welcome banner when the session starts
            max_pending_chunks: Destination chunks read ahead of the channel;
                reading pauses until the channel catches up
        """
        self._channel = channel
        self._connector = connector
        self._encoding = encoding or None
        self._send_banner = send_banner
        self._max_pending_chunks = max(1, max_pending_chunks)
        self._session = Session(target=target, client=channel.remote)

        self._events: "asyncio.Queue[_Event]" = asyncio.Queue()
        self._destination: Optional[IDestination] = None
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._dial_task: Optional["asyncio.Task[IDestination]"] = None
        self._destination_task: Optional["asyncio.Task[None]"] = None
        self._channel_task: Optional["asyncio.Task[None]"] = None
        self._close_code = NORMAL_CLOSURE
        self._started = False
        self._closed = asyncio.Event()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def id(self) -> str:
        return self._session.id

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def run(self) -> None:
        """Run the session until the channel closes or shutdown is requested."""
        if self._started:
            raise RuntimeError(f"Session {self._tag} already started")
        self._started = True

        logger.info(f"Session {self._tag} opened for {self._session.client}")
        self._channel_task = asyncio.create_task(self._pump_channel())

        try:
            if self._send_banner:
                await self._send(notices.BANNER)
            self._dial(self._session.target)

            while self._session.state is not SessionState.CLOSED:
                event = await self._events.get()
                await self._handle(event)

        except ChannelClosedError as e:
            logger.info(f"Session {self._tag}: channel closed during send ({e.message})")
        finally:
            await self._close()

    def shutdown(self) -> None:
        """Ask the session to notify the client, close its destination and end."""
        self._events.put_nowait(_Shutdown())

    async def wait_closed(self) -> None:
        await self._closed.wait()

    def abort(self) -> None:
        """
        Synchronously release everything the session holds.

        Used when a graceful shutdown did not finish in time. The session task
        ends at its next event.
        """
        for task in (self._channel_task, self._destination_task):
            if task is not None:
                task.cancel()
        self._destination_task = None

        dial, self._dial_task = self._dial_task, None
        if dial is not None:
            if not dial.done():
                dial.cancel()
            elif not dial.cancelled() and dial.exception() is None:
                dial.result().abort()

        destination, self._destination = self._destination, None
        if destination is not None:
            destination.abort()

        self._session.apply(Trigger.CHANNEL_CLOSED)
        self._events.put_nowait(_ChannelLost())

    async def _handle(self, event: _Event) -> None:
        if isinstance(event, _ChannelMessage):
            await self._on_message(event.message)
        elif isinstance(event, _DestinationChunk):
            try:
                await self._on_destination_data(event.destination, event.data)
            finally:
                event.credit.release()
        elif isinstance(event, _DialFinished):
            await self._on_dial_finished(event.task)
        elif isinstance(event, _DestinationLost):
            await self._on_destination_lost(event.destination, event.error)
        elif isinstance(event, _ChannelLost):
            if event.error is not None:
                logger.info(f"Session {self._tag}: channel closed ({event.error})")
            self._session.apply(Trigger.CHANNEL_CLOSED)
        elif isinstance(event, _Shutdown):
            logger.info(f"Session {self._tag}: shutting down")
            self._close_code = GOING_AWAY
            await self._send(notices.shutting_down())
            self._session.apply(Trigger.CHANNEL_CLOSED)

    async def _on_message(self, message: ChannelMessage) -> None:
        self._session.messages_in += 1
        logger.debug(f"Session {self._tag} received: {message!r:.80}")

        try:
            command = parse_command(message)
        except CommandUsageError as e:
            logger.debug(f"Session {self._tag}: {e.message}")
            await self._send(notices.usage(e.usage))
            return

        if isinstance(command, ConnectCommand):
            await self._connect(Target(command.host, command.port))
        elif isinstance(command, DisconnectCommand):
            await self._disconnect()
        elif isinstance(command, StatusCommand):
            await self._send(notices.status(self._session.is_connected))
        elif isinstance(command, HelpCommand):
            await self._send(notices.HELP)
        else:
            await self._forward(command.payload)

    async def _connect(self, target: Target) -> None:
        await self._teardown()
        self._session.target = target
        logger.info(f"Session {self._tag}: switching to {target}")
        await self._send(notices.connecting(target))
        self._dial(target)

    async def _disconnect(self) -> None:
        had_connection = self._destination is not None or self._dial_task is not None
        await self._teardown()
        self._session.apply(Trigger.DISCONNECT_REQUESTED)
        logger.info(f"Session {self._tag}: disconnected on request")
        await self._send(notices.disconnected(self._session.target if had_connection else None))

    async def _forward(self, payload: Union[str, bytes]) -> None:
        destination = self._destination
        if not self._session.is_connected or destination is None:
            await self._send(notices.not_connected())
            return

        data = payload.encode(self._encoding or "utf-8") if isinstance(payload, str) else payload
        try:
            await destination.write(data)
        except DestinationError as e:
            logger.warning(f"Session {self._tag}: write to {self._session.target} failed: {e.message}")
            await self._on_destination_lost(destination, e)
            return

        self._session.bytes_to_destination += len(data)

    def _dial(self, target: Target) -> None:
        self._session.apply(Trigger.DIAL_STARTED)
        task = asyncio.create_task(self._connector.connect(target.host, target.port))
        task.add_done_callback(self._on_dial_done)
        self._dial_task = task

    def _on_dial_done(self, task: "asyncio.Task[IDestination]") -> None:
        self._events.put_nowait(_DialFinished(task))

    async def _on_dial_finished(self, task: "asyncio.Task[IDestination]") -> None:
        # Superseded dials were already cancelled and closed by _teardown
        if task is not self._dial_task:
            return
        self._dial_task = None
        target = self._session.target

        error: Optional[BaseException]
        if task.cancelled():
            error = DestinationConnectError("Dial cancelled")
        else:
            error = task.exception()

        if error is not None:
            if not isinstance(error, DestinationError):
                error = DestinationConnectError(str(error), cause=error)
            self._session.apply(Trigger.DIAL_FAILED)
            logger.warning(f"Session {self._tag}: connection to {target} failed: {error}")
            await self._send(notices.connect_failed(target, error))
            return

        destination = task.result()
        self._destination = destination
        if self._encoding:
            self._decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        self._session.apply(Trigger.DIAL_SUCCEEDED)
        credit = asyncio.Semaphore(self._max_pending_chunks)
        self._destination_task = asyncio.create_task(self._pump_destination(destination, credit))

        logger.info(f"Session {self._tag}: connected to {target}")
        await self._send(notices.connected(target))

    async def _on_destination_data(self, destination: IDestination, data: bytes) -> None:
        if destination is not self._destination:
            return
        self._session.bytes_from_destination += len(data)

        if self._decoder is None:
            await self._send(data)
            return

        text = self._decoder.decode(data)
        # A chunk holding only part of a multi-byte character decodes to nothing
        if text:
            await self._send(text)

    async def _on_destination_lost(self, destination: IDestination,
                                   error: Optional[DestinationError]) -> None:
        if destination is not self._destination:
            return
        target = self._session.target

        await self._release_destination()
        self._session.apply(Trigger.DESTINATION_LOST)

        if error is None:
            logger.info(f"Session {self._tag}: connection to {target} closed")
        else:
            logger.warning(f"Session {self._tag}: connection to {target} lost: {error.message}")
        await self._send(notices.destination_lost(target, error))

    async def _teardown(self) -> None:
        """Cancel any dial in flight and close the current destination."""
        dial, self._dial_task = self._dial_task, None
        if dial is not None:
            dial.cancel()
            await asyncio.wait([dial])
            if not dial.cancelled() and dial.exception() is None:
                await dial.result().close()

        await self._release_destination()

    async def _release_destination(self) -> None:
        destination, self._destination = self._destination, None
        self._decoder = None

        task, self._destination_task = self._destination_task, None
        if task is not None:
            task.cancel()
            await asyncio.wait([task])

        if destination is not None:
            await destination.close()

    async def _pump_channel(self) -> None:
        try:
            while True:
                message = await self._channel.receive()
                self._events.put_nowait(_ChannelMessage(message))
        except ChannelClosedError as e:
            self._events.put_nowait(_ChannelLost(e))
        except Exception as e:
            logger.error(f"Session {self._tag}: channel receive failed: {e}")
            self._events.put_nowait(_ChannelLost(e))

    async def _pump_destination(self, destination: IDestination, credit: asyncio.Semaphore) -> None:
        try:
            while True:
                # Stop reading while the channel is behind; TCP backpressure does the rest
                await credit.acquire()
                data = await destination.read()
                if not data:
                    self._events.put_nowait(_DestinationLost(destination))
                    return
                self._events.put_nowait(_DestinationChunk(destination, data, credit))
        except DestinationError as e:
            self._events.put_nowait(_DestinationLost(destination, e))
        except Exception as e:
            logger.error(f"Session {self._tag}: destination read failed: {e}")
            self._events.put_nowait(_DestinationLost(destination, DestinationError(str(e))))

    async def _send(self, message: ChannelMessage) -> None:
        await self._channel.send(message)
        self._session.messages_out += 1

    async def _close(self) -> None:
        try:
            self._session.apply(Trigger.CHANNEL_CLOSED)
            if self._channel_task is not None:
                self._channel_task.cancel()
                await asyncio.wait([self._channel_task])
            await self._teardown()
            await self._channel.close(self._close_code)
        finally:
            # No-op after a clean teardown; releases everything if it was interrupted
            self.abort()
            self._closed.set()
            logger.info(f"Session {self._tag} closed")

    @property
    def _tag(self) -> str:
        return self._session.id[:8]

    def __repr__(self) -> str:
        return f"SessionBridge(id={self._tag}, state={self.state.value}, target={self._session.target})"

    def snapshot(self) -> Dict[str, Any]:
        return self._session.to_dict()
