"""
signal-cli process supervisor.

Owns the daemon subprocess and the per-connection state: the line framer's
remainder and the request correlator. A single reader task feeds stdout chunks
through framing, decoding and the message handler, so handler calls never
overlap and arrive in stream order.
"""

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Callable, Optional

from signal_bridge.correlator import RequestCorrelator
from signal_bridge.errors import MessageDecodeError, ProcessUnavailableError
from signal_bridge.models.rpc import RPCMessage
from signal_bridge.transport.framing import DEFAULT_MAX_BUFFER_BYTES, LineFramer
from signal_bridge.transport.jsonrpc import decode_message, encode_request

READ_SIZE = 4096

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    ERROR = "error"


class ProcessSupervisor:
    def __init__(
        self,
        command: Optional[list[str]],
        on_message: Callable[[RPCMessage], None],
        max_buffer_bytes: int = DEFAULT_MAX_BUFFER_BYTES,
        stop_timeout: float = 5.0,
        cwd: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
    ):
        self._command = list(command or [])
        self._on_message = on_message
        self._stop_timeout = stop_timeout
        self._cwd = cwd
        self._env = env
        self.framer = LineFramer(max_buffer_bytes)
        self.correlator = RequestCorrelator()
        self._process: Optional[asyncio.subprocess.Process] = None
        self._tasks: list[asyncio.Task[None]] = []
        self._drain_task: Optional[asyncio.Task[None]] = None
        self._state = ConnectionState.STOPPED
        self._state_handlers: list[Callable[[ConnectionState], None]] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @command.setter
    def command(self, command: list[str]) -> None:
        """Takes effect on the next start."""
        self._command = list(command)

    @property
    def running(self) -> bool:
        return self._state == ConnectionState.RUNNING and self._process is not None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    def add_state_handler(self, handler: Callable[[ConnectionState], None]) -> Callable[[], None]:
        """Add a lifecycle handler. Returns a cleanup function."""
        self._state_handlers.append(handler)
        def remove() -> None:
            try:
                self._state_handlers.remove(handler)
            except ValueError:
                pass
        return remove

    async def start(self) -> None:
        if self.running:
            return
        if not self._command:
            raise ProcessUnavailableError("No signal-cli command configured")
        self._reset_connection()
        logger.info(f"Starting {' '.join(self._command)}")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
                env=self._env,
            )
        except OSError as e:
            self._set_state(ConnectionState.ERROR)
            raise ProcessUnavailableError(f"Could not start {self._command[0]}: {e}") from e
        self._set_state(ConnectionState.RUNNING)
        self._tasks = [
            asyncio.create_task(self._read_stdout(self._process)),
            asyncio.create_task(self._read_stderr(self._process)),
        ]

    async def stop(self) -> None:
        """Stop the daemon. In-flight requests are abandoned without error callbacks."""
        process = self._process
        self._process = None
        current = asyncio.current_task()
        for task in self._tasks:
            if task is not current:
                task.cancel()
        for task in self._tasks:
            if task is not current:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._tasks = []
        if self._drain_task is not None:
            self._drain_task.cancel()
            self._drain_task = None

        if process is not None and process.returncode is None:
            if process.stdin is not None:
                process.stdin.close()
            with contextlib.suppress(ProcessLookupError):
                process.terminate()
            try:
                await asyncio.wait_for(process.wait(), timeout=self._stop_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"signal-cli (pid {process.pid}) did not exit, killing")
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        self._reset_connection()
        if self._state != ConnectionState.STOPPED:
            self._set_state(ConnectionState.STOPPED)

    async def restart(self) -> None:
        await self.stop()
        await self.start()

    def request(self, method: str, params: Optional[dict[str, Any]] = None, context: Any = None) -> int:
        """Write a request to the daemon and return its id.

        When `context` is given it is registered with the correlator so an
        error response can be reported back to it. Raises
        ProcessUnavailableError before writing anything if not running.
        """
        process = self._process
        if not self.running or process is None or process.stdin is None:
            raise ProcessUnavailableError()
        request_id = self.correlator.next_id()
        if context is not None:
            self.correlator.register(request_id, context)
        process.stdin.write(encode_request(request_id, method, params))
        logger.debug(f"-> {method} (id {request_id})")

        # One drain at a time; it flushes everything written before it resumes.
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.get_running_loop().create_task(self._drain(process))
        return request_id

    async def drain(self) -> None:
        """Wait until pending writes have been handed to the pipe."""
        if self._drain_task is not None:
            await self._drain_task

    def feed(self, chunk: bytes) -> None:
        """Run one chunk of daemon output through framing, decoding and dispatch."""
        for record in self.framer.feed(chunk):
            try:
                message = decode_message(record)
            except MessageDecodeError as e:
                logger.warning(f"{e}: {record[:120]!r}")
                continue
            if message is None:
                if record.strip():
                    logger.debug(f"signal-cli: {record.strip()}")
                continue
            try:
                self._on_message(message)
            except Exception:
                logger.exception(f"Handler failed for {type(message).__name__}")

    async def _drain(self, process: asyncio.subprocess.Process) -> None:
        assert process.stdin is not None
        try:
            await process.stdin.drain()
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.error(f"Write to signal-cli failed: {e}")

    async def _read_stdout(self, process: asyncio.subprocess.Process) -> None:
        assert process.stdout is not None
        while True:
            chunk = await process.stdout.read(READ_SIZE)
            if not chunk:
                break
            self.feed(chunk)
        returncode = await process.wait()
        if process is not self._process:
            return
        self._process = None
        self._reset_connection()
        if returncode == 0:
            logger.info("signal-cli exited")
            self._set_state(ConnectionState.STOPPED)
        else:
            logger.error(f"signal-cli exited with code {returncode}")
            self._set_state(ConnectionState.ERROR)

    async def _read_stderr(self, process: asyncio.subprocess.Process) -> None:
        assert process.stderr is not None
        while True:
            try:
                line = await process.stderr.readline()
            except ValueError:
                logger.debug("signal-cli stderr: overlong line dropped")
                continue
            if not line:
                break
            logger.debug(f"signal-cli stderr: {line.decode('utf-8', errors='replace').rstrip()}")

    def _reset_connection(self) -> None:
        self.framer.reset()
        self.correlator.reset()

    def _set_state(self, state: ConnectionState) -> None:
        self._state = state
        for handler in list(self._state_handlers):
            handler(state)
