"""Probe strategies: process orchestration and result assembly.

Each strategy drives one subprocess to a single terminal outcome (see
``outcomes``) and then turns that outcome into a ProbeResult. The protocol
driver races a stdout scanner against process exit under one deadline with
``asyncio.wait(..., FIRST_COMPLETED)``; whichever branch is taken first
decides the outcome and everything else is cancelled in ``finally``.
"""

import asyncio
import json
import logging
import shutil
import time
from typing import Awaitable, Callable, Iterable, Optional

from toolentry_cli.processes import IS_WINDOWS, popen_session_kwargs, signal_process_tree

from . import ProbeResult
from .launch import DEFAULT_TIMEOUT_MS, ProbeStrategy, ServerLaunchSpec
from .outcomes import (
    EarlyExit,
    Exited,
    ProtocolOutcome,
    Reply,
    SpawnFailure,
    StartupOutcome,
    Timeout,
)
from .recommendations import classify_error

logger = logging.getLogger(__name__)

STARTUP_CEILING_MS = 5000
PROTOCOL_WARMUP_SECONDS = 1.0
KILL_GRACE_SECONDS = 0.5
EXIT_DRAIN_SECONDS = 0.5
MAX_OUTPUT_BYTES = 100 * 1024
MAX_REPLY_BYTES = 1024 * 1024
READ_CHUNK_BYTES = 4096

PROTOCOL_REQUEST = {"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {}}
REQUEST_LINE = (json.dumps(PROTOCOL_REQUEST, separators=(",", ":")) + "\n").encode("utf-8")

Spawner = Callable[..., Awaitable[asyncio.subprocess.Process]]


def parse_reply(line: str) -> Optional[dict]:
    """Return the message if ``line`` is a JSON-RPC 2.0 response, else None."""
    text = line.strip()
    if not text:
        return None
    try:
        message = json.loads(text)
    except ValueError:
        return None
    if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
        return None
    if "result" not in message and "error" not in message:
        return None
    return message


class ReplyScanner:
    """Finds the first JSON-RPC reply line in a server's stdout.

    Complete lines are inspected once and dropped. The trailing partial line
    is re-inspected when it looks like a finished JSON object, so a reply is
    accepted even before the server writes its newline. Banners and log
    lines are skipped.

    Memory stays bounded: only the first MAX_OUTPUT_BYTES are kept for
    ``text()``, and a line longer than MAX_REPLY_BYTES is discarded up to its
    newline without being parsed.
    """

    def __init__(self):
        self.captured = bytearray()
        self._pending = bytearray()
        self._searched = 0
        self._discarding = False

    @property
    def buffered_bytes(self) -> int:
        return len(self.captured) + len(self._pending)

    def feed(self, chunk: bytes) -> Optional[dict]:
        room = MAX_OUTPUT_BYTES - len(self.captured)
        if room > 0:
            self.captured.extend(chunk[:room])

        self._pending.extend(chunk)
        while True:
            newline = self._pending.find(b"\n", self._searched)
            if newline == -1:
                self._searched = len(self._pending)
                break
            line = bytes(self._pending[:newline])
            del self._pending[:newline + 1]
            self._searched = 0
            if self._discarding:
                self._discarding = False
                continue
            reply = parse_reply(line.decode("utf-8", errors="replace"))
            if reply is not None:
                return reply

        if self._discarding or len(self._pending) > MAX_REPLY_BYTES:
            # Oversized line: drop what we have and skip to its newline
            self._discarding = True
            self._pending.clear()
            self._searched = 0
            return None

        if self._pending.rstrip().endswith(b"}"):
            return parse_reply(self._pending.decode("utf-8", errors="replace"))
        return None

    def text(self) -> str:
        return _decode(self.captured)


def _decode(data: bytes) -> str:
    return bytes(data[:MAX_OUTPUT_BYTES]).decode("utf-8", errors="replace").strip()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _spawn_failure(exc: OSError, spec: ServerLaunchSpec) -> SpawnFailure:
    if isinstance(exc, FileNotFoundError):
        message = f"Command not found: {spec.command} ({exc.strerror or 'No such file or directory'})"
    elif isinstance(exc, PermissionError):
        message = f"Permission denied: {spec.command}"
    else:
        message = f"Failed to start {spec.command}: {exc.strerror or exc}"
    logger.info(message)
    return SpawnFailure(message=message, errno=exc.errno)


async def _drain_stream(stream, sink: bytearray):
    """Read ``stream`` to EOF, keeping at most MAX_OUTPUT_BYTES."""
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return
        room = MAX_OUTPUT_BYTES - len(sink)
        if room > 0:
            sink.extend(chunk[:room])


async def _scan_stdout(stream, scanner: ReplyScanner) -> Optional[dict]:
    """Feed stdout to ``scanner``; return the reply, or None at EOF."""
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            return None
        reply = scanner.feed(chunk)
        if reply is not None:
            return reply


async def _send_request(process: asyncio.subprocess.Process, delay: float):
    """Write the tools/list request after ``delay`` if the server is alive."""
    await asyncio.sleep(delay)
    if process.returncode is not None or process.stdin is None:
        return
    try:
        process.stdin.write(REQUEST_LINE)
        await process.stdin.drain()
        logger.debug("Sent tools/list request")
    except (BrokenPipeError, ConnectionResetError) as e:
        # Process died between the returncode check and the write
        logger.debug(f"Server closed stdin before the request was sent: {e}")


async def _terminate(process: asyncio.subprocess.Process):
    """Stop ``process`` and its children, escalating to SIGKILL."""
    if process.stdin is not None and not process.stdin.is_closing():
        process.stdin.close()

    if process.returncode is not None:
        return

    signal_process_tree(process)
    try:
        await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
        return
    except asyncio.TimeoutError:
        logger.debug(f"PID {process.pid} ignored SIGTERM, killing it")

    signal_process_tree(process, force=True)
    try:
        await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
    except asyncio.TimeoutError:
        logger.warning(f"PID {process.pid} did not exit after SIGKILL")


async def _settle(tasks: Iterable[asyncio.Future]):
    """Give reader tasks a moment to hit EOF after the process ended."""
    tasks = [t for t in tasks if not t.done()]
    if tasks:
        await asyncio.wait(tasks, timeout=KILL_GRACE_SECONDS)


async def _cancel(tasks: Iterable[asyncio.Future]):
    tasks = list(tasks)
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


class ServerProbe:
    """
    Runs probe strategies against a server launch spec.

    The probe holds no state between calls; each call owns its subprocess.

    Args:
        spawner: Coroutine function with the signature of
            ``asyncio.create_subprocess_exec`` (tests inject a recording double)
    """

    def __init__(self, spawner: Optional[Spawner] = None):
        self._spawner = spawner or asyncio.create_subprocess_exec

    async def run(
        self,
        spec: ServerLaunchSpec,
        strategy: ProbeStrategy = ProbeStrategy.STARTUP,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> ProbeResult:
        """
        Probe ``spec`` with ``strategy`` and return one result.

        Failures of the server under test (and unexpected errors while
        probing it) are reported in the result, never raised.

        Raises:
            ValueError: If ``strategy`` is unknown or ``timeout_ms`` is not positive
        """
        strategy = ProbeStrategy(strategy)
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        started = time.monotonic()
        logger.info(f"Testing MCP server: {spec.command_line}")
        logger.info(f"Test type: {strategy.value}, timeout: {timeout_ms}ms")

        try:
            if strategy is ProbeStrategy.STARTUP:
                return await self.startup(spec, timeout_ms)
            if strategy is ProbeStrategy.PROTOCOL:
                return await self.protocol(spec, timeout_ms)
            return await self.full(spec, timeout_ms)
        except Exception as e:
            logger.debug("Probe failed unexpectedly", exc_info=True)
            message = str(e) or e.__class__.__name__
            return ProbeResult(
                success=False,
                strategy_used=strategy,
                elapsed_ms=_elapsed_ms(started),
                error=message,
                recommendations=classify_error(message, spec),
            )

    async def startup(self, spec: ServerLaunchSpec, timeout_ms: int) -> ProbeResult:
        """Launch and watch for at most ``min(timeout_ms, 5000)`` ms."""
        started = time.monotonic()
        outcome = await self._drive_startup(spec, min(timeout_ms, STARTUP_CEILING_MS))
        return self._startup_result(outcome, spec, _elapsed_ms(started))

    async def protocol(self, spec: ServerLaunchSpec, timeout_ms: int) -> ProbeResult:
        """Send tools/list after the warm-up and wait for any JSON-RPC reply."""
        started = time.monotonic()
        outcome = await self._drive_protocol(spec, timeout_ms)
        return self._protocol_result(outcome, spec, _elapsed_ms(started))

    async def full(self, spec: ServerLaunchSpec, timeout_ms: int) -> ProbeResult:
        """Startup then protocol, each with half of the budget."""
        half = max(1, timeout_ms // 2)

        startup = await self.startup(spec, min(half, STARTUP_CEILING_MS))
        if not startup.success:
            startup.strategy_used = ProbeStrategy.FULL
            startup.recommendations = ["Full test failed at startup phase", *startup.recommendations]
            return startup

        protocol = await self.protocol(spec, half)
        elapsed_ms = startup.elapsed_ms + protocol.elapsed_ms
        raw_output = f"Startup: {startup.raw_output or ''}\n\nProtocol: {protocol.raw_output or ''}"

        if protocol.success:
            return ProbeResult(
                success=True,
                strategy_used=ProbeStrategy.FULL,
                elapsed_ms=elapsed_ms,
                raw_output=raw_output,
                recommendations=[
                    "Full server test passed - both startup and MCP protocol work correctly",
                    "Server is ready for production use",
                    "Configuration is complete and functional",
                ],
            )

        return ProbeResult(
            success=False,
            strategy_used=ProbeStrategy.FULL,
            elapsed_ms=elapsed_ms,
            error=protocol.error,
            raw_output=raw_output,
            recommendations=[
                "Server starts successfully but MCP protocol test failed",
                "Server may not implement MCP correctly or may have configuration issues",
                *protocol.recommendations,
            ],
        )

    # ========================================================================
    # Process drivers
    # ========================================================================

    async def _spawn(self, spec: ServerLaunchSpec) -> asyncio.subprocess.Process:
        env = spec.build_env()
        command = spec.command
        if IS_WINDOWS:
            # CreateProcess does not search PATHEXT, so npx -> npx.cmd by hand
            command = shutil.which(command, path=(env or {}).get("PATH")) or command

        return await self._spawner(
            command,
            *spec.args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            **popen_session_kwargs(),
        )

    async def _drive_startup(self, spec: ServerLaunchSpec, timeout_ms: int) -> StartupOutcome:
        try:
            process = await self._spawn(spec)
        except OSError as e:
            return _spawn_failure(e, spec)

        stdout, stderr = bytearray(), bytearray()
        readers = [
            asyncio.ensure_future(_drain_stream(process.stdout, stdout)),
            asyncio.ensure_future(_drain_stream(process.stderr, stderr)),
        ]

        try:
            try:
                exit_code = await asyncio.wait_for(process.wait(), timeout=timeout_ms / 1000)
            except asyncio.TimeoutError:
                logger.info(f"{spec.command} still running after {timeout_ms}ms, stopping it")
                await _terminate(process)
                await _settle(readers)
                return Timeout(budget_ms=timeout_ms, output=_decode(stdout) or _decode(stderr))

            await _settle(readers)
            return Exited(exit_code=exit_code, stdout=_decode(stdout), stderr=_decode(stderr))
        finally:
            await _terminate(process)
            await _cancel(readers)

    async def _drive_protocol(self, spec: ServerLaunchSpec, timeout_ms: int) -> ProtocolOutcome:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000

        try:
            process = await self._spawn(spec)
        except OSError as e:
            return _spawn_failure(e, spec)

        scanner = ReplyScanner()
        stderr = bytearray()
        reply_task = asyncio.ensure_future(_scan_stdout(process.stdout, scanner))
        exit_task = asyncio.ensure_future(process.wait())
        helpers = [
            asyncio.ensure_future(_drain_stream(process.stderr, stderr)),
            asyncio.ensure_future(_send_request(process, PROTOCOL_WARMUP_SECONDS)),
        ]

        try:
            pending = {reply_task, exit_task}
            while pending:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
                )

                if reply_task in done and reply_task.result() is not None:
                    return Reply(message=reply_task.result())

                if exit_task in done:
                    # Output written just before exit may still be in the pipe
                    if not reply_task.done():
                        await asyncio.wait({reply_task}, timeout=EXIT_DRAIN_SECONDS)
                    if reply_task.done() and reply_task.result() is not None:
                        return Reply(message=reply_task.result())
                    return EarlyExit.from_returncode(
                        exit_task.result(), output=scanner.text() or _decode(stderr)
                    )

            logger.info(f"No JSON-RPC reply from {spec.command} within {timeout_ms}ms")
            return Timeout(budget_ms=timeout_ms, output=scanner.text() or _decode(stderr))
        finally:
            await _terminate(process)
            await _cancel([reply_task, exit_task, *helpers])

    # ========================================================================
    # Result assembly
    # ========================================================================

    def _startup_result(self, outcome: StartupOutcome, spec: ServerLaunchSpec, elapsed_ms: int) -> ProbeResult:
        if isinstance(outcome, SpawnFailure):
            return ProbeResult(
                success=False,
                strategy_used=ProbeStrategy.STARTUP,
                elapsed_ms=elapsed_ms,
                error=outcome.message,
                recommendations=classify_error(outcome.message, spec),
            )

        if isinstance(outcome, Timeout):
            return ProbeResult(
                success=True,
                strategy_used=ProbeStrategy.STARTUP,
                elapsed_ms=elapsed_ms,
                raw_output=outcome.output or None,
                recommendations=[
                    "Server appears to be running (command did not exit immediately)",
                    "This is typically good for MCP servers which run continuously",
                    "The server was stopped after the test timeout to prevent hanging",
                ],
            )

        if outcome.exit_code == 0:
            return ProbeResult(
                success=True,
                strategy_used=ProbeStrategy.STARTUP,
                elapsed_ms=elapsed_ms,
                raw_output=outcome.output or None,
                recommendations=[
                    "Server command executed successfully",
                    "This suggests the basic command and dependencies are available",
                    "Consider running a protocol test for more thorough validation",
                ],
            )

        if outcome.exit_code < 0:
            error = f"Command terminated by signal {-outcome.exit_code}: {spec.command_line}"
        else:
            error = f"Command failed with exit code {outcome.exit_code}: {spec.command_line}"
        if outcome.stderr:
            error = f"{error}\n{outcome.stderr}"

        return ProbeResult(
            success=False,
            strategy_used=ProbeStrategy.STARTUP,
            elapsed_ms=elapsed_ms,
            error=error,
            raw_output=outcome.output or None,
            recommendations=classify_error(error, spec),
        )

    def _protocol_result(self, outcome: ProtocolOutcome, spec: ServerLaunchSpec, elapsed_ms: int) -> ProbeResult:
        if isinstance(outcome, Reply):
            return ProbeResult(
                success=True,
                strategy_used=ProbeStrategy.PROTOCOL,
                elapsed_ms=elapsed_ms,
                raw_output=f"MCP Response: {json.dumps(outcome.message, indent=2)}",
                recommendations=[
                    "MCP protocol test passed - server correctly implements JSON-RPC",
                    "Server responded to tools/list request successfully",
                    "MCP server appears to be fully functional",
                ],
            )

        if isinstance(outcome, SpawnFailure):
            return ProbeResult(
                success=False,
                strategy_used=ProbeStrategy.PROTOCOL,
                elapsed_ms=elapsed_ms,
                error=outcome.message,
                recommendations=classify_error(outcome.message, spec),
            )

        if isinstance(outcome, Timeout):
            return ProbeResult(
                success=False,
                strategy_used=ProbeStrategy.PROTOCOL,
                elapsed_ms=elapsed_ms,
                error="MCP protocol test timed out - server may not be responding to JSON-RPC requests",
                raw_output=outcome.output or None,
                recommendations=[
                    "Server process may be running but not implementing MCP protocol correctly",
                    "Check server logs for JSON-RPC parsing errors",
                    "Ensure server supports MCP protocol version compatibility",
                ],
            )

        return ProbeResult(
            success=False,
            strategy_used=ProbeStrategy.PROTOCOL,
            elapsed_ms=elapsed_ms,
            error=outcome.describe(),
            raw_output=outcome.output or None,
            recommendations=[
                "Server started but exited immediately - may have configuration issues",
                "Check server logs for startup errors",
                "Verify environment variables and dependencies are correct",
            ],
        )


def probe_server(
    spec: ServerLaunchSpec,
    strategy: ProbeStrategy = ProbeStrategy.STARTUP,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    spawner: Optional[Spawner] = None,
) -> ProbeResult:
    """Run one probe to completion from synchronous code."""
    return asyncio.run(ServerProbe(spawner=spawner).run(spec, strategy, timeout_ms))
