"""Bounded execution of external commands with classified results."""
import asyncio
import logging
from typing import Sequence

from models.tool_schema import NO_OUTPUT_PLACEHOLDER, ToolResult

logger = logging.getLogger(__name__)


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class CommandExecutor:
    """
    Runs one external command per call and classifies the outcome.

    Every failure mode is returned as a ToolResult rather than raised, so the
    caller decides whether to retry. The executor itself never retries.
    Cancellation of the awaiting task kills the child before propagating.
    """

    async def run(
        self,
        command: str,
        args: Sequence[str],
        timeout: float,
        tool_name: str | None = None,
    ) -> ToolResult:
        """
        Execute ``command`` with ``args`` under a wall-clock budget.

        Args:
            command: Binary to execute (resolved on PATH)
            args: Already tokenized arguments
            timeout: Budget in seconds
            tool_name: Name reported in the result (defaults to command)

        Returns:
            ToolResult classified as success, non_zero_exit, timeout or execution_error
        """
        name = tool_name or command
        logger.info(f"executing command: {command} {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        # ValueError covers arguments the OS cannot pass, such as embedded NULs.
        except (OSError, ValueError) as e:
            logger.error(f"{command} execution failed: {e}")
            return ToolResult.failure(
                name, "execution_error", f"{command} execution failed: {e}\nstderr: "
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            logger.error(f"{command} command timed out after {timeout:g}s")
            return ToolResult.failure(
                name, "timeout", f"{command} command timed out after {timeout:g}s"
            )
        except asyncio.CancelledError:
            await self._kill(process)
            logger.warning(f"{command} cancelled, process killed")
            raise

        error_text = _decode(stderr)

        if process.returncode is None or process.returncode < 0:
            # Terminated by a signal we did not send.
            message = (
                f"{command} execution failed: terminated by signal "
                f"{-(process.returncode or 0)}\nstderr: {error_text}"
            )
            logger.error(message)
            return ToolResult.failure(name, "execution_error", message)

        if process.returncode != 0:
            message = f"{command} exited with code {process.returncode}: {error_text}"
            logger.error(message)
            return ToolResult.failure(
                name, "non_zero_exit", message, exit_code=process.returncode
            )

        output = _decode(stdout).strip()
        if not output:
            output = NO_OUTPUT_PLACEHOLDER
        logger.info(
            f"{command} completed successfully, output_length={len(output)} chars"
        )
        logger.debug(f"Output preview: {output[:500]}")
        return ToolResult.ok(name, output)

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill and reap the child so it cannot outlive the call."""
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
