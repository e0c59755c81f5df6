# zchat/execution/engine.py
"""
Engine for executing confirmed commands.
"""
import asyncio
import os
import signal
from dataclasses import dataclass
from typing import Optional

from zchat.constants import DEFAULT_SHELL
from zchat.safety.classifier import SafetyPolicy
from zchat.safety.confirmation import GateResult
from zchat.utils.logging import get_logger

logger = get_logger(__name__)

# Seconds to wait for output after a timed-out command is killed
KILL_GRACE_PERIOD = 2.0


class ExecutionError(Exception):
    """Base class for execution failures."""


class UnsafeCommandRefused(ExecutionError):
    """A dangerous command reached the executor without strict confirmation."""

    def __init__(self, command: str, reason: str):
        super().__init__(f"refused to execute dangerous command: {reason}")
        self.command = command
        self.reason = reason


class CommandFailed(ExecutionError):
    """The command ran but exited non-zero or timed out."""

    def __init__(self, message: str, output: str = "", return_code: Optional[int] = None):
        super().__init__(message)
        self.output = output
        self.return_code = return_code


@dataclass(frozen=True)
class ExecutionResult:
    command: str
    output: str
    return_code: int


class SafeExecutor:
    """Runs commands through a shell, re-checking the safety policy first."""

    def __init__(self, policy: SafetyPolicy, shell: Optional[str] = None, timeout: Optional[float] = None):
        self.policy = policy
        self.shell = shell or DEFAULT_SHELL
        self.timeout = timeout

    def check_allowed(self, command: str, approval: Optional[GateResult] = None) -> None:
        """
        Refuse a dangerous command that has no matching strict confirmation.

        Raises:
            UnsafeCommandRefused: If the policy flags the command and ``approval``
                is not a proceeding gate result for this exact command that
                passed the strict prompt.
        """
        verdict = self.policy.classify(command)
        if not verdict.dangerous:
            return

        approved = (
            approval is not None
            and approval.command == command
            and approval.proceed
            and approval.strict_confirmed
        )
        if not approved:
            logger.error(f"Refusing unconfirmed dangerous command: {command}")
            raise UnsafeCommandRefused(command, verdict.reason)

    async def execute(self, command: str, approval: Optional[GateResult] = None) -> ExecutionResult:
        """
        Execute a shell command and return its combined output.

        Args:
            command: The command to run with ``<shell> -c``.
            approval: The gate result that allowed the command.

        Returns:
            An ExecutionResult with stdout and stderr interleaved.

        Raises:
            UnsafeCommandRefused: See ``check_allowed``.
            CommandFailed: On non-zero exit or timeout.
            ExecutionError: If the shell cannot be started.
        """
        self.check_allowed(command, approval)
        logger.info(f"Executing command with {self.shell}: {command}")

        try:
            process = await asyncio.create_subprocess_exec(
                self.shell, "-c", command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                env=os.environ.copy(),
                # Own process group, so a timeout can stop the whole pipeline
                start_new_session=self.timeout is not None,
            )
        except OSError as e:
            logger.exception(f"Could not start shell {self.shell}")
            raise ExecutionError(f"could not start shell {self.shell}: {e}") from e

        try:
            output_bytes, _ = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._kill_process_group(process)
            try:
                output_bytes, _ = await asyncio.wait_for(process.communicate(), timeout=KILL_GRACE_PERIOD)
            except asyncio.TimeoutError:
                logger.warning(f"Output still open after killing {command}; discarding it")
                output_bytes = b""
            output = output_bytes.decode('utf-8', errors='replace')
            logger.warning(f"Command timed out after {self.timeout}s: {command}")
            raise CommandFailed(
                f"command execution timed out after {self.timeout} seconds",
                output=output,
                return_code=process.returncode,
            )

        output = output_bytes.decode('utf-8', errors='replace')
        logger.debug(f"Command completed with return code: {process.returncode}")
        logger.debug(f"output: {output[:100]}{'...' if len(output) > 100 else ''}")

        if process.returncode != 0:
            raise CommandFailed(
                f"command execution failed: exit status {process.returncode}",
                output=output,
                return_code=process.returncode,
            )

        return ExecutionResult(command=command, output=output, return_code=process.returncode)

    @staticmethod
    def _kill_process_group(process: asyncio.subprocess.Process) -> None:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            logger.debug(f"Process group {process.pid} already exited")
