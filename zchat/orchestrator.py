"""
Main orchestration service for zchat.

This module runs one request end to end: collect context, generate a command
under a deadline, show it, pass it through the confirmation gate and execute it
if the gate allows.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional

from zchat.ai.client import CommandGenerator
from zchat.ai.errors import GenerationError
from zchat.context.collector import ContextCollector, SystemContext
from zchat.execution.engine import ExecutionResult, SafeExecutor
from zchat.safety.confirmation import ConfirmationGate, GateResult
from zchat.shell.formatter import TerminalFormatter
from zchat.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestResult:
    query: str
    command: str
    gate: GateResult
    execution: Optional[ExecutionResult] = None

    @property
    def cancelled(self) -> bool:
        return not self.gate.proceed


class Orchestrator:
    """Coordinates generation, confirmation and execution for one request."""

    def __init__(
        self,
        generator: CommandGenerator,
        collector: ContextCollector,
        gate: ConfirmationGate,
        executor: SafeExecutor,
        formatter: TerminalFormatter,
        request_timeout: float,
    ):
        self._generator = generator
        self._collector = collector
        self._gate = gate
        self._executor = executor
        self._formatter = formatter
        self._request_timeout = request_timeout

    async def generate(self, query: str, context: SystemContext) -> str:
        """
        Ask the backend for a command, bounded by the request deadline.

        Raises:
            GenerationError: If the backend fails or the deadline passes.
        """
        logger.info(f"Processing request: {query}")
        try:
            command = await asyncio.wait_for(
                self._generator.generate_command(query, context),
                timeout=self._request_timeout,
            )
        except asyncio.TimeoutError as e:
            raise GenerationError(
                f"command generation timed out after {self._request_timeout} seconds"
            ) from e
        logger.info(f"Received command: {command}")
        return command

    async def process_request(self, query: str) -> RequestResult:
        """
        Run a request through the whole flow.

        Returns:
            A RequestResult; ``execution`` is None when the gate cancelled.

        Raises:
            GenerationError: If no command could be generated.
            ExecutionError: If the confirmed command failed or was refused.
        """
        context = self._collector.collect()
        command = await self.generate(query, context)
        self._formatter.print_command(command)

        gate_result = self._gate.run(command)
        if not gate_result.proceed:
            return RequestResult(query=query, command=command, gate=gate_result)

        execution = await self._executor.execute(command, approval=gate_result)
        return RequestResult(query=query, command=command, gate=gate_result, execution=execution)
