"""End-to-end tests for request processing."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from zchat.ai.errors import GenerationError
from zchat.constants import DEFAULT_DANGEROUS_PATTERNS
from zchat.context.collector import ContextCollector
from zchat.execution.engine import ExecutionResult, SafeExecutor
from zchat.orchestrator import Orchestrator
from zchat.safety.classifier import SafetyPolicy
from zchat.safety.confirmation import ConfirmationGate, GateState


@pytest.fixture
def build(tmp_path, formatter, mock_terminal, make_generator):
    """Wire an orchestrator with a fake generator and a mocked executor."""
    def _build(command, patterns=DEFAULT_DANGEROUS_PATTERNS, *inputs, request_timeout=30):
        policy = SafetyPolicy(patterns=tuple(patterns))
        mock_terminal.add_input(*inputs)
        executor = SafeExecutor(policy, shell="/bin/sh")
        executor.execute = AsyncMock(return_value=ExecutionResult(command=command, output="done\n", return_code=0))
        orchestrator = Orchestrator(
            generator=make_generator(command),
            collector=ContextCollector(cwd=tmp_path, environ={}),
            gate=ConfirmationGate(policy, mock_terminal, formatter),
            executor=executor,
            formatter=formatter,
            request_timeout=request_timeout,
        )
        return orchestrator, executor
    return _build


@pytest.mark.asyncio
async def test_safe_command_with_enter(build, console):
    orchestrator, executor = build("ls -la", DEFAULT_DANGEROUS_PATTERNS, "")

    result = await orchestrator.process_request("list files")

    assert result.gate.state is GateState.PROCEED
    assert not result.gate.verdict.dangerous
    assert result.execution.output == "done\n"
    executor.execute.assert_awaited_once_with("ls -la", approval=result.gate)
    assert "ls -la" in console.file.getvalue()


@pytest.mark.asyncio
async def test_dangerous_command_short_yes_is_cancelled(build):
    orchestrator, executor = build("rm -rf /home/user", ["rm -rf"], "y")

    result = await orchestrator.process_request("clean my home")

    assert result.cancelled
    assert "rm -rf" in result.gate.verdict.reason
    assert result.execution is None
    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_dangerous_command_declined_at_standard_prompt(build):
    orchestrator, executor = build("rm -rf /home/user", ["rm -rf"], "yes", "n")

    result = await orchestrator.process_request("clean my home")

    assert result.cancelled
    assert result.gate.strict_confirmed
    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_dangerous_command_fully_confirmed(build):
    orchestrator, executor = build("rm -rf /home/user", ["rm -rf"], "yes", "")

    result = await orchestrator.process_request("clean my home")

    assert not result.cancelled
    assert result.gate.strict_confirmed
    executor.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_generator_receives_context(build, tmp_path):
    (tmp_path / "data.csv").touch()
    orchestrator, _ = build("wc -l data.csv", [], "")

    await orchestrator.process_request("count lines in data.csv")

    query, context = orchestrator._generator.calls[0]
    assert query == "count lines in data.csv"
    assert context.files == ["data.csv"]


@pytest.mark.asyncio
async def test_generation_deadline(build):
    orchestrator, executor = build("ls", [], "", request_timeout=0.05)

    class SlowGenerator:
        async def generate_command(self, query, context):
            await asyncio.sleep(5)
            return "ls"

    orchestrator._generator = SlowGenerator()
    with pytest.raises(GenerationError) as excinfo:
        await orchestrator.process_request("list files")
    assert "timed out" in str(excinfo.value)
    executor.execute.assert_not_awaited()
