"""
Common test fixtures for zchat.
"""
import io

import pytest
from rich.console import Console

from zchat.context.collector import SystemContext
from zchat.safety.classifier import SafetyPolicy
from zchat.safety.confirmation import ConfirmationGate
from zchat.shell.formatter import TerminalFormatter


class MockTerminal:
    """Simulates terminal input for the confirmation prompts."""
    def __init__(self, *inputs):
        self.input_queue = list(inputs)
        self.reads = 0

    def add_input(self, *inputs):
        """Add inputs to be returned in sequence."""
        self.input_queue.extend(inputs)

    def read_line(self):
        """Return the next queued line; behave like a closed stream when empty."""
        self.reads += 1
        if not self.input_queue:
            raise EOFError("end of input")
        return self.input_queue.pop(0)


class FakeGenerator:
    """Command generator that returns a fixed command."""
    def __init__(self, command):
        self.command = command
        self.calls = []

    async def generate_command(self, query, context):
        self.calls.append((query, context))
        return self.command


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)


@pytest.fixture
def formatter(console):
    return TerminalFormatter(console)


@pytest.fixture
def mock_terminal():
    """Returns a MockTerminal instance."""
    return MockTerminal()


@pytest.fixture
def make_gate(formatter):
    """Build a gate over the given patterns, answering with the given lines."""
    def _make(patterns, *inputs):
        terminal = MockTerminal(*inputs)
        gate = ConfirmationGate(SafetyPolicy(patterns=tuple(patterns)), terminal, formatter)
        return gate, terminal
    return _make


@pytest.fixture
def system_context():
    return SystemContext(
        working_dir="/Users/test/project",
        files=["main.py", "README.md", "config.toml"],
        shell="/bin/zsh",
        os="darwin",
        arch="arm64",
    )


@pytest.fixture
def make_generator():
    """Returns the FakeGenerator class."""
    return FakeGenerator

