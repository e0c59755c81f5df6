"""Tests for the confirmation gate."""
import io

import pytest

from zchat.constants import DEFAULT_DANGEROUS_PATTERNS
from zchat.safety.classifier import SafetyPolicy
from zchat.safety.confirmation import ConfirmationGate, GateState, Outcome, StreamLineReader


@pytest.mark.parametrize("answer", ["", "y", "Y", "yes", "YES", "  yes  "])
def test_safe_command_accepted(make_gate, answer):
    gate, terminal = make_gate(DEFAULT_DANGEROUS_PATTERNS, answer)
    result = gate.run("ls -la")
    assert result.proceed
    assert result.state is GateState.PROCEED
    assert not result.verdict.dangerous
    assert terminal.reads == 1


@pytest.mark.parametrize("answer", ["n", "N", "no", "NO", "maybe"])
def test_safe_command_declined(make_gate, answer):
    gate, _ = make_gate(DEFAULT_DANGEROUS_PATTERNS, answer)
    result = gate.run("ls -la")
    assert not result.proceed
    assert result.state is GateState.CANCELLED
    assert result.decisions[-1].outcome is Outcome.DECLINE


def test_standard_prompt_shows_default(make_gate, console):
    gate, _ = make_gate([], "")
    gate.run("pwd")
    output = console.file.getvalue()
    assert "[Y/n]" in output
    assert "WARNING" not in output


@pytest.mark.parametrize("answer", ["", "y", "Y", "no", "n", "sure", "yes please"])
def test_strict_prompt_requires_full_yes(make_gate, answer):
    gate, terminal = make_gate(["rm -rf"], answer, "y")
    result = gate.run("rm -rf /home/user")
    assert result.state is GateState.CANCELLED
    assert not result.strict_confirmed
    # Cancelled straight away, the standard prompt is never shown
    assert terminal.reads == 1
    assert len(result.decisions) == 1


@pytest.mark.parametrize("answer", ["yes", "YES", " Yes \t"])
def test_strict_yes_moves_to_standard_prompt(make_gate, answer):
    gate, terminal = make_gate(["rm -rf"], answer, "")
    result = gate.run("rm -rf /home/user")
    assert result.proceed
    assert result.strict_confirmed
    assert terminal.reads == 2
    assert [d.stage for d in result.decisions] == [GateState.STRICT_CONFIRM, GateState.STANDARD_CONFIRM]


def test_dangerous_banner_and_prompt(make_gate, console):
    gate, _ = make_gate(["rm -rf"], "no")
    gate.run("rm -rf /home/user")
    output = console.file.getvalue()
    assert "WARNING" in output
    assert "Command contains dangerous pattern: rm -rf" in output
    assert "[yes/no]" in output


def test_dangerous_command_still_needs_standard_confirmation(make_gate):
    gate, _ = make_gate(["rm -rf"], "yes", "n")
    result = gate.run("rm -rf /home/user")
    assert result.state is GateState.CANCELLED
    assert result.strict_confirmed
    assert not result.proceed


def test_end_of_input_at_standard_prompt(make_gate, console):
    gate, _ = make_gate([])
    result = gate.run("ls")
    assert result.state is GateState.CANCELLED
    assert result.input_failure is not None
    assert result.input_failure.stage is GateState.STANDARD_CONFIRM
    assert "No confirmation received" in console.file.getvalue()


def test_end_of_input_at_strict_prompt(make_gate):
    gate, _ = make_gate(["mkfs"])
    result = gate.run("mkfs.ext4 /dev/sdb1")
    assert result.state is GateState.CANCELLED
    assert result.input_failure.stage is GateState.STRICT_CONFIRM


def test_read_error_is_a_decline(formatter):
    class BrokenReader:
        def read_line(self):
            raise OSError("input/output error")

    gate = ConfirmationGate(SafetyPolicy(patterns=()), BrokenReader(), formatter)
    result = gate.run("ls")
    assert not result.proceed
    assert result.input_failure.cause == "input/output error"


def test_gate_keeps_no_state_between_runs(make_gate):
    gate, terminal = make_gate(["rm -rf"], "yes", "", "")
    assert gate.run("rm -rf build").proceed
    second = gate.run("ls")
    assert second.proceed
    assert not second.strict_confirmed
    assert not second.verdict.dangerous


def test_stream_line_reader():
    reader = StreamLineReader(io.StringIO("yes\r\n\n"))
    assert reader.read_line() == "yes"
    assert reader.read_line() == ""
    with pytest.raises(EOFError):
        reader.read_line()


def test_stream_line_reader_rejects_unterminated_line():
    reader = StreamLineReader(io.StringIO("yes"))
    with pytest.raises(EOFError):
        reader.read_line()


def test_unterminated_answer_at_end_of_input_cancels(formatter):
    reader = StreamLineReader(io.StringIO("yes\ny"))
    gate = ConfirmationGate(SafetyPolicy(patterns=DEFAULT_DANGEROUS_PATTERNS), reader, formatter)
    result = gate.run("rm -rf /home/user")
    assert result.state is GateState.CANCELLED
    assert result.strict_confirmed
    assert result.input_failure.stage is GateState.STANDARD_CONFIRM
    assert [d.outcome for d in result.decisions] == [Outcome.PROCEED, Outcome.INPUT_FAILURE]
