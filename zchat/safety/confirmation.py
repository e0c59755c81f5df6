# zchat/safety/confirmation.py
"""
Confirmation gate between command generation and execution.

The gate is a small state machine::

    START -> DANGER_CHECK -> [STRICT_CONFIRM] -> STANDARD_CONFIRM -> PROCEED | CANCELLED

A command flagged by the classifier must first be confirmed with the literal
word ``yes``. Every command, flagged or not, then passes the standard prompt,
which accepts an empty line, ``y`` or ``yes``. Any read failure at either
prompt cancels.
"""
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Protocol, TextIO, Tuple

from zchat.constants import STANDARD_AFFIRMATIVES, STRICT_AFFIRMATIVE
from zchat.safety.classifier import SafetyPolicy, Verdict
from zchat.shell.formatter import STANDARD_PROMPT, STRICT_PROMPT, TerminalFormatter
from zchat.utils.logging import get_logger

logger = get_logger(__name__)


class LineReader(Protocol):
    """A blocking source of input lines."""

    def read_line(self) -> str:
        """
        Return the next line, without its terminator.

        Raises:
            EOFError: When the input closes before a complete line.
            OSError: When reading fails.
        """
        ...


class StreamLineReader:
    """Reads lines from a text stream, stdin by default."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def read_line(self) -> str:
        stream = self._stream or sys.stdin
        line = stream.readline()
        # A line cut off by end of input is not an answer
        if not line.endswith("\n"):
            raise EOFError("end of input")
        return line.rstrip("\r\n")


class GateState(str, Enum):
    START = "start"
    DANGER_CHECK = "danger_check"
    STRICT_CONFIRM = "strict_confirm"
    STANDARD_CONFIRM = "standard_confirm"
    PROCEED = "proceed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({GateState.PROCEED, GateState.CANCELLED})


class Outcome(str, Enum):
    PROCEED = "proceed"
    DECLINE = "decline"
    INPUT_FAILURE = "input_failure"


@dataclass(frozen=True)
class ConfirmationDecision:
    """The answer to a single prompt."""
    stage: GateState
    outcome: Outcome
    answer: Optional[str] = None
    cause: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is Outcome.PROCEED


@dataclass(frozen=True)
class GateResult:
    """Terminal result of one pass through the gate."""
    command: str
    state: GateState
    verdict: Verdict
    decisions: Tuple[ConfirmationDecision, ...] = ()

    @property
    def proceed(self) -> bool:
        return self.state is GateState.PROCEED

    @property
    def strict_confirmed(self) -> bool:
        """Whether the command was accepted at the strict prompt."""
        return any(
            d.stage is GateState.STRICT_CONFIRM and d.accepted for d in self.decisions
        )

    @property
    def input_failure(self) -> Optional[ConfirmationDecision]:
        for decision in self.decisions:
            if decision.outcome is Outcome.INPUT_FAILURE:
                return decision
        return None


@dataclass
class _GateRun:
    command: str
    verdict: Verdict = field(default_factory=Verdict.safe)
    decisions: List[ConfirmationDecision] = field(default_factory=list)


class ConfirmationGate:
    """
    Decides whether a generated command may run.

    Each call to ``run`` is independent; the gate keeps no state between calls.
    """

    def __init__(
        self,
        policy: SafetyPolicy,
        reader: LineReader,
        formatter: Optional[TerminalFormatter] = None,
    ):
        self._policy = policy
        self._reader = reader
        self._formatter = formatter or TerminalFormatter()
        self._handlers: Dict[GateState, Callable[[_GateRun], GateState]] = {
            GateState.START: self._start,
            GateState.DANGER_CHECK: self._danger_check,
            GateState.STRICT_CONFIRM: self._strict_confirm,
            GateState.STANDARD_CONFIRM: self._standard_confirm,
        }

    def run(self, command: str) -> GateResult:
        """
        Walk the state machine for one command.

        Args:
            command: The generated command.

        Returns:
            A GateResult in either the PROCEED or the CANCELLED state.
        """
        run = _GateRun(command=command)
        state = GateState.START
        while state not in TERMINAL_STATES:
            next_state = self._handlers[state](run)
            logger.debug(f"Gate transition: {state.value} -> {next_state.value}")
            state = next_state

        result = GateResult(
            command=command,
            state=state,
            verdict=run.verdict,
            decisions=tuple(run.decisions),
        )
        if result.proceed:
            logger.info(f"Command confirmed: {command}")
        else:
            logger.info(f"Command cancelled: {command}")
        return result

    def _start(self, run: _GateRun) -> GateState:
        return GateState.DANGER_CHECK

    def _danger_check(self, run: _GateRun) -> GateState:
        run.verdict = self._policy.classify(run.command)
        if run.verdict.dangerous:
            logger.warning(f"Dangerous command detected: {run.verdict.reason}")
            return GateState.STRICT_CONFIRM
        return GateState.STANDARD_CONFIRM

    def _strict_confirm(self, run: _GateRun) -> GateState:
        self._formatter.print_danger_warning(run.verdict.reason)
        decision = self._ask(
            GateState.STRICT_CONFIRM, STRICT_PROMPT, frozenset({STRICT_AFFIRMATIVE})
        )
        run.decisions.append(decision)
        return GateState.STANDARD_CONFIRM if decision.accepted else GateState.CANCELLED

    def _standard_confirm(self, run: _GateRun) -> GateState:
        decision = self._ask(GateState.STANDARD_CONFIRM, STANDARD_PROMPT, STANDARD_AFFIRMATIVES)
        run.decisions.append(decision)
        return GateState.PROCEED if decision.accepted else GateState.CANCELLED

    def _ask(self, stage: GateState, prompt: str, accepted: FrozenSet[str]) -> ConfirmationDecision:
        self._formatter.print_prompt(prompt)
        try:
            line = self._reader.read_line()
        except (EOFError, OSError) as e:
            cause = str(e) or type(e).__name__
            logger.warning(f"Could not read confirmation at {stage.value}: {cause}")
            self._formatter.console.print()
            self._formatter.print_notice(f"No confirmation received ({cause}).")
            return ConfirmationDecision(stage=stage, outcome=Outcome.INPUT_FAILURE, cause=cause)

        answer = line.strip().lower()
        outcome = Outcome.PROCEED if answer in accepted else Outcome.DECLINE
        return ConfirmationDecision(stage=stage, outcome=outcome, answer=answer)
