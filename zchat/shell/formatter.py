# zchat/shell/formatter.py
"""
Rich terminal formatting for zchat.

Every piece of text that originates outside the program (commands, model
output, command output) is wrapped in ``Text`` so rich never interprets it as
markup.
"""
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from zchat.utils.logging import get_logger

logger = get_logger(__name__)

DANGER_BANNER = "⚠️  WARNING: Dangerous command detected!"
STRICT_PROMPT = "Are you SURE you want to execute this? Type the full word [yes/no]: "
STANDARD_PROMPT = "Execute? [Y/n]: "
CANCELLED_MESSAGE = "Command execution cancelled."


class OutputType(Enum):
    """Types of command output."""
    STDOUT = "stdout"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class TerminalFormatter:
    """Terminal output for the request, confirmation and execution flow."""

    def __init__(self, console: Optional[Console] = None, error_console: Optional[Console] = None):
        self._console = console or Console()
        self._error_console = error_console or Console(stderr=True)

    @property
    def console(self) -> Console:
        return self._console

    def print_command(self, command: str, title: Optional[str] = None) -> None:
        """
        Display a command with syntax highlighting.

        Args:
            command: The command to display
            title: Optional title for the panel
        """
        syntax = Syntax(command, "bash", theme="monokai", word_wrap=True)
        self._console.print(Panel(syntax, title=title or "Command", expand=False))

    def print_danger_warning(self, reason: str) -> None:
        """Show the dangerous-command banner and the matched reason."""
        self._console.print()
        self._console.print(Text(DANGER_BANNER, style="bold red"))
        self._console.print(Text(f"Reason: {reason}", style="red"))

    def print_prompt(self, prompt: str) -> None:
        """Print a prompt without a trailing newline."""
        self._console.print(Text(prompt, style="bold"), end="")

    def print_output(
        self,
        output: str,
        output_type: OutputType = OutputType.STDOUT,
        title: Optional[str] = None
    ) -> None:
        """
        Display command output with appropriate formatting.

        Args:
            output: The output text
            output_type: Type of output
            title: Optional title for the panel
        """
        if not output:
            return

        if output_type == OutputType.ERROR:
            title = title or "Error"
            border_style = "red"
        elif output_type == OutputType.WARNING:
            title = title or "Warning"
            border_style = "yellow"
        elif output_type == OutputType.INFO:
            title = title or "Info"
            border_style = "blue"
        else:
            title = title or "Output"
            border_style = "green"

        self._console.print(Panel(Text(output), title=title, border_style=border_style, expand=False))

    def print_success(self, output: str) -> None:
        if output.strip():
            self.print_output(output)
        else:
            self._console.print(Text("Command executed successfully with no output.", style="green"))

    def print_error(self, message: str) -> None:
        error = Text("Error: ", style="bold red")
        error.append(message)
        self._error_console.print(error)

    def print_notice(self, message: str) -> None:
        self._console.print(Text(message, style="yellow"))

    def print_cancelled(self) -> None:
        self._console.print(Text(CANCELLED_MESSAGE))

    def print_patterns(self, patterns) -> None:
        """Display the configured dangerous patterns in order."""
        table = Table(title="Dangerous Patterns", expand=False)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Pattern", style="bold red")
        for index, pattern in enumerate(patterns, start=1):
            table.add_row(str(index), Text(pattern))
        self._console.print(table)
