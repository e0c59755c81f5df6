"""
Main command-line interface for zchat.
"""
import asyncio
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from zchat import __version__
from zchat.ai.client import create_command_generator
from zchat.ai.errors import GenerationError
from zchat.config import AppConfig, ConfigError, ConfigManager
from zchat.constants import DEFAULT_MODELS, DEFAULT_OLLAMA_URL, PROVIDER_OLLAMA, PROVIDERS
from zchat.context.collector import ContextCollector
from zchat.execution.engine import CommandFailed, ExecutionError, SafeExecutor
from zchat.orchestrator import Orchestrator
from zchat.safety.confirmation import ConfirmationGate, StreamLineReader
from zchat.shell.formatter import TerminalFormatter
from zchat.utils.logging import get_logger, setup_logging

# Create the app
app = typer.Typer(help="zchat: natural-language requests turned into shell commands")
logger = get_logger(__name__)
console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool):
    """Display version information and exit."""
    if value:
        console.print(f"zchat version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug mode"
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to the configuration file"
    ),
    version: bool = typer.Option(
        False, "--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """zchat: natural-language requests turned into shell commands"""
    ctx.obj = {"debug": debug, "config_file": config_file}
    setup_logging(debug=debug)


def _load_config(ctx: typer.Context) -> AppConfig:
    options = ctx.obj or {}
    try:
        config = ConfigManager(options.get("config_file")).load()
    except ConfigError as e:
        logger.error(f"Error loading config: {e}")
        TerminalFormatter(console, error_console).print_error(f"loading config: {e}")
        sys.exit(1)
    if options.get("debug"):
        config = config.model_copy(update={"debug": True})
    return config


@app.command()
def ask(
    ctx: typer.Context,
    query: List[str] = typer.Argument(
        ..., help="The natural language request, e.g. 'count lines in data.csv'"
    ),
):
    """Generate a command for a request, confirm it and run it."""
    full_query = " ".join(query)
    config = _load_config(ctx)
    formatter = TerminalFormatter(console, error_console)
    policy = config.safety_policy()

    try:
        generator = create_command_generator(config)
    except ConfigError as e:
        formatter.print_error(str(e))
        sys.exit(1)

    orchestrator = Orchestrator(
        generator=generator,
        collector=ContextCollector(max_files=config.max_context_lines),
        gate=ConfirmationGate(policy, StreamLineReader(), formatter),
        executor=SafeExecutor(policy, shell=os.environ.get("SHELL"), timeout=config.execution_timeout),
        formatter=formatter,
        request_timeout=config.request_timeout,
    )

    try:
        result = asyncio.run(orchestrator.process_request(full_query))
    except GenerationError as e:
        logger.error(f"Error generating command: {e}")
        formatter.print_error(f"generating command: {e}")
        sys.exit(1)
    except CommandFailed as e:
        formatter.print_error(str(e))
        # Still show output if there is any, e.g. the command's own error messages
        formatter.print_output(e.output)
        sys.exit(1)
    except ExecutionError as e:
        formatter.print_error(str(e))
        sys.exit(1)

    if result.cancelled:
        formatter.print_cancelled()
        return

    formatter.print_success(result.execution.output)


@app.command()
def check(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="The command to classify"),
):
    """Classify a command against the dangerous patterns without running it."""
    config = _load_config(ctx)
    formatter = TerminalFormatter(console, error_console)
    verdict = config.safety_policy().classify(command)

    formatter.print_command(command)
    if verdict.dangerous:
        formatter.print_danger_warning(verdict.reason)
        sys.exit(1)
    console.print("[green]No dangerous pattern matched.[/green]")


@app.command()
def patterns(ctx: typer.Context):
    """List the configured dangerous patterns."""
    config = _load_config(ctx)
    TerminalFormatter(console, error_console).print_patterns(config.dangerous_patterns)


@app.command()
def init(ctx: typer.Context):
    """Write a configuration file interactively."""
    manager = ConfigManager((ctx.obj or {}).get("config_file"))
    console.print("Initializing zchat...")

    try:
        current = manager.load()
    except ConfigError as e:
        logger.warning(f"Existing configuration ignored: {e}")
        current = AppConfig()

    provider = typer.prompt(
        f"Provider ({', '.join(PROVIDERS)})", default=current.provider
    ).strip().lower()
    if provider not in PROVIDERS:
        TerminalFormatter(console, error_console).print_error(f"invalid provider: {provider}")
        sys.exit(1)

    default_model = current.model if current.model and current.provider == provider else DEFAULT_MODELS[provider]
    model = typer.prompt("Model", default=default_model)
    updates = {"provider": provider, "model": model}

    if provider == PROVIDER_OLLAMA:
        updates["ollama_url"] = typer.prompt(
            "Ollama URL", default=current.ollama_url or DEFAULT_OLLAMA_URL
        )
    elif current.api_key and current.provider == provider:
        console.print("[green]API key already configured.[/green]")
    else:
        updates["api_key"] = typer.prompt(f"Enter your {provider} API key", hide_input=True)

    config = current.model_copy(update=updates)
    try:
        config.validate_provider()
        path = manager.save(config)
    except ConfigError as e:
        TerminalFormatter(console, error_console).print_error(str(e))
        sys.exit(1)

    console.print(f"[green]Configuration saved to {path}[/green]")
    console.print("\nYou can now use:")
    console.print("  [blue]zchat ask <your request>[/blue] - Generate and run a command")
    console.print("  [blue]zchat check <command>[/blue] - Check a command against the dangerous patterns")
    console.print("  [blue]zchat --help[/blue] - Show help")
