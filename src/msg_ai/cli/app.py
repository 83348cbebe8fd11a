"""Typer application for the ``msg-ai`` command."""

from __future__ import annotations

import logging
import sys
from typing import Callable, List, Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console

from msg_ai._version import __version__
from msg_ai.cli.commands import ChatCommand, ListProvidersCommand, ModelsCommand, debug_enabled
from msg_ai.cli.formatting import render_error
from msg_ai.providers.errors import ProviderError
from msg_ai.providers.registry import ProviderRegistry
from msg_ai.providers.types import ChatOptions, ReasoningEffort


console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="msg-ai",
    help="Multi-provider AI chat CLI",
    add_completion=False,
    no_args_is_help=True,
)

# Words that select a subcommand; anything else is routed to "send".
COMMANDS = {"send", "chat", "list", "ls", "models"}
ROOT_FLAGS = {"--help", "-h", "--version"}


def configure(debug: Optional[bool] = None) -> None:
    """Load .env from the working directory, then set up logging.

    Existing environment variables win over .env entries. With ``debug``
    unset, the level follows the DEBUG variable, which .env may supply.
    """
    load_dotenv(find_dotenv(usecwd=True))
    if debug is None:
        debug = debug_enabled()
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logging.getLogger("msg_ai").setLevel(level)


def _guarded(action: Callable[[], None]) -> None:
    """Run a command, turning errors into a formatted report and exit status 1."""
    try:
        action()
    except typer.Exit:
        raise
    except ProviderError as e:
        render_error(err_console, e)
        raise typer.Exit(code=1)
    except Exception as e:
        render_error(err_console, e)
        if debug_enabled():
            err_console.print_exception()
        raise typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"msg-ai {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit",
    ),
):
    """Send a message to OpenAI, Gemini, Grok, DeepSeek, Kimi or Anthropic."""
    configure()


def _chat_options(
    model: Optional[str],
    temperature: float,
    max_tokens: Optional[int],
    stream: bool,
    system: Optional[str],
    reasoning: Optional[ReasoningEffort],
    timing: bool,
) -> ChatOptions:
    return ChatOptions(
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        system_prompt=system,
        stream=stream,
        reasoning_effort=reasoning,
        show_timing=timing,
    )


@app.command("send", hidden=True)
def send(
    words: List[str] = typer.Argument(None, help="[provider] message..."),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", envvar="MSG_AI_PROVIDER", help="AI provider"),
    model: Optional[str] = typer.Option(None, "--model", "-m", envvar="MSG_AI_MODEL", help="Specific model to use"),
    temperature: float = typer.Option(0.7, "--temperature", "-t", help="Temperature (0-2)"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", "-x", help="Maximum tokens in response"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Stream the response"),
    system: Optional[str] = typer.Option(None, "--system", help="System prompt"),
    reasoning: Optional[ReasoningEffort] = typer.Option(
        None, "--reasoning", "-r", case_sensitive=False, help="Reasoning effort for GPT-5 models"
    ),
    timing: bool = typer.Option(True, "--timing/--no-timing", help="Show response timing"),
):
    """Chat with a provider: msg-ai [provider] <message...>"""
    words = list(words or [])
    registry = ProviderRegistry()
    if words and words[0] in registry:
        provider, words = words[0], words[1:]
    options = _chat_options(model, temperature, max_tokens, stream, system, reasoning, timing)
    command = ChatCommand(registry, console, err_console)
    _guarded(lambda: command.execute(provider, " ".join(words), options))


@app.command("chat")
def chat(
    message: str = typer.Argument(..., help="Your message to the AI"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", envvar="MSG_AI_PROVIDER", help="AI provider"),
    model: Optional[str] = typer.Option(None, "--model", "-m", envvar="MSG_AI_MODEL", help="Specific model to use"),
    temperature: float = typer.Option(0.7, "--temperature", "-t", help="Temperature (0-2)"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", "-x", help="Maximum tokens"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Stream the response"),
    system: Optional[str] = typer.Option(None, "--system", help="System prompt"),
    reasoning: Optional[ReasoningEffort] = typer.Option(
        None, "--reasoning", "-r", case_sensitive=False, help="Reasoning effort for GPT-5 models"
    ),
    timing: bool = typer.Option(True, "--timing/--no-timing", help="Show response timing"),
):
    """Send a chat message (alternative syntax)."""
    registry = ProviderRegistry()
    options = _chat_options(model, temperature, max_tokens, stream, system, reasoning, timing)
    command = ChatCommand(registry, console, err_console)
    _guarded(lambda: command.execute(provider, message, options))


@app.command("list")
def list_providers(
    simple: bool = typer.Option(False, "--simple", help="Show simple list without detailed model tables"),
):
    """List all AI providers and their status."""
    command = ListProvidersCommand(ProviderRegistry(), console)
    _guarded(lambda: command.execute(detailed=not simple))


@app.command("ls", hidden=True)
def ls(simple: bool = typer.Option(False, "--simple")):
    """Alias for list."""
    list_providers(simple=simple)


@app.command("models")
def models(provider: Optional[str] = typer.Argument(None, help="Provider name")):
    """List the models a provider offers (fetched from its API)."""
    registry = ProviderRegistry()
    if not provider:
        command = ListProvidersCommand(registry, console)
        _guarded(command.execute)
        return
    models_command = ModelsCommand(registry, console, err_console)
    _guarded(lambda: models_command.execute(provider))


def route_args(args: List[str]) -> List[str]:
    """Route bare ``msg-ai [provider] message`` invocations to ``send``."""
    if args and args[0] not in COMMANDS and args[0] not in ROOT_FLAGS:
        return ["send", *args]
    return args


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    app(args=route_args(list(args)), prog_name="msg-ai")


__all__ = ["app", "main", "route_args", "configure"]
