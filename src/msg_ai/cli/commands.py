"""Command implementations behind the msg-ai CLI."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

import typer
from rich.console import Console

from msg_ai.cli.formatting import build_models_table, render_error
from msg_ai.providers.base import BaseProvider
from msg_ai.providers.errors import ProviderError
from msg_ai.providers.registry import ProviderRegistry
from msg_ai.providers.types import ChatMessage, ChatOptions, ChatResponse

logger = logging.getLogger("msg_ai.cli")


def debug_enabled() -> bool:
    return bool(os.getenv("DEBUG"))


class ChatCommand:
    """Send one user message to one provider and print the answer."""

    def __init__(self, registry: ProviderRegistry, console: Console, err_console: Console):
        self.registry = registry
        self.console = console
        self.err_console = err_console

    def execute(self, provider_name: Optional[str], message: str, options: ChatOptions) -> None:
        if not message.strip():
            self.err_console.print("[red]x Please provide a message[/red]")
            raise typer.Exit(code=1)

        if provider_name:
            provider = self.registry.get(provider_name)
        else:
            provider = self.registry.get_first_available()
        if provider is None:
            self._report_no_providers()
            raise typer.Exit(code=1)

        provider.assert_available()
        logger.debug(f"Chatting with {provider.name} (model={provider.resolve_model(options.model)}, stream={options.stream})")
        messages = [ChatMessage.user(message)]
        if options.stream:
            self._stream(provider, messages, options)
        else:
            self._chat(provider, messages, options)

    def _report_no_providers(self) -> None:
        self.err_console.print("[red]x No available providers found.[/red]")
        self.err_console.print("[yellow]Please set at least one API key:[/yellow]")
        for status in self.registry.list_available_providers():
            self.err_console.print(f"  - {status.display_name}: set {status.env_key}", style="dim", highlight=False)

    def _stream(self, provider: BaseProvider, messages, options: ChatOptions) -> None:
        self.console.print(f"[cyan]{provider.display_name}:[/cyan]")
        started = time.perf_counter()
        try:
            for fragment in provider.stream_chat(messages, options):
                self.console.out(fragment, end="", highlight=False)
        except ProviderError as e:
            self.console.out("")
            render_error(self.err_console, e)
            raise typer.Exit(code=1)
        self.console.out("")
        if options.show_timing:
            self._print_timing(time.perf_counter() - started)

    def _chat(self, provider: BaseProvider, messages, options: ChatOptions) -> None:
        with self.console.status(f"Chatting with [cyan]{provider.display_name}[/cyan]...", spinner="dots"):
            response = provider.chat(messages, options)
        self.console.print(f"[green]Response from {provider.display_name}[/green]")
        self.console.print()
        self.console.print(response.content, markup=False, highlight=False)
        if response.usage and debug_enabled():
            self._print_usage(response)
        if options.show_timing and response.elapsed is not None:
            self._print_timing(response.elapsed)

    def _print_usage(self, response: ChatResponse) -> None:
        usage = response.usage
        self.console.print()
        self.console.print("Usage:", style="dim")
        self.console.print(f"  Prompt tokens: {usage.prompt_tokens}", style="dim")
        self.console.print(f"  Completion tokens: {usage.completion_tokens}", style="dim")
        self.console.print(f"  Total tokens: {usage.total_tokens}", style="dim")

    def _print_timing(self, elapsed: float) -> None:
        self.console.print(f"({elapsed:.2f}s)", style="dim", highlight=False)


class ListProvidersCommand:
    """Show every provider's status, with live model counts."""

    def __init__(self, registry: ProviderRegistry, console: Console):
        self.registry = registry
        self.console = console

    def execute(self, detailed: bool = True) -> None:
        statuses = self.registry.list_available_providers()
        with self.console.status("Fetching available models from APIs...", spinner="dots"):
            live_models = self.registry.fetch_all_models()

        self.console.print("\n[bold]Available AI Providers:[/bold]\n")
        width = max((len(s.display_name) for s in statuses), default=0)
        for status in statuses:
            label = "[green]Available[/green]" if status.available else "[red]Missing API Key[/red]"
            self.console.print(f"  [cyan]{status.display_name.ljust(width)}[/cyan]  {label}")
            if status.available:
                count = len(live_models.get(status.name, []))
                if count:
                    self.console.print(f"     {count} models available", style="dim")
            else:
                self.console.print(f"     Set {status.env_key} to enable", style="dim", highlight=False)

        available_count = sum(1 for s in statuses if s.available)
        self.console.print(f"\n{available_count} of {len(statuses)} providers configured", style="dim")

        if detailed:
            for status in statuses:
                models = live_models.get(status.name, [])
                if status.available and models:
                    self.console.print()
                    self.console.print(build_models_table(status.display_name, models, show_all=True))

        self.console.print('\nTip: Use "msg-ai models <provider>" to see models for a specific provider', style="dim")


class ModelsCommand:
    """List one provider's models, fetched live."""

    def __init__(self, registry: ProviderRegistry, console: Console, err_console: Console):
        self.registry = registry
        self.console = console
        self.err_console = err_console

    def execute(self, provider_name: str) -> None:
        provider = self.registry.get(provider_name)
        if not provider.is_available():
            self.err_console.print(f"[red]x {provider.display_name} is not configured[/red]")
            self.err_console.print(f"Set {provider.env_key} environment variable", style="yellow", highlight=False)
            raise typer.Exit(code=1)

        with self.console.status("Fetching models from API...", spinner="dots"):
            models = provider.fetch_available_models()
        self.console.print(f"[green]Found {len(models)} models[/green]")
        self.console.print(build_models_table(provider.display_name, models, show_all=True))
        if models:
            self.console.print("\nUsage example:", style="dim")
            self.console.print(
                f'  msg-ai {provider.name} "Your message" -m {models[0]}', style="dim", markup=False, highlight=False
            )


__all__ = ["ChatCommand", "ListProvidersCommand", "ModelsCommand", "debug_enabled"]
