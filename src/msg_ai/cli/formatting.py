"""Model-table and error formatting for the msg-ai CLI."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from msg_ai.providers.errors import (
    APIError,
    AuthenticationError,
    ContextLengthError,
    ModelNotFoundError,
    NetworkError,
    RateLimitError,
)

FAMILY_PRIORITY = ["gpt-5", "gpt-4", "o1", "gpt-3", "gemini-2", "gemini-1", "grok"]

# (prefix, family), checked in order
FAMILY_PREFIXES = [
    ("gpt-5", "GPT-5"),
    ("gpt-4.1", "GPT-4.1"),
    ("gpt-4o", "GPT-4o"),
    ("gpt-4", "GPT-4"),
    ("gpt-3", "GPT-3.5"),
    ("o1-pro", "O1 Pro"),
    ("o1", "O1"),
    ("chatgpt", "ChatGPT"),
    ("gemini-2.5", "Gemini 2.5"),
    ("gemini-2.0", "Gemini 2.0"),
    ("gemini-1.5", "Gemini 1.5"),
    ("gemini-exp", "Gemini Experimental"),
    ("gemini", "Gemini"),
    ("grok-3", "Grok 3"),
    ("grok-2", "Grok 2"),
    ("grok", "Grok"),
    ("deepseek", "DeepSeek"),
    ("moonshot", "Moonshot"),
]

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

COLLAPSED_ROWS = 3


@dataclass
class ModelGroup:
    family: str
    models: List[str]


def get_model_family(model: str) -> str:
    for prefix, family in FAMILY_PREFIXES:
        if model.startswith(prefix):
            return family
    first = model.split("-")[0]
    return first[:1].upper() + first[1:]


def extract_date(model: str) -> Optional[str]:
    match = _DATE_RE.search(model)
    return match.group(0) if match else None


def _family_rank(family: str) -> Optional[int]:
    key = family.lower().replace(" ", "-")
    for index, marker in enumerate(FAMILY_PRIORITY):
        if marker in key:
            return index
    return None


def _compare_families(a: str, b: str) -> int:
    rank_a, rank_b = _family_rank(a), _family_rank(b)
    if rank_a is not None and rank_b is not None:
        return rank_a - rank_b
    if rank_a is not None:
        return -1
    if rank_b is not None:
        return 1
    return (a > b) - (a < b)


def _newest_first(a: str, b: str) -> int:
    date_a, date_b = extract_date(a), extract_date(b)
    if date_a and date_b and date_a != date_b:
        return -1 if date_a > date_b else 1
    return (b > a) - (b < a)


def group_models_by_family(models: List[str]) -> List[ModelGroup]:
    """Group model ids by family.

    Families in FAMILY_PRIORITY come first in that order, the rest
    alphabetically. Within a family, dated ids run newest first and the
    rest reverse-alphabetically.
    """
    groups: dict = {}
    for model in models:
        groups.setdefault(get_model_family(model), []).append(model)
    families = sorted(groups, key=functools.cmp_to_key(_compare_families))
    return [
        ModelGroup(family, sorted(groups[family], key=functools.cmp_to_key(_newest_first)))
        for family in families
    ]


def build_models_table(provider_name: str, models: List[str], show_all: bool = False) -> Table:
    table = Table(title=f"{provider_name} Models", box=box.ROUNDED, show_lines=True)
    table.add_column("Family", style="bold yellow", no_wrap=True)
    table.add_column("Models", style="white")
    for group in group_models_by_family(models):
        shown = group.models if show_all else group.models[:COLLAPSED_ROWS]
        cell = "\n".join(shown)
        hidden = len(group.models) - len(shown)
        if hidden > 0:
            cell += f"\n[dim italic]... and {hidden} more[/dim italic]"
        table.add_row(group.family, cell)
    table.caption = f"Total: {len(models)} models available"
    return table


def describe_error(error: BaseException) -> Tuple[str, str]:
    """Return (headline, detail) for a user-facing error report.

    Vendor errors with a status and body show the parsed API message;
    everything else shows its class name and message.
    """
    if isinstance(error, APIError) and error.has_response:
        return f"{type(error).__name__} ({error.status_code})", error.api_message
    name = type(error).__name__ or "Error"
    return name, str(error)


def error_hint(error: BaseException) -> Optional[str]:
    """A one-line remediation hint for the error category, if there is one."""
    provider = getattr(error, "provider", "") or "<provider>"
    if isinstance(error, APIError) and any(
        marker in error.api_message.lower() for marker in ("quota", "billing", "insufficient")
    ):
        return "You have exceeded your API quota. Please check your billing."
    if isinstance(error, RateLimitError):
        if error.retry_after is not None:
            return f"Please wait {error.retry_after:g}s before trying again."
        return "Please wait a moment before trying again."
    if isinstance(error, AuthenticationError):
        return "Please check your API key."
    if isinstance(error, ContextLengthError):
        return "Your message is too long for this model. Try a shorter message."
    if isinstance(error, ModelNotFoundError) or (isinstance(error, APIError) and error.status_code == 404):
        return f"Try running: msg-ai models {provider} to see available models"
    if isinstance(error, NetworkError):
        return "Unable to connect to the API. Please check your internet connection."
    return None


def render_error(console: Console, error: BaseException) -> None:
    headline, detail = describe_error(error)
    console.print(f"\n[red]x {headline}[/red]", highlight=False)
    for line in detail.splitlines() or [""]:
        console.print(f"   {line}", style="yellow", markup=False, highlight=False)
    hint = error_hint(error)
    if hint:
        console.print(f"   {hint}", style="dim", markup=False, highlight=False)


__all__ = [
    "ModelGroup",
    "get_model_family",
    "extract_date",
    "group_models_by_family",
    "build_models_table",
    "describe_error",
    "error_hint",
    "render_error",
]
