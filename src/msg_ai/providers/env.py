"""Credential and endpoint resolution from the process environment."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence


def resolve_api_key(
    env_key: str,
    alternative_env_keys: Sequence[str],
    environ: Mapping[str, str],
) -> Optional[str]:
    """Return the first non-empty credential, trying ``env_key`` first.

    Returns None when no variable is set.
    """
    for key in (env_key, *alternative_env_keys):
        value = environ.get(key)
        if value:
            return value
    return None


def resolve_base_url(
    base_url_env_key: str,
    default: Optional[str],
    environ: Mapping[str, str],
) -> Optional[str]:
    """Return the base URL override from the environment, else ``default``."""
    return environ.get(base_url_env_key) or default


__all__ = ["resolve_api_key", "resolve_base_url"]
