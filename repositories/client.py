"""
Supabase client construction and response helpers.

The client is built explicitly from settings by the repository container;
nothing is created at import time.
"""

from __future__ import annotations

from typing import Any, List

# The dependency is `supabase` (supabase-py).
from supabase import Client, create_client  # type: ignore[import-not-found]

from domain.errors import ConfigurationError


def create_supabase_client(url: str | None, key: str | None) -> Client:
    if not url:
        raise ConfigurationError(
            "Missing SUPABASE_URL. Set SUPABASE_URL to your Supabase project URL."
        )
    if not key:
        raise ConfigurationError(
            "Missing SUPABASE_KEY. Set SUPABASE_KEY to your Supabase API key."
        )
    return create_client(url, key)


def response_rows(response: Any, action: str) -> List[dict[str, Any]]:
    """
    Return the rows of a PostgREST response.

    Raises:
    - RuntimeError if Supabase returned an error response.
    """

    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return list(getattr(response, "data", None) or [])


__all__ = ["create_supabase_client", "response_rows"]
