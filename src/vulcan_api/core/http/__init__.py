"""HTTP-facing helpers for the authorization core."""

from .dependencies import get_current_actor, get_request_settings

__all__ = ["get_current_actor", "get_request_settings"]
