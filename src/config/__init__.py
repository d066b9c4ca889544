"""
Portal configuration.

Everything is read from the environment (or `.env`): Supabase credentials
or mock mode, the coach identity, demo access, and landing page media.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
