"""
Supabase integration for auth and client records.

Includes mock mode for local development without a Supabase project.
"""

from .client import (
    MockBackend,
    MockDataService,
    SupabaseConfig,
    SupabaseDataService,
    create_data_service,
)
from .demo import create_demo_service, demo_client_rows

__all__ = [
    "MockBackend",
    "MockDataService",
    "SupabaseConfig",
    "SupabaseDataService",
    "create_data_service",
    "create_demo_service",
    "demo_client_rows",
]
