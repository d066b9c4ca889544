"""
Ripped City Portal - marketing site and client management for a coaching business.

This package contains the complete application:
- core: Framework-agnostic session routing, intake wizard and landing logic
- infrastructure: Supabase integration (auth + client records)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
