"""
Infrastructure layer - external service integrations.

- supabase: auth and the clients table (plus an in-memory mock)

These wrappers translate between external formats and our domain models.
"""
