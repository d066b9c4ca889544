"""
Core business logic for the coaching portal.

This module is framework-agnostic - it doesn't import FastAPI, Supabase,
or any infrastructure concerns. Session routing and the intake wizard can
be tested headless, without a browser or a backend.
"""
