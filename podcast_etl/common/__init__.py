"""
Common utilities shared across Podcast-ETL stages.

This package is intentionally small and focused on pure, dependency-light
helpers that are reused by multiple stages (record types, text coercion,
database connection handling).
"""
