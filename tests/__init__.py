"""Podcast-ETL Test Suite.

This package contains unit and integration tests for the Podcast-ETL project.

Test Structure:
- unit/: Unit tests for individual functions and classes, no database needed
- integration/: Bronze -> silver flow against a dedicated PostgreSQL database
"""
