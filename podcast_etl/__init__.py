"""Podcast-ETL Pipeline Package.

This package contains the stages of the Top Podcasts ETL pipeline:
- bronze: Loads the daily CSV export into the raw staging table
- silver: Resolves show identity and cleans raw rows into typed records
- quality: Runs data-quality checks against the silver table
"""

__version__ = "0.1.0"
