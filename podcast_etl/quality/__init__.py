"""
Quality Stage

Data-quality checks run against the silver table after each load.
"""
