"""
FastAPI application for the warehouse product catalog.

This package contains the REST API for catalog queries, product creation
and spreadsheet quantity updates.
"""

__version__ = "1.0.0"
