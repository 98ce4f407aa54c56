"""
Service layer for the warehouse product catalog.

This package contains framework-agnostic business logic that can be used
by the CLI, the API, or any other interface.
"""

__version__ = "1.0.0"
