"""
Pydantic schemas for request/response validation.

Product DTOs live in ``backend.models.dto`` so the services can build them
without importing the API package.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse

__all__ = [
    'ErrorResponse',
    'HealthCheckResponse',
]
