"""ORM models for the request kernel."""

from request_kernel.models.request import RequestModel, RequestTransitionModel

__all__ = [
    "RequestModel",
    "RequestTransitionModel",
]
