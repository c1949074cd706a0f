"""Services for the request kernel (write side)."""

from request_kernel.services.lifecycle_controller import RequestLifecycleController
from request_kernel.services.request_store import InMemoryRequestStore, SqlRequestStore
from request_kernel.services.role_resolver import StaticRoleResolver
from request_kernel.services.submission_service import (
    RequestSubmissionService,
    initial_status,
)

__all__ = [
    "InMemoryRequestStore",
    "RequestLifecycleController",
    "RequestSubmissionService",
    "SqlRequestStore",
    "StaticRoleResolver",
    "initial_status",
]
