"""Read-only selectors for the request kernel."""

from request_kernel.selectors.request_selector import RequestSelector

__all__ = ["RequestSelector"]
