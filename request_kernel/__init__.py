"""
Request Kernel

Lifecycle engine for club resource and fund requests:
- Canonical status vocabulary with legacy-string normalization
- Role-gated transition table (department review, club review, fulfillment)
- Compare-and-swap commits with an append-only transition history
"""

__version__ = "0.1.0"
