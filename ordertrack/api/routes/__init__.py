"""FastAPI route modules.

Exports all route modules for inclusion in the main application.
"""

from ordertrack.api.routes import audit, diag, orders

__all__ = [
    "audit",
    "diag",
    "orders",
]
