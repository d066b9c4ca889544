"""
Session/role controller and per-visitor state.
"""

from .controller import (
    ClientMutationError,
    PortalController,
    PortalView,
    ViewKind,
)
from .registry import Visitor, VisitorFactory, VisitorRegistry

__all__ = [
    "ClientMutationError",
    "PortalController",
    "PortalView",
    "ViewKind",
    "Visitor",
    "VisitorFactory",
    "VisitorRegistry",
]
