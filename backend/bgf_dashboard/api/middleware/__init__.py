"""
API Middleware Module

This module contains middleware for request/response processing and error handling.

Modules:
    - correlation: Request correlation ID middleware
    - edge_gate: Staff cookie inspection ahead of routing (never blocks)
    - error_handlers: Exception handlers for domain and validation errors
"""

from .correlation import CorrelationIdMiddleware
from .edge_gate import EdgeGateMiddleware
from .error_handlers import register_error_handlers

__all__ = ["CorrelationIdMiddleware", "EdgeGateMiddleware", "register_error_handlers"]
