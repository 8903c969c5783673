"""
Stock Kernel

Shared infrastructure for branch stock replenishment:
- Typed, coded exceptions with an HTTP-agnostic classification
- Structured JSON logging with request-scoped context
- SQLAlchemy declarative base, engine and session management
- Deterministic clock and workflow state machine types
- Sequence allocation and per-key serialization services
"""

__version__ = "0.1.0"
