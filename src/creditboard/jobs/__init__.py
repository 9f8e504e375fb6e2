"""Background jobs."""

from .reconciliation import register_scheduler

__all__ = ["register_scheduler"]
