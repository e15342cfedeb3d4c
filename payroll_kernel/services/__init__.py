"""Kernel services - write-side base classes (flush only, never commit)."""

from payroll_kernel.services.base import BaseService

__all__ = ["BaseService"]
