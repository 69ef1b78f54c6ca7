"""
Core abstract models package.
"""

from .base import (
    TimeStampedModel,
    AuditableModel,
)

__all__ = [
    'TimeStampedModel',
    'AuditableModel',
]
