"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .capacity import CapacityStrategy, registered_count
from .advisory_capacity import AdvisoryCapacity

__all__ = ['CapacityStrategy', 'AdvisoryCapacity', 'registered_count']
