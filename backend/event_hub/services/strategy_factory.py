"""
Capacity strategy factory.
Configures which capacity enforcement strategy registrations use.
"""

from typing import Optional

from event_hub.core.config import get_settings
from event_hub.services.capacity_service import LockingCapacity
from event_hub.services.interfaces.advisory_capacity import AdvisoryCapacity
from event_hub.services.interfaces.capacity import CapacityStrategy

STRATEGIES = {
    LockingCapacity.name: LockingCapacity,
    AdvisoryCapacity.name: AdvisoryCapacity,
}


def build_capacity_strategy(name: str) -> CapacityStrategy:
    """
    Build a strategy by name.

    - locking (default): atomic, no overbooking
    - advisory: check-then-act, kept for comparison

    Raises:
        ValueError: unknown strategy name
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown capacity strategy {name!r}; expected one of {sorted(STRATEGIES)}")


_strategy: Optional[CapacityStrategy] = None


def get_capacity_strategy() -> CapacityStrategy:
    """Get the configured capacity strategy singleton (CAPACITY_STRATEGY setting)."""
    global _strategy
    if _strategy is None:
        _strategy = build_capacity_strategy(get_settings().CAPACITY_STRATEGY)
    return _strategy
