"""
Caller principals evaluated by the policy set.
"""

import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Principal:
    """Who a store operation runs as.

    End users carry their identity's user_id. Anonymous callers carry none and
    match no ownership rule. The system principal is reserved for trigger
    side effects and holds only the grants listed in policies.SYSTEM_GRANTS.
    """

    user_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    session_id: Optional[uuid.UUID] = None
    is_system: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @classmethod
    def anonymous(cls) -> "Principal":
        return cls()

    @classmethod
    def system(cls) -> "Principal":
        return cls(is_system=True)

    def __str__(self) -> str:
        if self.is_system:
            return "system"
        return str(self.user_id) if self.user_id else "anonymous"
