from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

# Customer group applied when nobody is signed in.
GUEST_CUSTOMER_GROUP = "US-Retail"


@dataclass(frozen=True, slots=True)
class CustomerContext:
    customer_group: str
    persona_id: str | None = None
    user_id: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def guest(cls) -> CustomerContext:
        return cls(customer_group=GUEST_CUSTOMER_GROUP)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None
