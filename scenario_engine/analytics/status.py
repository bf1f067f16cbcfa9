"""Not-computed sentinel shared by the analytics engines."""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class NotComputed:
    """
    A prerequisite is missing (e.g. no simulation has run yet).
    
    `reason` is a complete sentence suitable for display as-is.
    """
    
    reason: str
    computed: bool = field(default=False, init=False)
    
    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {"computed": False, "reason": self.reason}
