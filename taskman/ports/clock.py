from typing import Protocol
from datetime import datetime

class Clock(Protocol):
    """Source of the current instant. Returns an aware datetime in UTC."""
    def now(self) -> datetime:
        pass
