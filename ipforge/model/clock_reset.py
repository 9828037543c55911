"""
Clock and reset definitions for IP cores.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from .base import Polarity
from .port import Port, PortDirection


class Clock(Port):
    """Clock input of an IP core."""

    direction: PortDirection = Field(default=PortDirection.IN, description="Port direction")
    frequency: Optional[str] = Field(default=None, description="Clock frequency (e.g., '100MHz')")


class Reset(Port):
    """Reset input of an IP core, including its polarity."""

    direction: PortDirection = Field(default=PortDirection.IN, description="Port direction")
    polarity: Polarity = Field(
        default=Polarity.ACTIVE_HIGH,
        description="Reset polarity (activeHigh or activeLow)",
    )

    @field_validator("polarity", mode="before")
    @classmethod
    def normalize_polarity(cls, v: Any) -> Any:
        """Accept ``activeLow``, ``active_low``, ``ACTIVE-LOW`` and friends."""
        if isinstance(v, str):
            v_lower = v.lower().replace("_", "").replace("-", "")
            if v_lower == "activehigh":
                return Polarity.ACTIVE_HIGH
            if v_lower == "activelow":
                return Polarity.ACTIVE_LOW
        return v

    @property
    def is_active_low(self) -> bool:
        return self.polarity == Polarity.ACTIVE_LOW

    @property
    def is_active_high(self) -> bool:
        return self.polarity == Polarity.ACTIVE_HIGH
