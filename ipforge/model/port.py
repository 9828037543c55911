"""
Port definitions for IP cores.
"""

from enum import Enum
from typing import Any, Union

from pydantic import Field, field_validator

from .base import StrictModel


class PortDirection(str, Enum):
    """Port direction enumeration."""

    IN = "in"
    OUT = "out"
    INOUT = "inout"

    @classmethod
    def from_string(cls, value: str) -> "PortDirection":
        """Normalize common direction aliases into ``PortDirection``."""
        mapping = {
            "in": cls.IN,
            "input": cls.IN,
            "out": cls.OUT,
            "output": cls.OUT,
            "buffer": cls.OUT,
            "inout": cls.INOUT,
        }
        return mapping.get(value.lower().strip(), cls.IN)

    def flipped(self) -> "PortDirection":
        """Return the direction seen from the other end of the wire.

        ``inout`` is symmetric and passes through unchanged.
        """
        if self is PortDirection.IN:
            return PortDirection.OUT
        if self is PortDirection.OUT:
            return PortDirection.IN
        return self


class Port(StrictModel):
    """
    User port of an IP core.

    Covers data and control signals that belong to neither a clock, a
    reset, nor a bus interface.
    """

    name: str = Field(..., description="Physical port name (HDL)")
    logical_name: str = Field(default="", description="Logical name for association")
    direction: PortDirection = Field(..., description="Port direction")
    width: Union[int, str] = Field(default=1, description="Width in bits or generic name")
    type: str = Field(default="", description="Declared VHDL type, when known")
    description: str = Field(default="", description="Port description")

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        if isinstance(v, str):
            return PortDirection.from_string(v).value
        return v

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: Union[int, str]) -> Union[int, str]:
        """Ensure port width is positive or a generic reference."""
        if isinstance(v, int):
            if v <= 0:
                raise ValueError("Port width must be positive")
        elif not v.strip():
            raise ValueError("Port width parameter reference cannot be empty")
        return v

    @property
    def is_parameterized(self) -> bool:
        """Width refers to a generic instead of a number."""
        return isinstance(self.width, str)

    @property
    def is_vector(self) -> bool:
        if self.is_parameterized:
            return True
        return self.width > 1
