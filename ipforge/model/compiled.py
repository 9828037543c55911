"""
Derived, address-resolved views of an IP core.

These are the shapes handed to templates. They are rebuilt on every
compile and never written back to a document.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .bus import BusInterfaceMode
from .port import PortDirection


class ResolvedBusPort(BaseModel):
    """A bus library port materialized on one interface instance."""

    logical_name: str
    name: str = Field(..., description="Physical signal name")
    direction: PortDirection
    width: int
    type: str = Field(..., description="VHDL type string")


class ExpandedBusInterface(BaseModel):
    """One concrete bus interface instance with its active ports."""

    name: str
    type: str = Field(..., description="Protocol type as declared")
    bus_key: str = Field(..., description="Bus library key, e.g. 'AXI4L'")
    template_type: str = Field(..., description="Render tag, e.g. 'axil'")
    mode: BusInterfaceMode
    physical_prefix: str
    associated_clock: Optional[str] = None
    associated_reset: Optional[str] = None
    memory_map_ref: Optional[str] = None
    array_index: Optional[int] = None
    ports: List[ResolvedBusPort] = Field(default_factory=list)


class FlattenedField(BaseModel):
    """Bit field with its absolute position inside the register."""

    name: str
    offset: int
    width: int
    access: str
    reset_value: int = 0
    description: str = ""

    @property
    def msb(self) -> int:
        return self.offset + self.width - 1


class FlattenedRegister(BaseModel):
    """Leaf register at its absolute byte offset."""

    name: str
    offset: int
    access: str
    description: str = ""
    size: int = 32
    reset_value: int = 0
    fields: List[FlattenedField] = Field(default_factory=list)

    @property
    def hex_offset(self) -> str:
        return f"0x{self.offset:04X}"
