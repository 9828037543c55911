"""
Bus interface declarations for IP cores.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import StrictModel

DEFAULT_PHYSICAL_PREFIX = "s_axi_"


class BusInterfaceMode(str, Enum):
    """Enumeration for bus interface modes."""

    MASTER = "master"
    SLAVE = "slave"
    SOURCE = "source"
    SINK = "sink"

    @property
    def is_receiving(self) -> bool:
        """Slave and sink ends see the library's master-side directions flipped."""
        return self in (BusInterfaceMode.SLAVE, BusInterfaceMode.SINK)


class ArrayConfig(StrictModel):
    """
    Replication of one bus interface declaration into several instances.

    Both patterns take an ``{index}`` placeholder. When a pattern is
    omitted the owning interface falls back to ``<name>_{index}`` and
    ``<prefix>{index}_``.
    """

    count: int = Field(..., description="Number of instances", ge=1)
    index_start: int = Field(default=0, description="Starting index")
    naming_pattern: Optional[str] = Field(
        default=None,
        description="Naming pattern with {index} placeholder (e.g., 'M_AXIS_CH{index}')",
    )
    physical_prefix_pattern: Optional[str] = Field(
        default=None, description="Physical prefix pattern with {index} placeholder"
    )

    @property
    def indices(self) -> List[int]:
        """Get list of all instance indices."""
        return list(range(self.index_start, self.index_start + self.count))


class BusInterface(StrictModel):
    """
    Bus interface declaration for an IP core.

    ``type`` is free-form; it is normalized to a bus library key only when
    the interface is expanded.
    """

    name: str = Field(..., description="Logical interface name")
    type: str = Field(..., description="Bus type (e.g., 'AXI4L', 'axi4-lite', 'avmm')")
    mode: BusInterfaceMode = Field(
        default=BusInterfaceMode.SLAVE, description="Interface mode"
    )

    physical_prefix: Optional[str] = Field(
        default=None, description="Prefix for physical port names (e.g., 's_axi_')"
    )

    associated_clock: Optional[str] = Field(
        default=None, description="Logical clock name this interface uses"
    )
    associated_reset: Optional[str] = Field(
        default=None, description="Logical reset name this interface uses"
    )
    memory_map_ref: Optional[str] = Field(
        default=None, description="Memory map name for register access"
    )

    use_optional_ports: List[str] = Field(
        default_factory=list, description="Optional ports to include"
    )
    port_width_overrides: Dict[str, int] = Field(
        default_factory=dict, description="Port width overrides {logical_name: width}"
    )

    array: Optional[ArrayConfig] = Field(
        default=None, description="Array configuration for multiple instances"
    )

    description: str = Field(default="", description="Interface description")

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("port_width_overrides")
    @classmethod
    def validate_port_width_overrides(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Ensure overridden widths are positive."""
        for name, width in v.items():
            if width <= 0:
                raise ValueError(f"Port width override for '{name}' must be positive")
        return v

    @property
    def is_array(self) -> bool:
        return self.array is not None

    @property
    def instance_count(self) -> int:
        """Get number of interface instances (1 if not array)."""
        return self.array.count if self.array else 1

    def get_port_width(self, logical_name: str, default_width: int) -> int:
        """Effective width of a port: the override if present, else ``default_width``."""
        return self.port_width_overrides.get(logical_name, default_width)
