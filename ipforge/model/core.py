"""Main IP Core model - the canonical representation."""

from typing import List, Optional, Sequence, TypeVar, Union

from pydantic import Field, field_validator

from .base import VLNV, Parameter, StrictModel
from .bus import BusInterface
from .clock_reset import Clock, Reset
from .fileset import FileSet
from .memory_map import MemoryMap, MemoryMapImport
from .port import Port

NamedItem = TypeVar("NamedItem")

DEFAULT_API_VERSION = "ipcore/v1.0"


class IpCore(StrictModel):
    """
    Complete IP core description.

    Produced by the YAML loader and the reverse parser, consumed by the
    project generator. Instances are treated as values: editing code
    derives a new instance with ``model_copy`` instead of mutating one.

    ``memory_maps`` holds either the inline list or an unresolved
    ``{import: ...}`` reference; the loader resolves imports before
    handing a core to the generator.
    """

    api_version: str = Field(default=DEFAULT_API_VERSION, description="Schema version")
    vlnv: VLNV = Field(..., description="Unique identifier")
    description: str = Field(default="", description="IP core description")

    clocks: List[Clock] = Field(default_factory=list, description="Clock definitions")
    resets: List[Reset] = Field(default_factory=list, description="Reset definitions")
    ports: List[Port] = Field(default_factory=list, description="User ports")
    bus_interfaces: List[BusInterface] = Field(
        default_factory=list, description="Bus interface declarations"
    )

    memory_maps: Union[List[MemoryMap], MemoryMapImport] = Field(
        default_factory=list, description="Inline memory maps or an import reference"
    )

    file_sets: List[FileSet] = Field(default_factory=list, description="File sets")
    parameters: List[Parameter] = Field(default_factory=list, description="Generics/parameters")

    use_bus_library: Optional[str] = Field(
        default=None, description="Path to a bus definitions library"
    )

    @field_validator("api_version", mode="before")
    @classmethod
    def validate_api_version(cls, v) -> str:
        v = str(v).strip() if v is not None else ""
        if not v:
            raise ValueError("API version cannot be empty")
        return v

    @staticmethod
    def _find_by_name(items: Sequence[NamedItem], name: str) -> Optional[NamedItem]:
        return next((item for item in items if getattr(item, "name", None) == name), None)

    def get_clock(self, name: str) -> Optional[Clock]:
        return self._find_by_name(self.clocks, name)

    def get_reset(self, name: str) -> Optional[Reset]:
        return self._find_by_name(self.resets, name)

    def get_parameter(self, name: str) -> Optional[Parameter]:
        return self._find_by_name(self.parameters, name)

    @property
    def memory_map_list(self) -> List[MemoryMap]:
        """Inline memory maps; empty while an import is still unresolved."""
        if isinstance(self.memory_maps, MemoryMapImport):
            return []
        return list(self.memory_maps)

    @property
    def has_unresolved_import(self) -> bool:
        return isinstance(self.memory_maps, MemoryMapImport)

    @property
    def slave_bus_interfaces(self) -> List[BusInterface]:
        """Slave/sink interfaces in declaration order."""
        return [bus for bus in self.bus_interfaces if bus.mode.is_receiving]
