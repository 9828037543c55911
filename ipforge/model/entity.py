"""
Models produced by the reverse (VHDL to IP core) path.
"""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .base import Polarity
from .bus import BusInterfaceMode
from .port import PortDirection


class ParsedGeneric(BaseModel):
    """A generic clause entry: name, declared type and default text."""

    name: str
    type: str = ""
    default: Optional[str] = None


class ParsedPort(BaseModel):
    """
    A port clause entry.

    ``width`` is an int for scalars and numeric ranges, the generic's name
    for ``<GENERIC> - 1 downto 0`` ranges, and ``None`` when it cannot be
    inferred from the type.
    """

    name: str
    direction: PortDirection
    type: str
    width: Optional[Union[int, str]] = None

    @property
    def is_symbolic(self) -> bool:
        return isinstance(self.width, str)


class ParsedEntity(BaseModel):
    """Entity name, generics and ports in declaration order."""

    name: str
    generics: List[ParsedGeneric] = Field(default_factory=list)
    ports: List[ParsedPort] = Field(default_factory=list)

    def get_generic(self, name: str) -> Optional[ParsedGeneric]:
        """Case-insensitive generic lookup (VHDL identifiers are)."""
        lowered = name.lower()
        return next((g for g in self.generics if g.name.lower() == lowered), None)

    def resolve_width(self, port: ParsedPort) -> Optional[int]:
        """Numeric width of ``port``, substituting a generic's default if needed."""
        if port.width is None or isinstance(port.width, int):
            return port.width
        generic = self.get_generic(port.width)
        if generic is None or generic.default is None:
            return None
        try:
            return int(generic.default.strip(), 0)
        except ValueError:
            return None


class PortRole(str, Enum):
    """What the classifier decided a port is."""

    BUS = "bus"
    CLOCK = "clock"
    RESET = "reset"
    USER = "user"


class DetectedBusInterface(BaseModel):
    """A bus interface inferred from shared port-name prefixes."""

    name: str
    type: str
    mode: BusInterfaceMode = BusInterfaceMode.SLAVE
    physical_prefix: str
    members: List[str] = Field(default_factory=list, description="Member port names")


class ClassifiedPort(BaseModel):
    """A parsed port tagged with exactly one role."""

    port: ParsedPort
    role: PortRole
    logical_name: str = ""
    polarity: Optional[Polarity] = None
    bus_interface: Optional[str] = None


class PortClassification(BaseModel):
    """Every port of an entity, each tagged, plus the detected interfaces."""

    ports: List[ClassifiedPort] = Field(default_factory=list)
    bus_interfaces: List[DetectedBusInterface] = Field(default_factory=list)

    def by_role(self, role: PortRole) -> List[ClassifiedPort]:
        return [p for p in self.ports if p.role == role]

    @property
    def clocks(self) -> List[ClassifiedPort]:
        return self.by_role(PortRole.CLOCK)

    @property
    def resets(self) -> List[ClassifiedPort]:
        return self.by_role(PortRole.RESET)

    @property
    def bus_ports(self) -> List[ClassifiedPort]:
        return self.by_role(PortRole.BUS)

    @property
    def user_ports(self) -> List[ClassifiedPort]:
        return self.by_role(PortRole.USER)
