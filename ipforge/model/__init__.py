"""
Pydantic data models for IP core descriptions.

Declarations (what a document says) live next to the derived views the
compilers produce from them (``compiled``) and the models the reverse
parser emits (``entity``).
"""

from .base import VLNV, FlexibleModel, IpCoreBaseModel, Parameter, ParameterType, Polarity, StrictModel
from .bus import ArrayConfig, BusInterface, BusInterfaceMode
from .bus_library import BusDefinition, BusLibrary, BusLibraryCache, PortDefinition
from .clock_reset import Clock, Reset
from .compiled import ExpandedBusInterface, FlattenedField, FlattenedRegister, ResolvedBusPort
from .core import IpCore
from .entity import (
    ClassifiedPort,
    DetectedBusInterface,
    ParsedEntity,
    ParsedGeneric,
    ParsedPort,
    PortClassification,
    PortRole,
)
from .fileset import File, FileSet, FileType
from .memory_map import (
    AccessType,
    AddressBlock,
    BitFieldDef,
    MemoryMap,
    MemoryMapImport,
    RegisterDef,
)
from .port import Port, PortDirection

__all__ = [
    # Base
    "IpCoreBaseModel",
    "StrictModel",
    "FlexibleModel",
    "VLNV",
    "Parameter",
    "ParameterType",
    "Polarity",
    # Bus
    "BusInterface",
    "BusInterfaceMode",
    "ArrayConfig",
    "BusLibrary",
    "BusLibraryCache",
    "BusDefinition",
    "PortDefinition",
    # Memory
    "AccessType",
    "MemoryMap",
    "MemoryMapImport",
    "AddressBlock",
    "RegisterDef",
    "BitFieldDef",
    # Clock/Reset
    "Clock",
    "Reset",
    # Port
    "Port",
    "PortDirection",
    # FileSet
    "FileSet",
    "File",
    "FileType",
    # Core
    "IpCore",
    # Derived
    "ExpandedBusInterface",
    "ResolvedBusPort",
    "FlattenedRegister",
    "FlattenedField",
    # Reverse parsing
    "ParsedEntity",
    "ParsedGeneric",
    "ParsedPort",
    "PortRole",
    "ClassifiedPort",
    "DetectedBusInterface",
    "PortClassification",
]
