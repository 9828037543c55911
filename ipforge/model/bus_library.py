"""
Bus Library module.

Provides access to bus protocol definitions (AXI4L, AXIS, AVALON_MM, ...)
and an injectable cache that owns the loaded tables.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ipforge.errors import BusLibraryError
from ipforge.model.base import VLNV
from ipforge.model.port import PortDirection
from ipforge.utils import BUS_DEFINITIONS_PATH, parse_number

logger = logging.getLogger(__name__)


@dataclass
class PortDefinition:
    """One logical port of a bus protocol, seen from the master side."""

    name: str
    direction: PortDirection = PortDirection.IN
    width: int = 1
    presence: str = "required"

    @property
    def is_required(self) -> bool:
        return self.presence == "required"

    @property
    def is_optional(self) -> bool:
        return self.presence == "optional"


@dataclass
class BusDefinition:
    """Complete bus definition including type info and ordered ports."""

    key: str  # e.g., "AXI4L"
    bus_type: Optional[VLNV] = None
    ports: List[PortDefinition] = field(default_factory=list)

    @property
    def required_ports(self) -> List[PortDefinition]:
        return [p for p in self.ports if p.is_required]

    @property
    def optional_ports(self) -> List[PortDefinition]:
        return [p for p in self.ports if p.is_optional]


class BusLibrary:
    """
    Mapping of protocol key to its port definitions.

    Built from a bus library document shaped like
    ``{KEY: {busType: {...}, ports: [{name, direction, width, presence}]}}``.
    """

    def __init__(self, definitions: Dict[str, BusDefinition], source: Optional[Path] = None):
        self._definitions = definitions
        self.source = source

    @classmethod
    def from_dict(cls, raw_data: Any, source: Optional[Path] = None) -> "BusLibrary":
        """Build a library from an already parsed document.

        Raises:
            BusLibraryError: If the document is not a mapping of protocol entries.
        """
        if raw_data is None:
            raw_data = {}
        if not isinstance(raw_data, dict):
            raise BusLibraryError(
                f"Bus library {source or '<memory>'} must be a mapping, got {type(raw_data).__name__}"
            )

        definitions = {}
        for key, data in raw_data.items():
            if not isinstance(data, dict):
                raise BusLibraryError(f"Bus library entry '{key}' must be a mapping")

            bus_type = None
            bus_type_data = data.get("busType")
            if isinstance(bus_type_data, dict):
                bus_type = VLNV(
                    vendor=bus_type_data.get("vendor") or "unknown",
                    library=bus_type_data.get("library") or "unknown",
                    name=bus_type_data.get("name") or str(key).lower(),
                    version=bus_type_data.get("version") or "1.0",
                )

            ports = []
            for port_data in data.get("ports") or []:
                if not isinstance(port_data, dict) or not port_data.get("name"):
                    raise BusLibraryError(f"Bus library entry '{key}' has a port without a name")
                ports.append(
                    PortDefinition(
                        name=str(port_data["name"]),
                        direction=PortDirection.from_string(str(port_data.get("direction", "in"))),
                        width=parse_number(port_data.get("width"), 1) or 1,
                        presence=str(port_data.get("presence", "required")).lower(),
                    )
                )

            definitions[str(key)] = BusDefinition(key=str(key), bus_type=bus_type, ports=ports)

        return cls(definitions, source)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BusLibrary":
        """
        Load bus definitions from a YAML file.

        Raises:
            BusLibraryError: If the file is missing or cannot be parsed.
        """
        path = Path(path)
        if not path.exists():
            raise BusLibraryError(f"Bus definitions file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise BusLibraryError(f"Failed to parse bus library {path}: {e}") from e

        return cls.from_dict(raw_data, source=path)

    def list_bus_types(self) -> List[str]:
        """Get list of available bus type keys."""
        return list(self._definitions.keys())

    def get_bus_definition(self, bus_type: str) -> Optional[BusDefinition]:
        """Get full bus definition by key, or ``None`` if absent."""
        return self._definitions.get(bus_type)

    def get_ports(self, bus_type: str) -> List[PortDefinition]:
        """Ordered port definitions of ``bus_type`` (empty when unknown)."""
        defn = self.get_bus_definition(bus_type)
        return list(defn.ports) if defn else []

    def __contains__(self, bus_type: object) -> bool:
        return bus_type in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


class BusLibraryCache:
    """
    Owns loaded bus libraries.

    One instance is created by whoever drives generation and handed to
    the components that need protocol data; tests create their own.
    The default library is loaded lazily on first use. Explicitly
    referenced libraries are cached by resolved path.
    """

    def __init__(self, default_path: Optional[Union[str, Path]] = None):
        self.default_path = Path(default_path) if default_path else BUS_DEFINITIONS_PATH
        self._default: Optional[BusLibrary] = None
        self._explicit: Dict[Path, BusLibrary] = {}

    def load_default(self) -> BusLibrary:
        """Return the default library, loading it on first use.

        Raises:
            BusLibraryError: If the default library cannot be loaded.
        """
        if self._default is None:
            try:
                self._default = BusLibrary.load(self.default_path)
            except BusLibraryError:
                logger.error("Default bus library could not be loaded from %s", self.default_path)
                raise
            logger.info("Loaded default bus library from %s", self.default_path)
        return self._default

    def load(self, path: Union[str, Path]) -> BusLibrary:
        """Load an explicitly referenced library, caching it by absolute path."""
        resolved = Path(path).resolve()
        if resolved in self._explicit:
            logger.debug("Using cached bus library: %s", resolved)
            return self._explicit[resolved]

        library = BusLibrary.load(resolved)
        self._explicit[resolved] = library
        logger.info("Loaded bus library: %s", resolved)
        return library

    def resolve(
        self,
        use_bus_library: Optional[str] = None,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> BusLibrary:
        """
        Pick the library an IP core should be compiled against.

        An explicit reference is resolved relative to ``base_dir``. If it
        cannot be loaded a warning is logged and the default library is
        returned instead.

        Raises:
            BusLibraryError: If the default library is needed and cannot be loaded.
        """
        if use_bus_library:
            path = Path(use_bus_library)
            if not path.is_absolute() and base_dir is not None:
                path = Path(base_dir) / path
            try:
                return self.load(path)
            except BusLibraryError as e:
                logger.warning("%s; falling back to the default bus library", e)
        return self.load_default()

    def clear(self) -> None:
        """Drop every cached library."""
        self._default = None
        self._explicit.clear()
        logger.info("Bus library cache cleared")
