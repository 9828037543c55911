"""
YAML Parser for IP Core definitions.

Loads YAML files and converts them to canonical Pydantic models.
Resolves memory map and file set imports relative to the document.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

from ipforge.errors import NotFoundError, ParseError
from ipforge.model import BusInterface, Clock, IpCore, Parameter, Port, Reset
from ipforge.utils import filter_none

from .fileset_parser import FileSetParserMixin
from .memory_map_parser import MemoryMapParserMixin

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class YamlIpCoreParser(MemoryMapParserMixin, FileSetParserMixin):
    """
    Parser for IP core YAML definitions.

    Handles:
    - Main IP core file parsing
    - Memory map imports (separate files)
    - FileSet imports
    - Validation and error reporting with line numbers

    ``useBusLibrary`` is kept as written; it is resolved against the
    document directory when the core is compiled.
    """

    def parse_file(self, file_path: Union[str, Path]) -> IpCore:
        """
        Parse an IP core YAML file.

        Args:
            file_path: Path to the IP core YAML file

        Returns:
            IpCore: Validated IP core model

        Raises:
            NotFoundError: If the file or an imported memory map is missing
            ParseError: If parsing or validation fails
        """
        file_path = Path(file_path).resolve()
        data = self._load_yaml(file_path, "IP core")
        return self._parse_document(data, file_path, file_path.parent)

    def parse_text(
        self, text: str, base_dir: Optional[Union[str, Path]] = None
    ) -> IpCore:
        """
        Parse IP core YAML from a string.

        Args:
            text: YAML source
            base_dir: Directory that imports resolve against; defaults to
                the working directory

        Returns:
            IpCore: Validated IP core model
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"YAML syntax error: {e}", None, self._error_line(e)) from e
        base = Path(base_dir) if base_dir is not None else Path.cwd()
        return self._parse_document(data, None, base)

    @staticmethod
    def _error_line(error: yaml.YAMLError) -> Optional[int]:
        mark = getattr(error, "problem_mark", None)
        return mark.line + 1 if mark else None

    def _load_yaml(self, file_path: Path, what: str) -> Any:
        """Read and parse one YAML file."""
        if not file_path.exists():
            raise NotFoundError(f"{what} file not found: {file_path}")
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"YAML syntax error: {e}", file_path, self._error_line(e)) from e

    @staticmethod
    def _validation_error(
        error: ValidationError, context: str, file_path: Optional[Path]
    ) -> ParseError:
        """Convert Pydantic validation errors to ParseError."""
        lines = []
        for detail in error.errors():
            loc = " -> ".join(str(x) for x in detail["loc"])
            lines.append(f"{loc}: {detail['msg']}" if loc else detail["msg"])
        return ParseError(f"Error parsing {context}:\n  " + "\n  ".join(lines), file_path)

    def _parse_document(self, data: Any, file_path: Optional[Path], base_dir: Path) -> IpCore:
        if not isinstance(data, dict):
            raise ParseError("Root element must be a YAML object/dictionary", file_path)
        if not data.get("vlnv"):
            raise ParseError("Missing required field: vlnv", file_path)

        kwargs = {
            "api_version": data.get("apiVersion"),
            "vlnv": data["vlnv"],
            "description": data.get("description"),
            "clocks": self._parse_clocks(data.get("clocks") or [], file_path),
            "resets": self._parse_resets(data.get("resets") or [], file_path),
            "ports": self._parse_items(Port, data.get("ports") or [], "port", file_path),
            "bus_interfaces": self._parse_items(
                BusInterface, data.get("busInterfaces") or [], "busInterface", file_path
            ),
            "parameters": self._parse_items(
                Parameter, data.get("parameters") or [], "parameter", file_path
            ),
            "memory_maps": self._parse_memory_maps(data.get("memoryMaps"), file_path, base_dir),
            "file_sets": self._parse_file_sets(data.get("fileSets") or [], file_path, base_dir),
            "use_bus_library": data.get("useBusLibrary"),
        }
        if kwargs["api_version"] is not None:
            kwargs["api_version"] = str(kwargs["api_version"])

        try:
            ip_core = IpCore(**filter_none(kwargs))
        except ValidationError as e:
            raise self._validation_error(e, "IP core", file_path) from e

        logger.info("Loaded IP core %s", ip_core.vlnv.full_name)
        return ip_core

    def _parse_items(
        self,
        model: Type[ModelT],
        data: List[Dict[str, Any]],
        label: str,
        file_path: Optional[Path],
    ) -> List[ModelT]:
        """Validate each entry of a list section, reporting the failing index."""
        if not isinstance(data, list):
            raise ParseError(f"{label} section must be a list", file_path)
        items = []
        for idx, item in enumerate(data):
            try:
                items.append(model.model_validate(item))
            except ValidationError as e:
                raise self._validation_error(e, f"{label}[{idx}]", file_path) from e
        return items

    @staticmethod
    def _with_logical_name(item: Any, default: str) -> Any:
        if not isinstance(item, dict) or "logicalName" in item or "logical_name" in item:
            return item
        return {**item, "logicalName": default}

    def _parse_clocks(self, data: List[Dict[str, Any]], file_path: Optional[Path]) -> List[Clock]:
        """Parse clock definitions; logical name defaults to CLK."""
        entries = [self._with_logical_name(item, "CLK") for item in data]
        return self._parse_items(Clock, entries, "clock", file_path)

    def _parse_resets(self, data: List[Dict[str, Any]], file_path: Optional[Path]) -> List[Reset]:
        """Parse reset definitions; logical name defaults from polarity."""
        entries = []
        for item in data:
            polarity = ""
            if isinstance(item, dict):
                polarity = str(item.get("polarity", "")).lower().replace("_", "").replace("-", "")
            default_logical = "RESET_N" if polarity == "activelow" else "RESET"
            entries.append(self._with_logical_name(item, default_logical))
        return self._parse_items(Reset, entries, "reset", file_path)
