"""Memory map parsing mixin for ``YamlIpCoreParser``."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ipforge.errors import ParseError
from ipforge.model import MemoryMap

from .protocols import ParserHostContext

logger = logging.getLogger(__name__)


def _drop_reserved(registers: List[Any]) -> List[Any]:
    """Remove ``{reserved: N}`` spacer entries, recursing into groups."""
    kept = []
    for reg in registers:
        if not isinstance(reg, dict):
            kept.append(reg)
            continue
        if "reserved" in reg and "name" not in reg:
            logger.debug("Ignoring reserved spacer entry: %s", reg)
            continue
        if isinstance(reg.get("registers"), list):
            reg = {**reg, "registers": _drop_reserved(reg["registers"])}
        kept.append(reg)
    return kept


class MemoryMapParserMixin(ParserHostContext):
    """
    Mixin implementing memory map parsing.

    Register groups (``registers`` + ``count``/``stride``) are kept as
    declared; replication happens when the map is compiled.
    """

    def _parse_memory_maps(
        self, data: Any, file_path: Optional[Path], base_dir: Path
    ) -> List[MemoryMap]:
        """Parse memory maps, including import forms and inline list forms."""
        if not data:
            return []

        if isinstance(data, dict) and "import" in data:
            import_path = (base_dir / str(data["import"])).resolve()
            logger.info("Resolving memory map import: %s", import_path)
            return self._load_memory_maps_from_file(import_path)

        if isinstance(data, list):
            return self._parse_memory_map_list(data, file_path)

        raise ParseError("memoryMaps must be either {import: ...} or a list", file_path)

    def _load_memory_maps_from_file(self, file_path: Path) -> List[MemoryMap]:
        """Load memory maps from an external YAML file (a list or a single map)."""
        map_data = self._load_yaml(file_path, "Memory map")

        if isinstance(map_data, dict):
            map_data = [map_data]
        if not isinstance(map_data, list):
            raise ParseError("Invalid memory map structure", file_path)
        return self._parse_memory_map_list(map_data, file_path)

    def _parse_memory_map_list(
        self, data: List[Dict[str, Any]], file_path: Optional[Path]
    ) -> List[MemoryMap]:
        """Parse list-form memory map definitions."""
        memory_maps = []
        for idx, map_data in enumerate(data):
            if not isinstance(map_data, dict):
                raise ParseError(f"memoryMap[{idx}] must be a mapping", file_path)
            blocks = []
            for block in map_data.get("addressBlocks") or []:
                if isinstance(block, dict) and isinstance(block.get("registers"), list):
                    block = {**block, "registers": _drop_reserved(block["registers"])}
                blocks.append(block)
            try:
                memory_maps.append(MemoryMap.model_validate({**map_data, "addressBlocks": blocks}))
            except ValidationError as e:
                raise self._validation_error(e, f"memoryMap[{idx}]", file_path) from e
        return memory_maps
