"""FileSet parsing mixin for ``YamlIpCoreParser``."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ipforge.errors import NotFoundError, ParseError
from ipforge.model import FileSet

from .protocols import ParserHostContext

logger = logging.getLogger(__name__)


class FileSetParserMixin(ParserHostContext):
    """Mixin implementing file set parsing and import behavior."""

    def _parse_file_sets(
        self, data: List[Dict[str, Any]], file_path: Optional[Path], base_dir: Path
    ) -> List[FileSet]:
        """
        Parse file set definitions, including imported file-set files.

        An import that cannot be loaded is logged and skipped; the rest of
        the document still loads.
        """
        if not isinstance(data, list):
            raise ParseError("fileSets must be a list", file_path)

        file_sets = []
        for idx, fs_data in enumerate(data):
            if isinstance(fs_data, dict) and "import" in fs_data:
                import_path = (base_dir / str(fs_data["import"])).resolve()
                try:
                    file_sets.extend(self._load_file_set_from_file(import_path))
                except (NotFoundError, ParseError) as e:
                    logger.error("Failed to resolve file set import %s: %s", import_path, e)
                continue

            try:
                file_sets.append(FileSet.model_validate(fs_data))
            except ValidationError as e:
                raise self._validation_error(e, f"fileSet[{idx}]", file_path) from e
        return file_sets

    def _load_file_set_from_file(self, file_path: Path) -> List[FileSet]:
        """Load file sets from an external YAML file."""
        data = self._load_yaml(file_path, "FileSet")
        if not isinstance(data, list):
            data = [data]
        return self._parse_file_sets(data, file_path, file_path.parent)
