"""Typing protocols for parser mixins."""

from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from ipforge.errors import ParseError


class ParserHostContext(Protocol):
    """Methods required by parser mixins from the main parser class."""

    def _load_yaml(self, file_path: Path, what: str) -> Any:
        """Read one YAML document, raising NotFoundError/ParseError."""
        ...

    def _validation_error(
        self, error: ValidationError, context: str, file_path: Optional[Path]
    ) -> ParseError:
        """Convert a pydantic error into a ParseError."""
        ...
