"""Exception hierarchy shared by the loaders, compilers and parsers."""

from pathlib import Path
from typing import Optional, Union


class IpForgeError(Exception):
    """Base class for all ipforge errors."""


class ParseError(IpForgeError):
    """A document or source text could not be read into the model."""

    def __init__(
        self,
        message: str,
        file_path: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
    ):
        self.file_path = file_path
        self.line = line
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        """Format error message with file and line information."""
        parts = []
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        if self.line is not None:
            parts.append(f"Line: {self.line}")
        parts.append(message)
        return " | ".join(parts)


class NotFoundError(IpForgeError):
    """A referenced file or construct does not exist."""


class EntityNotFoundError(NotFoundError):
    """Source text contains no ``entity <name> is`` declaration."""


class BusLibraryError(IpForgeError):
    """The default bus library is missing or malformed."""


class UnknownProtocolError(IpForgeError):
    """A bus interface names a protocol absent from the alias table."""

    def __init__(self, interface_name: str, protocol: str):
        self.interface_name = interface_name
        self.protocol = protocol
        super().__init__(
            f"Bus interface '{interface_name}' uses unknown protocol type '{protocol}'"
        )
