"""
FileSet definitions for IP cores.
"""

from enum import Enum
from pathlib import Path
from typing import Any, List

from pydantic import Field, field_validator

from .base import StrictModel


class FileType(str, Enum):
    """File type enumeration."""

    VHDL = "vhdl"
    VERILOG = "verilog"
    SYSTEMVERILOG = "systemverilog"
    XDC = "xdc"
    SDC = "sdc"
    TCL = "tcl"
    PYTHON = "python"
    MAKEFILE = "makefile"
    YAML = "yaml"
    XML = "xml"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: Any) -> "FileType":
        """Case-insensitive lookup; unrecognized types become ``UNKNOWN``."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class File(StrictModel):
    """File reference within a file set."""

    path: str = Field(..., description="File path, relative to the IP core document")
    type: FileType = Field(default=FileType.UNKNOWN, description="File type")
    description: str = Field(default="", description="File description")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, FileType):
            return v
        return FileType.from_string(v)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("File path cannot be empty")
        return v.strip()

    @property
    def file_name(self) -> str:
        return Path(self.path).name

    @property
    def is_hdl(self) -> bool:
        return self.type in (FileType.VHDL, FileType.VERILOG, FileType.SYSTEMVERILOG)


class FileSet(StrictModel):
    """
    Named collection of files for an IP core.
    """

    name: str = Field(..., description="File set name")
    description: str = Field(default="", description="File set description")
    files: List[File] = Field(default_factory=list, description="Files in this set")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("FileSet name cannot be empty")
        return v.strip()

    @property
    def hdl_files(self) -> List[File]:
        return [f for f in self.files if f.is_hdl]
