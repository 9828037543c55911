"""
Configuration models for the forward generator and the reverse parser.

Both are plain pydantic models so callers can build them from keyword
arguments, a dict loaded from YAML, or leave every default in place.
"""

from pydantic import BaseModel, Field, field_validator

from ipforge.model.bus import DEFAULT_PHYSICAL_PREFIX


class GeneratorConfig(BaseModel):
    """Settings that shape the render context."""

    data_width: int = Field(default=32, ge=8, description="Bus data width in bits")
    addr_width: int = Field(default=8, ge=1, description="Bus address width in bits")
    reg_width: int = Field(default=4, ge=1, description="Register width in bytes")
    default_bus_prefix: str = Field(
        default=DEFAULT_PHYSICAL_PREFIX,
        description="Physical prefix for non-array interfaces that omit one",
    )
    strict_protocols: bool = Field(
        default=False,
        description="Raise UnknownProtocolError instead of falling back to AXI4-Lite",
    )
    validate_layout: bool = Field(
        default=False,
        description="Run the register layout check after compiling and log its findings",
    )


class ReverseParserConfig(BaseModel):
    """Defaults written into documents reconstructed from VHDL."""

    vendor: str = Field(default="user", description="VLNV vendor")
    library: str = Field(default="ip", description="VLNV library")
    version: str = Field(default="1.0", description="VLNV version")
    api_version: str = Field(default="ipcore/v1.0", description="Schema version")
    detect_bus: bool = Field(default=True, description="Run bus interface detection")

    @field_validator("vendor", "library", "version")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("VLNV parts cannot be empty")
        return v
