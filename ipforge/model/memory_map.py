"""
Memory map definitions for IP cores.

Classes here use the *Def suffix (RegisterDef, BitFieldDef) to mark them
as declarations. The flat, address-resolved view produced from them
lives in ``ipforge.model.compiled``.

Documents spell the same attribute several ways (``offset``,
``addressOffset``, ``address_offset``; ``reset``, ``resetValue``). All of
them are accepted here and nowhere else.
"""

import logging
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, Field, field_validator, model_validator

from ipforge.utils import parse_bit_range, parse_number, parse_size

from .base import FlexibleModel, StrictModel

logger = logging.getLogger(__name__)

DEFAULT_REGISTER_BYTES = 4


class AccessType(str, Enum):
    """Canonical register/field access values."""

    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"
    WRITE_1_TO_CLEAR = "write-1-to-clear"
    READ_WRITE_1_TO_CLEAR = "read-write-1-to-clear"


# Access strings as they appear after lower-casing, not only canonical ones
SOFTWARE_ACCESS = frozenset({"read-write", "write-only", "rw", "wo"})
HARDWARE_ACCESS = frozenset({"read-only", "ro"})


def _lower_access(v: Any) -> Any:
    if isinstance(v, Enum):
        v = v.value
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class BitFieldDef(FlexibleModel):
    """
    Bit field definition within a register.

    Position comes from ``bit_offset``/``bit_width`` when given, else from
    ``bits`` notation (``[7:4]`` or ``[3]``). Missing or malformed
    notation resolves to offset 0, width 1.
    """

    name: str = Field(..., description="Bit field name")
    bit_offset: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("bit_offset", "bitOffset", "offset"),
        description="Starting bit position (LSB = 0)",
    )
    bit_width: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("bit_width", "bitWidth", "width"),
        description="Number of bits",
    )
    bits: Optional[str] = Field(default=None, description="Bit range string e.g. [7:0]")
    access: Optional[str] = Field(
        default=None, description="Access type; inherits the register's when unset"
    )
    reset_value: int = Field(
        default=0,
        validation_alias=AliasChoices("reset_value", "resetValue", "reset"),
        description="Reset/default value",
    )
    description: str = Field(default="", description="Field description")

    @model_validator(mode="before")
    @classmethod
    def resolve_position(cls, data: Any) -> Any:
        """Fill ``bit_offset``/``bit_width`` from whichever spelling is present."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        offset = _first_present(data, "bit_offset", "bitOffset", "offset")
        width = _first_present(data, "bit_width", "bitWidth", "width")

        parsed_offset, parsed_width = 0, 1
        bits = data.get("bits")
        if bits is not None and (offset is None or width is None):
            try:
                parsed_offset, parsed_width = parse_bit_range(str(bits))
            except ValueError:
                logger.debug(
                    "Field %r: unreadable bit range %r, using [0]", data.get("name"), bits
                )

        data["bit_offset"] = parse_number(offset, 0) if offset is not None else parsed_offset
        data["bit_width"] = parse_number(width, 1) if width is not None else parsed_width
        return data

    @field_validator("access", mode="before")
    @classmethod
    def normalize_access(cls, v: Any) -> Any:
        return _lower_access(v)

    @field_validator("reset_value", mode="before")
    @classmethod
    def lenient_reset(cls, v: Any) -> int:
        return parse_number(v, 0)

    @field_validator("bits", mode="before")
    @classmethod
    def stringify_bits(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @property
    def msb(self) -> int:
        return self.bit_offset + self.bit_width - 1

    @property
    def bit_range(self) -> str:
        """Get bit range as string (e.g. [7:0])."""
        if self.msb == self.bit_offset:
            return f"[{self.bit_offset}]"
        return f"[{self.msb}:{self.bit_offset}]"


class RegisterDef(FlexibleModel):
    """
    Register declaration within an address block.

    A declaration with child ``registers`` is a group: its children are
    replicated ``count`` times, ``stride`` bytes apart.
    """

    name: str = Field(..., description="Register name")
    address_offset: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("address_offset", "addressOffset", "offset"),
        description="Offset from the enclosing block or group",
    )
    size: int = Field(default=32, description="Register width in bits")
    access: str = Field(default=AccessType.READ_WRITE.value, description="Access type")
    reset_value: int = Field(
        default=0,
        validation_alias=AliasChoices("reset_value", "resetValue", "reset"),
        description="Reset value for entire register",
    )
    description: str = Field(default="", description="Register description")
    fields: List[BitFieldDef] = Field(default_factory=list, description="Bit fields")

    registers: List["RegisterDef"] = Field(
        default_factory=list, description="Child registers (for groups)"
    )
    count: int = Field(default=1, description="Replication count, at least 1")
    stride: Optional[int] = Field(default=None, ge=0, description="Replication stride in bytes")

    @field_validator("access", mode="before")
    @classmethod
    def normalize_access(cls, v: Any) -> Any:
        if v is None:
            return AccessType.READ_WRITE.value
        return _lower_access(v)

    @field_validator("address_offset", "reset_value", mode="before")
    @classmethod
    def lenient_number(cls, v: Any) -> int:
        return parse_number(v, 0)

    @field_validator("size", mode="before")
    @classmethod
    def lenient_size(cls, v: Any) -> int:
        return parse_number(v, 32)

    @field_validator("count", mode="before")
    @classmethod
    def lenient_count(cls, v: Any) -> int:
        # Zero or negative counts mean a single instance
        return max(1, parse_number(v, 1))

    @field_validator("stride", mode="before")
    @classmethod
    def lenient_stride(cls, v: Any) -> Optional[int]:
        return None if v is None else parse_number(v, 0)

    @property
    def is_group(self) -> bool:
        return bool(self.registers)

    @property
    def is_array(self) -> bool:
        """Register arrays and groups occupy ``count * stride`` bytes."""
        return self.is_group or self.count > 1 or self.stride is not None

    @property
    def footprint(self) -> int:
        """Bytes occupied when laid out next to sibling registers."""
        if self.is_array:
            stride = self.stride if self.stride is not None else DEFAULT_REGISTER_BYTES
            return self.count * stride
        return DEFAULT_REGISTER_BYTES

    @property
    def hex_address(self) -> str:
        return hex(self.address_offset)


class AddressBlock(FlexibleModel):
    """
    Contiguous address block within a memory map.
    """

    name: str = Field(..., description="Block name")
    base_address: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("base_address", "baseAddress", "offset"),
        description="Block starting address",
    )
    range: Optional[Union[int, str]] = Field(
        default=None,
        validation_alias=AliasChoices("range", "size"),
        description="Block size (bytes or '4K', '1M', etc.)",
    )
    usage: str = Field(default="register", description="Block usage type")
    description: str = Field(default="", description="Block description")
    default_reg_width: int = Field(default=32, description="Default register width")

    registers: List[RegisterDef] = Field(default_factory=list, description="Registers in block")

    @field_validator("base_address", mode="before")
    @classmethod
    def lenient_base(cls, v: Any) -> int:
        return parse_number(v, 0)

    @field_validator("default_reg_width", mode="before")
    @classmethod
    def lenient_reg_width(cls, v: Any) -> int:
        return parse_number(v, 32)

    @property
    def range_bytes(self) -> Optional[int]:
        """Declared range in bytes, or ``None`` when the block has no range."""
        return parse_size(self.range)

    @property
    def footprint(self) -> int:
        """
        Bytes occupied when laid out next to sibling blocks.

        One word per owned register, however many instances a register
        array holds; else the declared range; else one register.
        """
        if self.registers:
            return len(self.registers) * DEFAULT_REGISTER_BYTES
        return parse_size(self.range, DEFAULT_REGISTER_BYTES)

    @property
    def end_address(self) -> int:
        return self.base_address + self.footprint


RegisterDef.model_rebuild()


class MemoryMap(FlexibleModel):
    """Memory map of an IP core: a named, ordered list of address blocks."""

    name: str = Field(..., description="Memory map name")
    description: str = Field(default="", description="Memory map description")
    address_blocks: List[AddressBlock] = Field(default_factory=list, description="Address blocks")

    def get_register_by_name(self, name: str) -> Optional[RegisterDef]:
        """Find a top-level register by name across all blocks."""
        for block in self.address_blocks:
            for reg in block.registers:
                if reg.name == name:
                    return reg
        return None


class MemoryMapImport(StrictModel):
    """``memoryMaps: {import: <path>}`` reference to an external document."""

    import_path: str = Field(..., alias="import", description="Path relative to the IP core file")
