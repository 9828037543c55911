"""Shared utility helpers for ipforge."""

import os
import re
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Tuple, Union


def _default_bus_definitions_path() -> Path:
    """Locate the bus library shipped with the package.

    ``IPFORGE_BUS_DEFINITIONS`` overrides the packaged file, which is
    useful when a site keeps its own protocol vocabulary.
    """
    override = os.environ.get("IPFORGE_BUS_DEFINITIONS")
    if override:
        return Path(override)
    return Path(str(resources.files("ipforge.resources") / "bus_definitions.yml"))


BUS_DEFINITIONS_PATH = _default_bus_definitions_path()


class BusTypeInfo(NamedTuple):
    """Canonical bus library key plus the tag templates switch on."""

    library_key: str
    template_type: str


# Separator-free upper-case spelling -> (library key, render tag)
_BUS_TYPE_ALIASES: Dict[str, BusTypeInfo] = {
    "AXI4L": BusTypeInfo("AXI4L", "axil"),
    "AXI4LITE": BusTypeInfo("AXI4L", "axil"),
    "AXILITE": BusTypeInfo("AXI4L", "axil"),
    "AXIL": BusTypeInfo("AXI4L", "axil"),
    "AVALONMM": BusTypeInfo("AVALON_MM", "avmm"),
    "AVMM": BusTypeInfo("AVALON_MM", "avmm"),
    "AXIS": BusTypeInfo("AXIS", "axis"),
    "AXI4STREAM": BusTypeInfo("AXIS", "axis"),
    "AXISTREAM": BusTypeInfo("AXIS", "axis"),
    "AVALONST": BusTypeInfo("AVALON_ST", "avst"),
    "AVST": BusTypeInfo("AVALON_ST", "avst"),
}

DEFAULT_BUS_TYPE = _BUS_TYPE_ALIASES["AXI4L"]

_SEPARATORS = re.compile(r"[\s_-]+")


def lookup_bus_type(raw: Any) -> Optional[BusTypeInfo]:
    """Return the alias table entry for ``raw`` or ``None`` when unknown."""
    key = _SEPARATORS.sub("", str(raw or "")).upper()
    return _BUS_TYPE_ALIASES.get(key)


def normalize_bus_type(raw: Any) -> BusTypeInfo:
    """Normalize a free-form bus type string.

    Unknown types resolve to AXI4-Lite.

    Examples:
        >>> normalize_bus_type("axi4-lite")
        BusTypeInfo(library_key='AXI4L', template_type='axil')
        >>> normalize_bus_type("Avalon_MM").template_type
        'avmm'
    """
    return lookup_bus_type(raw) or DEFAULT_BUS_TYPE


def parse_number(value: Any, default: int = 0) -> int:
    """Parse an integer from a native number or a numeric string.

    Accepts ``0x``/``0o``/``0b`` prefixes and underscores. Anything that
    cannot be read as a number yields ``default``.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if not isinstance(value, str):
        return default

    text = value.strip()
    if not text:
        return default
    try:
        return int(text, 0)
    except ValueError:
        pass
    # int(..., 0) rejects leading zeros such as "010"
    try:
        return int(text, 10)
    except ValueError:
        pass
    try:
        return int(float(text))
    except ValueError:
        return default


_SIZE_SUFFIXES = {"K": 1024, "M": 1024 * 1024, "G": 1024 * 1024 * 1024}


def parse_size(value: Union[int, str, None], default: Optional[int] = None) -> Optional[int]:
    """Parse a byte size such as ``4096``, ``"0x100"`` or ``"4K"``."""
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        multiplier = _SIZE_SUFFIXES.get(text[-1:].upper())
        if multiplier:
            return parse_number(text[:-1], 0) * multiplier
        return parse_number(text, default if default is not None else 0)
    return parse_number(value, default if default is not None else 0)


def parse_bit_range(bits_str: str) -> Tuple[int, int]:
    """Parse bit notation like ``[7:4]`` or ``[0]`` into ``(offset, width)``.

    The high and low bounds may be given in either order; the offset is
    always the lower bound.

    Args:
        bits_str: Bit notation string.

    Returns:
        Tuple of ``(bit_offset, bit_width)``.

    Raises:
        ValueError: If notation is empty or invalid.
    """
    if not bits_str:
        raise ValueError("Empty bit range notation")

    clean = bits_str.strip().strip("[]").strip()

    match_range = re.fullmatch(r"(\d+)\s*:\s*(\d+)", clean)
    if match_range:
        high = int(match_range.group(1))
        low = int(match_range.group(2))
        return min(high, low), abs(high - low) + 1

    match_single = re.fullmatch(r"(\d+)", clean)
    if match_single:
        bit = int(match_single.group(1))
        return bit, 1

    raise ValueError(f"Invalid bit range notation: '{bits_str}'")


def format_bit_range(offset: int, width: int) -> str:
    """Format ``(offset, width)`` back to ``[msb:lsb]`` or ``[bit]``."""
    msb = offset + width - 1
    if msb == offset:
        return f"[{offset}]"
    return f"[{msb}:{offset}]"


def enum_value(v: Any) -> str:
    """Extract the string value from an Enum member or return str(v)."""
    return v.value if isinstance(v, Enum) else str(v)


def filter_none(data: dict) -> dict:
    """Remove keys with None values from a dictionary.

    Passing None explicitly to pydantic fields with defaults fails
    validation; dropping the key lets the model apply its own default.
    """
    return {k: v for k, v in data.items() if v is not None}
