"""
Layout checks for compiled register maps.

Flattening deliberately accepts whatever the document says. This module
is the separate pass that reports what flattening lets through:
colliding offsets, register groups whose stride is shorter than one
instance, and bit fields that overlap or spill out of their register.
Findings are returned, never raised.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .compiled import FlattenedRegister
from .memory_map import MemoryMap, RegisterDef


@dataclass
class LayoutIssue:
    """Layout problem with context."""

    severity: str  # 'error' or 'warning'
    message: str
    location: str  # e.g. 'register:CTRL', 'group:CH'
    suggestion: str = ""


def _instance_span(group: RegisterDef) -> int:
    """Bytes spanned by one repetition of a register group."""
    span = 0
    for child in group.registers:
        if child.is_group:
            child_span = (
                child.address_offset
                + (child.count - 1) * (child.stride or 0)
                + _instance_span(child)
            )
        else:
            child_span = child.address_offset + max(1, child.size // 8)
        span = max(span, child_span)
    return span


class LayoutValidator:
    """Collects layout issues for one compiled register map."""

    def __init__(self, register_width: int = 32):
        self.register_width = register_width
        self.issues: List[LayoutIssue] = []

    @property
    def errors(self) -> List[LayoutIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[LayoutIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    def validate(
        self,
        registers: Sequence[FlattenedRegister],
        memory_maps: Iterable[MemoryMap] = (),
    ) -> List[LayoutIssue]:
        """Run every check and return the accumulated issues."""
        self.issues = []
        for mm in memory_maps:
            for block in mm.address_blocks:
                for reg in block.registers:
                    self._check_group_stride(reg, f"{block.name}.")
        self._check_register_overlaps(registers)
        for reg in registers:
            self._check_fields(reg)
        return list(self.issues)

    def _check_group_stride(self, reg: RegisterDef, path: str) -> None:
        if not reg.is_group:
            return
        if reg.count > 1:
            span = _instance_span(reg)
            stride = reg.stride or 0
            if stride < span:
                self.issues.append(
                    LayoutIssue(
                        severity="warning",
                        message=(
                            f"Register group '{path}{reg.name}' repeats {reg.count} times with "
                            f"stride {stride} but one instance spans {span} bytes"
                        ),
                        location=f"group:{path}{reg.name}",
                        suggestion=f"Set stride to at least {span}",
                    )
                )
        for child in reg.registers:
            self._check_group_stride(child, f"{path}{reg.name}.")

    def _check_register_overlaps(self, registers: Sequence[FlattenedRegister]) -> None:
        by_offset: Dict[int, List[str]] = {}
        for reg in registers:
            by_offset.setdefault(reg.offset, []).append(reg.name)
        for offset, names in by_offset.items():
            if len(names) > 1:
                self.issues.append(
                    LayoutIssue(
                        severity="error",
                        message=f"Registers {', '.join(names)} share offset 0x{offset:X}",
                        location=f"offset:0x{offset:X}",
                        suggestion="Give each register its own offset",
                    )
                )

        ordered = sorted(registers, key=lambda r: r.offset)
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.offset == cur.offset:
                continue
            prev_end = prev.offset + max(1, prev.size // 8)
            if cur.offset < prev_end:
                self.issues.append(
                    LayoutIssue(
                        severity="error",
                        message=(
                            f"Register '{cur.name}' at 0x{cur.offset:X} overlaps "
                            f"'{prev.name}' ending at 0x{prev_end:X}"
                        ),
                        location=f"register:{cur.name}",
                    )
                )

    def _check_fields(self, reg: FlattenedRegister) -> None:
        width = reg.size or self.register_width
        for fld in reg.fields:
            if fld.msb >= width:
                self.issues.append(
                    LayoutIssue(
                        severity="error",
                        message=(
                            f"Field '{fld.name}' bits [{fld.msb}:{fld.offset}] exceed "
                            f"{width}-bit register '{reg.name}'"
                        ),
                        location=f"field:{reg.name}.{fld.name}",
                    )
                )

        ordered = sorted(reg.fields, key=lambda f: f.offset)
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.offset <= prev.msb:
                self.issues.append(
                    LayoutIssue(
                        severity="error",
                        message=f"Fields '{prev.name}' and '{cur.name}' overlap in register '{reg.name}'",
                        location=f"field:{reg.name}.{cur.name}",
                    )
                )
