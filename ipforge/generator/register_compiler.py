"""
Memory map compilation.

Flattens the block/register/group hierarchy of one or more memory maps
into leaf registers at absolute byte offsets, ready for templates.
"""

import logging
from typing import Iterable, List, Sequence, Tuple, Union

from ipforge.model.compiled import FlattenedField, FlattenedRegister
from ipforge.model.memory_map import (
    HARDWARE_ACCESS,
    SOFTWARE_ACCESS,
    MemoryMap,
    RegisterDef,
)
from ipforge.model.validators import LayoutIssue, LayoutValidator

logger = logging.getLogger(__name__)


class RegisterModelCompiler:
    """Compiles memory map declarations into a flat register list."""

    def flatten(
        self, memory_maps: Union[MemoryMap, Iterable[MemoryMap]]
    ) -> List[FlattenedRegister]:
        """
        Flatten memory maps into leaf registers sorted by offset.

        Group children are replicated ``count`` times, ``stride`` bytes
        apart. Names of replicated children carry every enclosing group
        name, plus the instance index when the group repeats.

        Args:
            memory_maps: A single map or an iterable of maps.

        Returns:
            Leaf registers, ascending by absolute offset. Nothing is
            validated here; see ``validate_layout``.
        """
        if isinstance(memory_maps, MemoryMap):
            memory_maps = [memory_maps]

        registers: List[FlattenedRegister] = []
        for mm in memory_maps:
            for block in mm.address_blocks:
                for reg in block.registers:
                    self._process_register(reg, block.base_address, "", registers)

        registers.sort(key=lambda r: r.offset)
        logger.debug("Flattened %d registers", len(registers))
        return registers

    def _process_register(
        self,
        reg: RegisterDef,
        base_offset: int,
        prefix: str,
        out: List[FlattenedRegister],
    ) -> None:
        current_offset = base_offset + reg.address_offset

        if reg.is_group:
            stride = reg.stride or 0
            for i in range(reg.count):
                instance_offset = current_offset + i * stride
                instance_prefix = (
                    f"{prefix}{reg.name}_{i}_" if reg.count > 1 else f"{prefix}{reg.name}_"
                )
                for child in reg.registers:
                    self._process_register(child, instance_offset, instance_prefix, out)
            return

        fields = [
            FlattenedField(
                name=fld.name,
                offset=fld.bit_offset,
                width=fld.bit_width,
                access=fld.access or reg.access,
                reset_value=fld.reset_value,
                description=fld.description,
            )
            for fld in reg.fields
        ]
        out.append(
            FlattenedRegister(
                name=prefix + reg.name,
                offset=current_offset,
                access=reg.access,
                description=reg.description,
                size=reg.size,
                reset_value=reg.reset_value,
                fields=fields,
            )
        )

    @staticmethod
    def split_by_access(
        registers: Sequence[FlattenedRegister],
    ) -> Tuple[List[FlattenedRegister], List[FlattenedRegister]]:
        """Split into software-writable and hardware-driven registers.

        Registers with any other access (e.g. write-1-to-clear) land in
        neither list.
        """
        sw = [r for r in registers if r.access in SOFTWARE_ACCESS]
        hw = [r for r in registers if r.access in HARDWARE_ACCESS]
        return sw, hw

    @staticmethod
    def validate_layout(
        registers: Sequence[FlattenedRegister],
        register_width: int = 32,
        memory_maps: Iterable[MemoryMap] = (),
    ) -> List[LayoutIssue]:
        """Report overlaps, short strides and out-of-range fields."""
        return LayoutValidator(register_width).validate(registers, memory_maps)
