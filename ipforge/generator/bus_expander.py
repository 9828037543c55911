"""
Bus interface expansion.

Turns bus interface declarations into concrete instances: array
declarations are replicated, the protocol type is normalized to a bus
library key, and each instance gets the library ports that are active
for it, with directions seen from the IP core's side.
"""

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from ipforge.errors import UnknownProtocolError
from ipforge.model.bus import DEFAULT_PHYSICAL_PREFIX, BusInterface
from ipforge.model.bus_library import BusLibrary, PortDefinition
from ipforge.model.compiled import ExpandedBusInterface, ResolvedBusPort
from ipforge.utils import DEFAULT_BUS_TYPE, BusTypeInfo, lookup_bus_type

logger = logging.getLogger(__name__)

# Bus-local clock/reset signals are driven from the core's global clock and reset
SKIPPED_BUS_SIGNALS = frozenset({"aclk", "aresetn", "clk", "reset"})

ADDRESS_PORTS = frozenset({"AWADDR", "ARADDR", "address"})
DATA_PORTS = frozenset({"WDATA", "RDATA", "writedata", "readdata"})
STROBE_PORTS = frozenset({"WSTRB"})


def vhdl_port_type(width: int, logical_name: str) -> str:
    """VHDL type for a bus port.

    Address and data ports are sized by the ``C_ADDR_WIDTH`` and
    ``C_DATA_WIDTH`` generics of the generated entity.
    """
    if logical_name in ADDRESS_PORTS:
        return "std_logic_vector(C_ADDR_WIDTH-1 downto 0)"
    if logical_name in DATA_PORTS:
        return "std_logic_vector(C_DATA_WIDTH-1 downto 0)"
    if logical_name in STROBE_PORTS:
        return "std_logic_vector((C_DATA_WIDTH/8)-1 downto 0)"
    if width == 1:
        return "std_logic"
    return f"std_logic_vector({width - 1} downto 0)"


class BusInterfaceExpander:
    """
    Expands bus interface declarations against a bus library.

    Args:
        strict: Raise ``UnknownProtocolError`` for protocol types missing
            from the alias table instead of falling back to AXI4-Lite.
        default_prefix: Physical prefix for non-array declarations that
            do not set one.
    """

    def __init__(self, strict: bool = False, default_prefix: str = DEFAULT_PHYSICAL_PREFIX):
        self.strict = strict
        self.default_prefix = default_prefix

    def expand(
        self, declarations: Sequence[BusInterface], library: BusLibrary
    ) -> List[ExpandedBusInterface]:
        """Expand every declaration, preserving declaration order.

        Raises:
            UnknownProtocolError: In strict mode, for an unrecognized type.
        """
        expanded = []
        for decl in declarations:
            bus_type = self.normalize_type(decl)
            if bus_type.library_key not in library:
                logger.warning(
                    "Bus library has no '%s' definition; interface '%s' gets no ports",
                    bus_type.library_key,
                    decl.name,
                )
            for name, prefix, index in self._instances(decl):
                expanded.append(
                    ExpandedBusInterface(
                        name=name,
                        type=decl.type,
                        bus_key=bus_type.library_key,
                        template_type=bus_type.template_type,
                        mode=decl.mode,
                        physical_prefix=prefix,
                        associated_clock=decl.associated_clock,
                        associated_reset=decl.associated_reset,
                        memory_map_ref=decl.memory_map_ref,
                        array_index=index,
                        ports=self.resolve_ports(decl, bus_type.library_key, prefix, library),
                    )
                )
        return expanded

    def normalize_type(self, decl: BusInterface) -> BusTypeInfo:
        """Map the declared protocol type to a library key and render tag."""
        info = lookup_bus_type(decl.type)
        if info is not None:
            return info
        if self.strict:
            raise UnknownProtocolError(decl.name, decl.type)
        logger.warning(
            "Bus interface '%s': unknown protocol type '%s', treating it as %s",
            decl.name,
            decl.type,
            DEFAULT_BUS_TYPE.library_key,
        )
        return DEFAULT_BUS_TYPE

    def _instances(self, decl: BusInterface) -> Iterator[Tuple[str, str, Optional[int]]]:
        """Yield ``(name, physical_prefix, array_index)`` per instance."""
        if decl.array is None:
            yield decl.name, decl.physical_prefix or self.default_prefix, None
            return

        base_prefix = decl.physical_prefix or self.default_prefix
        name_pattern = decl.array.naming_pattern or f"{decl.name}_{{index}}"
        prefix_pattern = decl.array.physical_prefix_pattern or f"{base_prefix}{{index}}_"
        for index in decl.array.indices:
            yield (
                name_pattern.replace("{index}", str(index)),
                prefix_pattern.replace("{index}", str(index)),
                index,
            )

    def resolve_ports(
        self, decl: BusInterface, bus_key: str, prefix: str, library: BusLibrary
    ) -> List[ResolvedBusPort]:
        """Active ports of one instance, in library order."""
        optional = set(decl.use_optional_ports)
        ports = []
        for port_def in library.get_ports(bus_key):
            if port_def.name.lower() in SKIPPED_BUS_SIGNALS:
                continue
            if not (port_def.is_required or port_def.name in optional):
                continue
            ports.append(self._resolve_port(decl, port_def, prefix))
        return ports

    @staticmethod
    def _resolve_port(decl: BusInterface, port_def: PortDefinition, prefix: str) -> ResolvedBusPort:
        direction = port_def.direction
        if decl.mode.is_receiving:
            direction = direction.flipped()
        width = decl.get_port_width(port_def.name, port_def.width)
        return ResolvedBusPort(
            logical_name=port_def.name,
            name=f"{prefix}{port_def.name.lower()}",
            direction=direction,
            width=width,
            type=vhdl_port_type(width, port_def.name),
        )

    @staticmethod
    def partition_ports(
        instances: Sequence[ExpandedBusInterface],
    ) -> Tuple[List[ResolvedBusPort], List[ResolvedBusPort]]:
        """Split ports into the primary set (first instance) and everything else."""
        if not instances:
            return [], []
        secondary = [port for inst in instances[1:] for port in inst.ports]
        return list(instances[0].ports), secondary
