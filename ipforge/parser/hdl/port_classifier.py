"""
Port classification for parsed VHDL entities.

Tags every port with one role, checked in priority order: member of a
detected bus interface, clock, reset, or plain user port. Bus interfaces
are detected from port names sharing a prefix in front of well-known
AXI4-Lite or Avalon-MM signal names.
"""

import logging
import re
from typing import Dict, List, NamedTuple, Sequence

from ipforge.model.base import Polarity
from ipforge.model.bus import BusInterfaceMode
from ipforge.model.entity import (
    ClassifiedPort,
    DetectedBusInterface,
    ParsedEntity,
    ParsedPort,
    PortClassification,
    PortRole,
)
from ipforge.model.port import PortDirection

logger = logging.getLogger(__name__)

CLOCK_RE = re.compile(r"(^|_)(clk|clock|aclk)$")
RESET_RE = re.compile(r"(^|_)(rst|reset|aresetn|reset_n|rst_n)$")

USER_PREFIXES = ("IO_", "I_", "O_")


class BusVocabulary(NamedTuple):
    """Signal suffixes identifying one bus protocol."""

    bus_type: str
    suffixes: Sequence[str]
    threshold: int


AXI4L_VOCABULARY = BusVocabulary(
    bus_type="AXI4L",
    suffixes=(
        "awaddr", "awvalid", "awready",
        "wdata", "wstrb", "wvalid", "wready",
        "bresp", "bvalid", "bready",
        "araddr", "arvalid", "arready",
        "rdata", "rresp", "rvalid", "rready",
    ),
    threshold=4,
)

AVALON_MM_VOCABULARY = BusVocabulary(
    bus_type="AVALON_MM",
    suffixes=("address", "read", "write", "writedata", "readdata"),
    threshold=3,
)

# Order breaks ties: earlier vocabularies win
VOCABULARIES = (AXI4L_VOCABULARY, AVALON_MM_VOCABULARY)


class PrefixMatch(NamedTuple):
    prefix: str
    count: int
    bus_type: str


def find_best_prefix(port_names: Sequence[str], vocabulary: BusVocabulary) -> PrefixMatch:
    """
    Tally the prefixes left after stripping each vocabulary suffix.

    Every (port, suffix) pair where the lower-cased port name ends with
    the suffix counts once for the remaining prefix. The first prefix to
    reach the highest tally wins.
    """
    counts: Dict[str, int] = {}
    for name in port_names:
        lowered = name.lower()
        for suffix in vocabulary.suffixes:
            if lowered.endswith(suffix):
                prefix = lowered[: len(lowered) - len(suffix)]
                counts[prefix] = counts.get(prefix, 0) + 1

    best_prefix, best_count = "", 0
    for prefix, count in counts.items():
        if count > best_count:
            best_prefix, best_count = prefix, count
    return PrefixMatch(best_prefix, best_count, vocabulary.bus_type)


def user_logical_name(port_name: str) -> str:
    """Upper-cased port name without one leading IO_/I_/O_."""
    logical = port_name.upper()
    for prefix in USER_PREFIXES:
        if logical.startswith(prefix):
            return logical[len(prefix) :]
    return logical


def reset_polarity(port_name: str) -> Polarity:
    name = port_name.lower()
    if name.endswith("n") or "reset_n" in name or "rst_n" in name:
        return Polarity.ACTIVE_LOW
    return Polarity.ACTIVE_HIGH


class PortClassifier:
    """
    Classifies the ports of a parsed entity.

    Args:
        detect_bus: Detect bus interfaces; when off, no port is tagged BUS.
    """

    def __init__(self, detect_bus: bool = True):
        self.detect_bus = detect_bus

    def detect_bus_interfaces(self, ports: Sequence[ParsedPort]) -> List[DetectedBusInterface]:
        """
        Detect at most one slave bus interface from shared port-name prefixes.

        A vocabulary is a candidate when its best prefix reaches the
        vocabulary's threshold. The candidate with the larger tally wins,
        AXI4-Lite on a tie. An empty winning prefix detects nothing.
        """
        names = [p.name for p in ports]
        candidates = []
        for vocab in VOCABULARIES:
            match = find_best_prefix(names, vocab)
            if match.count >= vocab.threshold:
                candidates.append(match)
        if not candidates:
            return []

        selected = candidates[0]
        for match in candidates[1:]:
            if match.count > selected.count:
                selected = match

        if not selected.prefix:
            logger.debug("Bus signals found without a common prefix; no interface detected")
            return []

        members = [p.name for p in ports if p.name.lower().startswith(selected.prefix)]
        bus = DetectedBusInterface(
            name=selected.prefix.rstrip("_") or "bus",
            type=selected.bus_type,
            mode=BusInterfaceMode.SLAVE,
            physical_prefix=selected.prefix,
            members=members,
        )
        logger.info(
            "Detected %s interface '%s' (%d ports)", bus.type, bus.name, len(bus.members)
        )
        return [bus]

    def classify(self, entity: ParsedEntity) -> PortClassification:
        """
        Tag every port of ``entity`` with exactly one role.

        Returns:
            Classified ports in declaration order plus the detected bus
            interfaces
        """
        bus_interfaces = self.detect_bus_interfaces(entity.ports) if self.detect_bus else []
        bus_members: Dict[str, str] = {}
        for bus in bus_interfaces:
            for member in bus.members:
                bus_members.setdefault(member, bus.name)

        classified = []
        for port in entity.ports:
            classified.append(self._classify_port(port, bus_members))

        return PortClassification(ports=classified, bus_interfaces=bus_interfaces)

    @staticmethod
    def _classify_port(port: ParsedPort, bus_members: Dict[str, str]) -> ClassifiedPort:
        if port.name in bus_members:
            return ClassifiedPort(
                port=port, role=PortRole.BUS, bus_interface=bus_members[port.name]
            )

        name = port.name.lower()
        if port.direction == PortDirection.IN:
            if CLOCK_RE.search(name):
                return ClassifiedPort(port=port, role=PortRole.CLOCK, logical_name=port.name.upper())
            if RESET_RE.search(name):
                return ClassifiedPort(
                    port=port,
                    role=PortRole.RESET,
                    logical_name=port.name.upper(),
                    polarity=reset_polarity(port.name),
                )

        return ClassifiedPort(
            port=port, role=PortRole.USER, logical_name=user_logical_name(port.name)
        )
