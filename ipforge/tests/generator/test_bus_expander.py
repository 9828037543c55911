"""Tests for bus interface expansion."""

import pytest

from ipforge.errors import UnknownProtocolError
from ipforge.generator.bus_expander import BusInterfaceExpander, vhdl_port_type
from ipforge.model import BusInterface, BusLibrary, PortDirection


def _ports_by_logical(instance):
    return {p.logical_name: p for p in instance.ports}


class TestExpansion:
    def test_single_interface_defaults(self, bus_library):
        expanded = BusInterfaceExpander().expand(
            [BusInterface(name="S_AXI", type="axi4-lite")], bus_library
        )
        assert len(expanded) == 1
        inst = expanded[0]
        assert inst.name == "S_AXI"
        assert inst.physical_prefix == "s_axi_"
        assert inst.bus_key == "AXI4L"
        assert inst.template_type == "axil"
        assert inst.array_index is None

    def test_array_expands_to_count_instances(self, bus_library):
        decl = BusInterface(
            name="M_AXIS",
            type="AXIS",
            mode="master",
            physical_prefix="m_axis_",
            array={"count": 3, "indexStart": 0},
        )
        expanded = BusInterfaceExpander().expand([decl], bus_library)
        assert [i.name for i in expanded] == ["M_AXIS_0", "M_AXIS_1", "M_AXIS_2"]
        assert [i.physical_prefix for i in expanded] == ["m_axis_0_", "m_axis_1_", "m_axis_2_"]
        assert [i.array_index for i in expanded] == [0, 1, 2]
        assert expanded[1].ports[0].name.startswith("m_axis_1_")

    def test_array_patterns_and_index_start(self, bus_library):
        decl = BusInterface(
            name="CH",
            type="AXIS",
            mode="master",
            array={
                "count": 2,
                "indexStart": 4,
                "namingPattern": "M_AXIS_CH{index}",
                "physicalPrefixPattern": "m_ch{index}_axis_",
            },
        )
        expanded = BusInterfaceExpander().expand([decl], bus_library)
        assert [i.name for i in expanded] == ["M_AXIS_CH4", "M_AXIS_CH5"]
        assert [i.physical_prefix for i in expanded] == ["m_ch4_axis_", "m_ch5_axis_"]

    def test_declaration_order_preserved(self, bus_library):
        decls = [
            BusInterface(name="B", type="AVMM", physical_prefix="avs_"),
            BusInterface(name="A", type="AXI4L", physical_prefix="s_axi_"),
        ]
        expanded = BusInterfaceExpander().expand(decls, bus_library)
        assert [i.name for i in expanded] == ["B", "A"]


class TestPortResolution:
    def test_bus_clock_and_reset_skipped(self, bus_library):
        inst = BusInterfaceExpander().expand(
            [BusInterface(name="S", type="AXI4L")], bus_library
        )[0]
        names = {p.logical_name for p in inst.ports}
        assert "ACLK" not in names
        assert "ARESETn" not in names

    def test_optional_ports_only_when_selected(self, bus_library):
        plain = BusInterface(name="S", type="AXI4L")
        with_prot = BusInterface(name="S", type="AXI4L", use_optional_ports=["AWPROT"])
        expander = BusInterfaceExpander()
        assert "AWPROT" not in _ports_by_logical(expander.expand([plain], bus_library)[0])
        ports = _ports_by_logical(expander.expand([with_prot], bus_library)[0])
        assert "AWPROT" in ports
        assert "ARPROT" not in ports

    def test_slave_flips_directions(self, bus_library):
        inst = BusInterfaceExpander().expand(
            [BusInterface(name="S", type="AXI4L", mode="slave")], bus_library
        )[0]
        ports = _ports_by_logical(inst)
        assert ports["AWADDR"].direction == PortDirection.IN
        assert ports["AWREADY"].direction == PortDirection.OUT

    def test_master_keeps_directions(self, bus_library):
        inst = BusInterfaceExpander().expand(
            [BusInterface(name="M", type="AXI4L", mode="master", physical_prefix="m_axi_")],
            bus_library,
        )[0]
        ports = _ports_by_logical(inst)
        assert ports["AWADDR"].direction == PortDirection.OUT
        assert ports["AWREADY"].direction == PortDirection.IN

    def test_sink_flips_like_slave(self, bus_library):
        inst = BusInterfaceExpander().expand(
            [BusInterface(name="S_AXIS", type="AXIS", mode="sink", physical_prefix="s_axis_")],
            bus_library,
        )[0]
        assert _ports_by_logical(inst)["TDATA"].direction == PortDirection.IN

    @pytest.mark.parametrize("mode", ["master", "slave", "source", "sink"])
    def test_inout_unchanged_in_every_mode(self, mode):
        library = BusLibrary.from_dict(
            {"GPIO": {"ports": [{"name": "PAD", "direction": "inout", "width": 4}]}}
        )
        decl = BusInterface(name="G", type="AXI4L", mode=mode)
        port = BusInterfaceExpander().resolve_ports(decl, "GPIO", "g_", library)[0]
        assert port.direction == PortDirection.INOUT

    def test_width_override(self, bus_library):
        decl = BusInterface(
            name="M", type="AXIS", mode="master", physical_prefix="m_axis_",
            port_width_overrides={"TDATA": 64},
        )
        port = _ports_by_logical(BusInterfaceExpander().expand([decl], bus_library)[0])["TDATA"]
        assert port.width == 64
        assert port.type == "std_logic_vector(63 downto 0)"

    def test_physical_name_is_prefix_plus_lowercase_logical(self, bus_library):
        inst = BusInterfaceExpander().expand(
            [BusInterface(name="S", type="AXI4L", physical_prefix="ctrl_")], bus_library
        )[0]
        assert _ports_by_logical(inst)["WDATA"].name == "ctrl_wdata"


class TestProtocolNormalization:
    def test_unknown_type_falls_back_with_warning(self, bus_library, caplog):
        with caplog.at_level("WARNING"):
            inst = BusInterfaceExpander().expand(
                [BusInterface(name="W", type="wishbone")], bus_library
            )[0]
        assert inst.bus_key == "AXI4L"
        assert inst.type == "wishbone"
        assert "unknown protocol type 'wishbone'" in caplog.text

    def test_strict_mode_raises(self, bus_library):
        with pytest.raises(UnknownProtocolError) as exc_info:
            BusInterfaceExpander(strict=True).expand(
                [BusInterface(name="W", type="wishbone")], bus_library
            )
        assert exc_info.value.interface_name == "W"
        assert exc_info.value.protocol == "wishbone"

    def test_custom_default_prefix(self, bus_library):
        inst = BusInterfaceExpander(default_prefix="regs_").expand(
            [BusInterface(name="S", type="AXI4L")], bus_library
        )[0]
        assert inst.physical_prefix == "regs_"


class TestPartition:
    def test_primary_and_secondary(self, bus_library):
        decls = [
            BusInterface(name="S", type="AXI4L"),
            BusInterface(name="M", type="AXIS", mode="master", physical_prefix="m_axis_",
                         array={"count": 2}),
        ]
        expander = BusInterfaceExpander()
        expanded = expander.expand(decls, bus_library)
        primary, secondary = expander.partition_ports(expanded)
        assert all(p.name.startswith("s_axi_") for p in primary)
        assert {p.name.split("_")[2] for p in secondary} == {"0", "1"}
        assert len(secondary) == len(expanded[1].ports) + len(expanded[2].ports)

    def test_empty(self):
        assert BusInterfaceExpander.partition_ports([]) == ([], [])


@pytest.mark.parametrize(
    "width, logical, expected",
    [
        (32, "AWADDR", "std_logic_vector(C_ADDR_WIDTH-1 downto 0)"),
        (32, "readdata", "std_logic_vector(C_DATA_WIDTH-1 downto 0)"),
        (4, "WSTRB", "std_logic_vector((C_DATA_WIDTH/8)-1 downto 0)"),
        (1, "AWVALID", "std_logic"),
        (2, "BRESP", "std_logic_vector(1 downto 0)"),
    ],
)
def test_vhdl_port_type(width, logical, expected):
    assert vhdl_port_type(width, logical) == expected
