"""
Tests for the YAML IP Core parser.
"""

# editorconfig-checker-disable-file
# This file contains YAML fixtures that use 2-space indentation per YAML standard

import pytest

from ipforge.errors import NotFoundError
from ipforge.model import BusInterfaceMode, MemoryMapImport, PortDirection
from ipforge.parser import ParseError, YamlIpCoreParser

HEADER = """
apiVersion: my-ip-schema/v2.3
vlnv:
    vendor: "test.com"
    library: "test"
    name: "{name}"
    version: "1.0.0"
"""

MEMORY_MAP = """
- name: "CSR"
  description: "Control/Status Registers"
  addressBlocks:
    - name: "REGS"
      baseAddress: 0x0
      range: 4096
      defaultRegWidth: 32
      registers:
        - name: "CTRL"
          offset: 0x00
          access: "read-write"
          fields:
            - name: "ENABLE"
              bits: "[0:0]"
            - name: "MODE"
              bits: "[3:1]"
        - reserved: 4
        - name: "STATUS"
          offset: 0x08
          access: "READ-ONLY"
"""


def _write(tmp_path, body, name="core", filename="core.ip.yml"):
    path = tmp_path / filename
    path.write_text(HEADER.format(name=name) + body)
    return path


def test_parse_simple_ip_core(tmp_path):
    """Test parsing a minimal IP core definition."""
    path = _write(tmp_path, 'description: "A simple test core"\n', name="simple_core")

    ip_core = YamlIpCoreParser().parse_file(path)

    assert ip_core.api_version == "my-ip-schema/v2.3"
    assert ip_core.vlnv.full_name == "test.com:test:simple_core:1.0.0"
    assert ip_core.description == "A simple test core"
    assert ip_core.memory_map_list == []


def test_parse_with_clocks_and_resets(tmp_path):
    """Clock and reset logical names default when omitted."""
    body = """
clocks:
    - name: "i_clk"
      frequency: "100MHz"
    - name: "i_clk2x"
      logicalName: "CLK_2X"
resets:
    - name: "i_rst_n"
      polarity: "activeLow"
    - name: "i_rst"
      polarity: "active_high"
    - name: "i_rst_custom"
      logical_name: "SYNC_RST"
"""
    ip_core = YamlIpCoreParser().parse_file(_write(tmp_path, body))

    assert [c.logical_name for c in ip_core.clocks] == ["CLK", "CLK_2X"]
    assert ip_core.clocks[0].frequency == "100MHz"
    assert ip_core.clocks[0].direction == PortDirection.IN
    assert [r.logical_name for r in ip_core.resets] == ["RESET_N", "RESET", "SYNC_RST"]
    assert ip_core.resets[0].is_active_low
    assert ip_core.resets[1].is_active_high


def test_parse_with_ports(tmp_path):
    body = """
ports:
    - name: "o_irq"
      direction: "out"
    - name: "i_data"
      direction: "in"
      width: "DATA_WIDTH"
    - name: "io_pad"
      direction: "inout"
      width: 4
"""
    ports = YamlIpCoreParser().parse_file(_write(tmp_path, body)).ports

    assert [p.direction for p in ports] == [PortDirection.OUT, PortDirection.IN, PortDirection.INOUT]
    assert ports[1].is_parameterized
    assert ports[2].width == 4


def test_parse_bus_interface_array(tmp_path):
    body = """
busInterfaces:
    - name: "S_AXI"
      type: "AXI4L"
      mode: "slave"
      physicalPrefix: "s_axi_"
      useOptionalPorts: ["AWPROT"]
    - name: "M_AXIS"
      type: "axis"
      mode: "master"
      portWidthOverrides:
        TDATA: 64
      array:
        count: 4
        indexStart: 0
        namingPattern: "M_AXIS_CH{index}"
        physicalPrefixPattern: "m_axis_ch{index}_"
"""
    buses = YamlIpCoreParser().parse_file(_write(tmp_path, body)).bus_interfaces

    assert buses[0].mode == BusInterfaceMode.SLAVE
    assert buses[0].use_optional_ports == ["AWPROT"]
    assert buses[1].instance_count == 4
    assert buses[1].array.naming_pattern == "M_AXIS_CH{index}"
    assert buses[1].get_port_width("TDATA", 32) == 64


def test_parse_parameters(tmp_path):
    body = """
parameters:
    - name: "DATA_WIDTH"
      value: 32
      dataType: "integer"
      description: "Width of data bus"
    - name: "ENABLE_FEATURE"
      value: true
      dataType: "boolean"
"""
    params = YamlIpCoreParser().parse_file(_write(tmp_path, body)).parameters

    assert params[0].value == 32
    assert params[0].data_type == "integer"
    assert params[1].value is True


def test_parse_memory_map_inline(tmp_path):
    body = "memoryMaps:\n" + "\n".join("  " + line for line in MEMORY_MAP.splitlines())
    ip_core = YamlIpCoreParser().parse_file(_write(tmp_path, body))

    block = ip_core.memory_map_list[0].address_blocks[0]
    assert block.range == 4096
    # The reserved spacer entry is dropped
    assert [r.name for r in block.registers] == ["CTRL", "STATUS"]
    ctrl, status = block.registers
    assert [(f.bit_offset, f.bit_width) for f in ctrl.fields] == [(0, 1), (1, 3)]
    assert status.address_offset == 8
    assert status.access == "read-only"


def test_parse_memory_map_with_import(tmp_path):
    (tmp_path / "maps").mkdir()
    (tmp_path / "maps" / "core.mm.yml").write_text(MEMORY_MAP)
    path = _write(tmp_path, 'memoryMaps:\n    import: "maps/core.mm.yml"\n')

    ip_core = YamlIpCoreParser().parse_file(path)

    assert not ip_core.has_unresolved_import
    assert ip_core.memory_map_list[0].name == "CSR"


def test_parse_memory_map_import_single_mapping(tmp_path):
    (tmp_path / "single.mm.yml").write_text(
        "name: SINGLE\naddressBlocks:\n  - name: B\n    registers:\n      - name: R\n"
    )
    path = _write(tmp_path, "memoryMaps:\n    import: single.mm.yml\n")

    assert YamlIpCoreParser().parse_file(path).memory_map_list[0].name == "SINGLE"


def test_parse_memory_map_import_missing(tmp_path):
    path = _write(tmp_path, "memoryMaps:\n    import: missing.mm.yml\n")
    with pytest.raises(NotFoundError, match="missing.mm.yml"):
        YamlIpCoreParser().parse_file(path)


def test_parse_register_group(tmp_path):
    body = """
memoryMaps:
  - name: "CSR"
    addressBlocks:
      - name: "REGS"
        registers:
          - name: "CH"
            offset: 0x10
            count: 2
            stride: 0x10
            registers:
              - name: "CFG"
              - reserved: 4
              - name: "STAT"
                offset: 8
"""
    group = YamlIpCoreParser().parse_file(_write(tmp_path, body)).memory_map_list[0].address_blocks[0].registers[0]

    assert group.is_group
    assert (group.count, group.stride) == (2, 16)
    assert [r.name for r in group.registers] == ["CFG", "STAT"]


def test_parse_file_sets(tmp_path):
    (tmp_path / "sim.fs.yml").write_text(
        "name: SIM\nfiles:\n  - path: tb/tb.py\n    type: python\n"
    )
    body = """
fileSets:
    - name: "RTL"
      files:
        - path: "rtl/top.vhd"
          type: "VHDL"
    - import: "sim.fs.yml"
    - import: "nowhere.fs.yml"
"""
    file_sets = YamlIpCoreParser().parse_file(_write(tmp_path, body)).file_sets

    # The unresolvable import is logged and skipped
    assert [fs.name for fs in file_sets] == ["RTL", "SIM"]
    assert file_sets[0].files[0].is_hdl


def test_use_bus_library_kept_verbatim(tmp_path):
    ip_core = YamlIpCoreParser().parse_file(_write(tmp_path, "useBusLibrary: ../lib/buses.yml\n"))
    assert ip_core.use_bus_library == "../lib/buses.yml"


def test_parse_text_resolves_imports_against_base_dir(tmp_path):
    (tmp_path / "core.mm.yml").write_text(MEMORY_MAP)
    text = HEADER.format(name="text_core") + "memoryMaps:\n    import: core.mm.yml\n"

    ip_core = YamlIpCoreParser().parse_text(text, base_dir=tmp_path)

    assert ip_core.vlnv.name == "text_core"
    assert len(ip_core.memory_map_list) == 1


def test_error_missing_vlnv(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text('description: "no identity"\n')
    with pytest.raises(ParseError, match="Missing required field: vlnv"):
        YamlIpCoreParser().parse_file(path)


def test_error_root_not_mapping(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ParseError, match="Root element"):
        YamlIpCoreParser().parse_file(path)


def test_error_invalid_yaml_reports_line(tmp_path):
    path = tmp_path / "invalid.yml"
    path.write_text("vlnv:\n  vendor: test\n  name: [unclosed\n")
    with pytest.raises(ParseError) as exc_info:
        YamlIpCoreParser().parse_file(path)
    assert exc_info.value.line is not None
    assert "YAML syntax error" in str(exc_info.value)
    assert str(path) in str(exc_info.value)


def test_error_validation_lists_location(tmp_path):
    body = """
ports:
    - name: "p"
      direction: "in"
      width: 0
"""
    with pytest.raises(ParseError) as exc_info:
        YamlIpCoreParser().parse_file(_write(tmp_path, body))
    message = str(exc_info.value)
    assert "port[0]" in message
    assert "width" in message


def test_error_unknown_nested_key(tmp_path):
    body = """
busInterfaces:
    - name: "S_AXI"
      type: "AXI4L"
      physicalPrefx: "s_axi_"
"""
    with pytest.raises(ParseError, match=r"busInterface\[0\]"):
        YamlIpCoreParser().parse_file(_write(tmp_path, body))


def test_error_memory_maps_wrong_shape(tmp_path):
    with pytest.raises(ParseError, match="memoryMaps must be"):
        YamlIpCoreParser().parse_file(_write(tmp_path, "memoryMaps: 42\n"))


def test_error_file_not_found(tmp_path):
    with pytest.raises(NotFoundError):
        YamlIpCoreParser().parse_file(tmp_path / "absent.yml")


def test_unresolved_import_model_shape():
    assert MemoryMapImport.model_validate({"import": "x.yml"}).import_path == "x.yml"
