import os
import sys

import pytest

# Add the project root to sys.path so that ipforge is importable
# This is needed because of the flat layout structure
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from ipforge.model import BusLibraryCache  # noqa: E402

# Every template the project generator can ask for. Each one dumps a few
# context keys so tests can check what reached the renderer.
TEMPLATE_NAMES = (
    "package.vhdl.j2",
    "top.vhdl.j2",
    "core.vhdl.j2",
    "bus_axil.vhdl.j2",
    "bus_avmm.vhdl.j2",
    "register_file.vhdl.j2",
    "cocotb_test.py.j2",
    "cocotb_makefile.j2",
    "intel_hw_tcl.j2",
    "xilinx_component_xml.j2",
    "xilinx_xgui.j2",
)

TEMPLATE_BODY = """\
-- {{ template }}
entity={{ entity_name }}
bus_type={{ bus_type }}
bus_prefix={{ bus_prefix }}
{% for reg in registers %}
reg {{ reg.name }} @ {{ reg.offset }} {{ reg.access }}
{% endfor %}
{% for port in bus_ports %}
port {{ port.name }} {{ port.direction }} {{ port.type }}
{% endfor %}
"""


@pytest.fixture
def bus_cache():
    """A private cache so tests never share loaded libraries."""
    return BusLibraryCache()


@pytest.fixture
def bus_library(bus_cache):
    """The packaged default bus library."""
    return bus_cache.load_default()


@pytest.fixture
def template_dir(tmp_path):
    """Directory holding a minimal template for every generator output."""
    directory = tmp_path / "templates"
    directory.mkdir()
    for name in TEMPLATE_NAMES:
        body = TEMPLATE_BODY.replace("{{ template }}", name)
        (directory / name).write_text(body, encoding="utf-8")
    return directory
