"""Testbench and simulation file generation mixin for ``IpCoreProjectGenerator``."""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ._protocols import GeneratorHost

from ipforge.model.core import IpCore


class TestbenchGenerationMixin:
    """Mixin for cocotb testbench and simulation Makefile generation."""

    # Not a test class, despite the name
    __test__ = False

    def generate_cocotb_test(self: GeneratorHost, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate cocotb Python test file."""
        return self.render("cocotb_test.py.j2", self.build_context(ip_core, bus_type))

    def generate_cocotb_makefile(
        self: GeneratorHost, ip_core: IpCore, bus_type: Optional[str] = None
    ) -> str:
        """Generate Makefile for cocotb simulation."""
        return self.render("cocotb_makefile.j2", self.build_context(ip_core, bus_type))

    def generate_testbench(
        self: GeneratorHost,
        ip_core: IpCore,
        bus_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        """Generate testbench files for cocotb simulation.

        Args:
            context: Render context already built for ``ip_core``; built
                here when omitted.

        Returns:
            Dictionary mapping path under ``tb/`` to content
        """
        if context is None:
            context = self.build_context(ip_core, bus_type)
        name = ip_core.vlnv.name.lower()
        return {
            f"tb/{name}_test.py": self.render("cocotb_test.py.j2", context),
            "tb/Makefile": self.render("cocotb_makefile.j2", context),
        }
