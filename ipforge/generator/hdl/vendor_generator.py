"""Vendor integration file generation mixin for ``IpCoreProjectGenerator``."""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ._protocols import GeneratorHost

from ipforge.model.core import IpCore

VENDORS = ("none", "intel", "xilinx", "both")


def _display_name(ip_core: IpCore) -> str:
    return ip_core.vlnv.name.replace("_", " ").title()


class VendorGenerationMixin:
    """Mixin for Intel/Xilinx integration file generation."""

    def _vendor_context(
        self: GeneratorHost,
        ip_core: IpCore,
        bus_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if context is None:
            context = self.build_context(ip_core, bus_type)
        return {
            **context,
            "author": ip_core.vlnv.vendor,
            "display_name": _display_name(ip_core),
        }

    def generate_intel_hw_tcl(self, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate Intel Platform Designer ``_hw.tcl`` component file."""
        return self.render("intel_hw_tcl.j2", self._vendor_context(ip_core, bus_type))

    def generate_xilinx_component_xml(self, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate Xilinx Vivado IP-XACT ``component.xml``."""
        return self.render("xilinx_component_xml.j2", self._vendor_context(ip_core, bus_type))

    def generate_xilinx_xgui(self, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate Xilinx Vivado XGUI TCL file."""
        return self.render("xilinx_xgui.j2", self._vendor_context(ip_core, bus_type))

    def generate_vendor_files(
        self,
        ip_core: IpCore,
        vendor: str = "both",
        bus_type: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, str]:
        """Generate vendor-specific integration files under ``intel/`` and ``xilinx/``.

        Args:
            context: Render context already built for ``ip_core``; built
                here when omitted.

        Raises:
            ValueError: For a vendor other than none/intel/xilinx/both.
        """
        if vendor not in VENDORS:
            raise ValueError(f"Unsupported vendor: {vendor}. Supported: {list(VENDORS)}")

        name = ip_core.vlnv.name.lower()
        files: Dict[str, str] = {}
        if vendor == "none":
            return files

        vendor_context = self._vendor_context(ip_core, bus_type, context)

        if vendor in ("intel", "both"):
            files[f"intel/{name}_hw.tcl"] = self.render("intel_hw_tcl.j2", vendor_context)

        if vendor in ("xilinx", "both"):
            files["xilinx/component.xml"] = self.render("xilinx_component_xml.j2", vendor_context)
            version_str = ip_core.vlnv.version.replace(".", "_")
            files[f"xilinx/xgui/{name}_v{version_str}.tcl"] = self.render(
                "xilinx_xgui.j2", vendor_context
            )

        return files
