"""
IP core project generator.

Compiles an ``IpCore`` into the render context (expanded bus interfaces,
flattened registers, generics, user ports, clock/reset info) and renders
the caller's templates into a structured project:

- rtl/   VHDL sources (package, top-level, core, bus wrapper, register file)
- tb/    cocotb testbench and Makefile
- intel/ and xilinx/   vendor integration files
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ipforge.config import GeneratorConfig
from ipforge.generator.base_generator import BaseGenerator
from ipforge.generator.bus_expander import BusInterfaceExpander
from ipforge.generator.hdl.testbench_generator import TestbenchGenerationMixin
from ipforge.generator.hdl.vendor_generator import VendorGenerationMixin
from ipforge.generator.register_compiler import RegisterModelCompiler
from ipforge.model.bus import BusInterfaceMode
from ipforge.model.bus_library import BusLibraryCache
from ipforge.model.core import IpCore
from ipforge.utils import DEFAULT_BUS_TYPE, parse_number

logger = logging.getLogger(__name__)


class IpCoreProjectGenerator(BaseGenerator, VendorGenerationMixin, TestbenchGenerationMixin):
    """IP core project generator for memory-mapped register designs.

    Args:
        template_dir: Directory with the project templates.
        bus_cache: Bus library cache; a private one is created if omitted.
        config: Render settings; defaults apply if omitted.
        base_dir: Directory that relative ``useBusLibrary`` paths are
            resolved against, normally the IP core document's directory.
    """

    # Bus types with a wrapper template
    SUPPORTED_BUS_TYPES = ["axil", "avmm"]

    def __init__(
        self,
        template_dir: Union[str, Path],
        bus_cache: Optional[BusLibraryCache] = None,
        config: Optional[GeneratorConfig] = None,
        base_dir: Optional[Union[str, Path]] = None,
    ):
        super().__init__(template_dir)
        self.bus_cache = bus_cache or BusLibraryCache()
        self.config = config or GeneratorConfig()
        self.base_dir = Path(base_dir) if base_dir else None
        self.expander = BusInterfaceExpander(
            strict=self.config.strict_protocols,
            default_prefix=self.config.default_bus_prefix,
        )
        self.compiler = RegisterModelCompiler()

    def _prepare_generics(self, ip_core: IpCore) -> List[Dict[str, Any]]:
        """Prepare generics/parameters for templates."""
        return [
            {"name": param.name, "type": param.data_type, "default_value": param.value}
            for param in ip_core.parameters
        ]

    def _prepare_user_ports(self, ip_core: IpCore) -> List[Dict[str, Any]]:
        """Prepare user-defined (non-bus) ports."""
        param_defaults = {param.name: param.value for param in ip_core.parameters}

        ports = []
        for port in ip_core.ports:
            width = port.width
            if port.is_parameterized:
                # Width names a generic; vendor XML needs a numeric fallback
                port_type = f"std_logic_vector({width}-1 downto 0)"
                width_expr = width
                numeric_width = None
                default_width = parse_number(param_defaults.get(width), 32) - 1
            elif width == 1:
                port_type = "std_logic"
                width_expr = None
                numeric_width = 1
                default_width = None
            else:
                port_type = f"std_logic_vector({width - 1} downto 0)"
                width_expr = None
                numeric_width = width
                default_width = None

            ports.append(
                {
                    "name": port.name.lower(),
                    "logical_name": port.logical_name,
                    "direction": port.direction.value,
                    "type": port_type,
                    "width": numeric_width,
                    "width_expr": width_expr,
                    "is_parameterized": port.is_parameterized,
                    "default_width": default_width,
                }
            )
        return ports

    def build_context(self, ip_core: IpCore, bus_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Build the render context shared by every template.

        Args:
            ip_core: IP core definition with memory map imports resolved
            bus_type: Wrapper tag ('axil', 'avmm'); defaults to the tag of
                the first slave interface, else 'axil'

        Returns:
            Template context dictionary
        """
        if ip_core.has_unresolved_import:
            logger.warning(
                "IP core '%s' has an unresolved memory map import; rendering without registers",
                ip_core.vlnv.name,
            )

        registers = self.compiler.flatten(ip_core.memory_map_list)
        if self.config.validate_layout:
            for issue in self.compiler.validate_layout(
                registers, memory_maps=ip_core.memory_map_list
            ):
                logger.warning("%s: %s", issue.location, issue.message)
        sw_registers, hw_registers = self.compiler.split_by_access(registers)

        library = self.bus_cache.resolve(ip_core.use_bus_library, self.base_dir)
        expanded = self.expander.expand(ip_core.bus_interfaces, library)
        bus_ports, secondary_bus_ports = self.expander.partition_ports(expanded)

        # Wrapper tag follows the first slave, else the default
        slave = next((iface for iface in expanded if iface.mode == BusInterfaceMode.SLAVE), None)
        primary = slave if slave is not None else (expanded[0] if expanded else None)
        bus_prefix = self.config.default_bus_prefix.rstrip("_")
        if primary is not None:
            prefix = primary.physical_prefix
            bus_prefix = prefix[:-1] if prefix.endswith("_") else prefix
        if bus_type is None:
            bus_type = slave.template_type if slave is not None else DEFAULT_BUS_TYPE.template_type

        clock_port = ip_core.clocks[0].name if ip_core.clocks else "clk"
        reset_port = ip_core.resets[0].name if ip_core.resets else "rst"
        reset_active_high = ip_core.resets[0].is_active_high if ip_core.resets else True

        name = ip_core.vlnv.name.lower()
        return {
            "entity_name": name,
            "registers": [r.model_dump(mode="json") for r in registers],
            "sw_registers": [r.model_dump(mode="json") for r in sw_registers],
            "hw_registers": [r.model_dump(mode="json") for r in hw_registers],
            "generics": self._prepare_generics(ip_core),
            "user_ports": self._prepare_user_ports(ip_core),
            "bus_type": bus_type,
            "bus_ports": [p.model_dump(mode="json") for p in bus_ports],
            "secondary_bus_ports": [p.model_dump(mode="json") for p in secondary_bus_ports],
            "expanded_bus_interfaces": [iface.model_dump(mode="json") for iface in expanded],
            "bus_prefix": bus_prefix,
            "data_width": self.config.data_width,
            "addr_width": self.config.addr_width,
            "reg_width": self.config.reg_width,
            "memory_maps": [mm.model_dump(mode="json") for mm in ip_core.memory_map_list],
            "clock_port": clock_port,
            "reset_port": reset_port,
            "reset_active_high": reset_active_high,
            # tb/ sits two levels below the memory map file in structured output
            "memmap_relpath": f"../../{name}.mm.yml",
            "vendor": ip_core.vlnv.vendor,
            "library": ip_core.vlnv.library,
            "version": ip_core.vlnv.version,
            "description": ip_core.description,
        }

    def _check_bus_type(self, bus_type: str) -> None:
        if bus_type not in self.SUPPORTED_BUS_TYPES:
            raise ValueError(
                f"Unsupported bus type: {bus_type}. Supported: {self.SUPPORTED_BUS_TYPES}"
            )

    def generate_package(self, ip_core: IpCore) -> str:
        """Generate VHDL package with register types and conversion functions."""
        return self.render("package.vhdl.j2", self.build_context(ip_core))

    def generate_top(self, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate top-level entity that instantiates core and bus wrapper."""
        context = self.build_context(ip_core, bus_type)
        self._check_bus_type(context["bus_type"])
        return self.render("top.vhdl.j2", context)

    def generate_core(self, ip_core: IpCore) -> str:
        """Generate core logic module (bus-agnostic)."""
        return self.render("core.vhdl.j2", self.build_context(ip_core))

    def generate_bus_wrapper(self, ip_core: IpCore, bus_type: Optional[str] = None) -> str:
        """Generate bus interface wrapper for register access."""
        context = self.build_context(ip_core, bus_type)
        self._check_bus_type(context["bus_type"])
        return self.render(f"bus_{context['bus_type']}.vhdl.j2", context)

    def generate_register_file(self, ip_core: IpCore) -> str:
        """Generate standalone register file (bus-agnostic)."""
        return self.render("register_file.vhdl.j2", self.build_context(ip_core))

    def generate_all(
        self,
        ip_core: IpCore,
        bus_type: Optional[str] = None,
        include_regs: bool = False,
        vendor: str = "none",
        include_testbench: bool = False,
    ) -> Dict[str, str]:
        """
        Generate all files with the structured project layout.

        Args:
            ip_core: IP core definition
            bus_type: Wrapper tag ('axil' or 'avmm'); defaults to the first
                slave interface's tag, else 'axil'
            include_regs: Include standalone register bank
            vendor: Vendor files to include ('none', 'intel', 'xilinx', 'both')
            include_testbench: Include cocotb testbench files

        Returns:
            Dictionary mapping path (e.g. 'rtl/file.vhd', 'tb/Makefile') to content

        Raises:
            ValueError: For an unsupported bus type or vendor.
        """
        context = self.build_context(ip_core, bus_type)
        bus_type = context["bus_type"]
        self._check_bus_type(bus_type)

        name = ip_core.vlnv.name.lower()
        files = {
            f"rtl/{name}_pkg.vhd": self.render("package.vhdl.j2", context),
            f"rtl/{name}.vhd": self.render("top.vhdl.j2", context),
            f"rtl/{name}_core.vhd": self.render("core.vhdl.j2", context),
            f"rtl/{name}_{bus_type}.vhd": self.render(f"bus_{bus_type}.vhdl.j2", context),
        }

        if include_regs:
            files[f"rtl/{name}_regs.vhd"] = self.render("register_file.vhdl.j2", context)

        if include_testbench:
            files.update(self.generate_testbench(ip_core, bus_type, context=context))

        if vendor != "none":
            files.update(self.generate_vendor_files(ip_core, vendor, bus_type, context=context))

        logger.info("Generated %d files for %s", len(files), ip_core.vlnv.full_name)
        return files
