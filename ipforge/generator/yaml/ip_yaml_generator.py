"""
IP YAML Generator module.

Generates IP core YAML documents (.ip.yml) from VHDL source with bus
interface detection and clock/reset classification.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ipforge.config import ReverseParserConfig
from ipforge.model.entity import (
    ClassifiedPort,
    DetectedBusInterface,
    ParsedEntity,
    ParsedGeneric,
    PortClassification,
)
from ipforge.parser.hdl.port_classifier import PortClassifier
from ipforge.parser.hdl.vhdl_parser import EntityParser

logger = logging.getLogger(__name__)


def parse_generic_value(text: Optional[str]) -> Any:
    """Numeric generic defaults become numbers; anything else stays text."""
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


class IpYamlGenerator:
    """
    Generates IP YAML documents from VHDL source.

    Args:
        config: VLNV defaults and bus detection switch.
    """

    def __init__(self, config: Optional[ReverseParserConfig] = None):
        self.config = config or ReverseParserConfig()
        self.parser = EntityParser()
        self.classifier = PortClassifier(detect_bus=self.config.detect_bus)

    def generate(
        self,
        vhdl_text: str,
        source_name: str = "input.vhd",
        memmap_path: Optional[Union[str, Path]] = None,
    ) -> str:
        """
        Generate IP YAML content from VHDL text.

        Args:
            vhdl_text: VHDL source
            source_name: File name recorded in the description and file set
            memmap_path: Optional memory map file to reference via import

        Returns:
            YAML string content

        Raises:
            EntityNotFoundError: If the text declares no entity.
        """
        entity = self.parser.parse(vhdl_text)
        classification = self.classifier.classify(entity)
        data = self.build_document(entity, classification, source_name, memmap_path)
        return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def generate_file(
        self,
        vhdl_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        memmap_path: Optional[Union[str, Path]] = None,
    ) -> Path:
        """
        Generate ``<entity>.ip.yml`` next to a VHDL file.

        Args:
            vhdl_path: Path to VHDL source file
            output_path: Output path; defaults to ``<entity name>.ip.yml``
                beside the source
            memmap_path: Optional memory map file to reference

        Returns:
            Path of the written document
        """
        vhdl_path = Path(vhdl_path)
        entity = self.parser.parse_file(vhdl_path)
        classification = self.classifier.classify(entity)
        data = self.build_document(entity, classification, vhdl_path.name, memmap_path)

        if output_path is None:
            output_path = vhdl_path.parent / f"{entity.name}.ip.yml"
        output_path = Path(output_path)
        output_path.write_text(
            yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
        logger.info("Generated %s from %s", output_path, vhdl_path)
        return output_path

    def build_document(
        self,
        entity: ParsedEntity,
        classification: PortClassification,
        source_name: str,
        memmap_path: Optional[Union[str, Path]] = None,
    ) -> Dict[str, Any]:
        """Build the IP core document as a plain dict, keys in output order."""
        data: Dict[str, Any] = {
            "apiVersion": self.config.api_version,
            "vlnv": {
                "vendor": self.config.vendor,
                "library": self.config.library,
                "name": entity.name,
                "version": self.config.version,
            },
            "description": f"Generated from {source_name}",
        }

        if classification.clocks:
            data["clocks"] = [
                {"name": c.port.name, "description": ""} for c in classification.clocks
            ]

        if classification.resets:
            data["resets"] = [
                {"name": r.port.name, "polarity": r.polarity.value, "description": ""}
                for r in classification.resets
            ]

        if classification.user_ports:
            data["ports"] = [self._port_to_dict(p) for p in classification.user_ports]

        if classification.bus_interfaces:
            data["busInterfaces"] = [
                self._bus_interface_to_dict(b) for b in classification.bus_interfaces
            ]

        if entity.generics:
            data["parameters"] = [self._parameter_to_dict(g) for g in entity.generics]

        if memmap_path:
            data["memoryMaps"] = {"import": Path(memmap_path).name}

        data["fileSets"] = [
            {
                "name": "RTL_Sources",
                "description": "RTL source files",
                "files": [{"path": source_name, "type": "vhdl"}],
            }
        ]

        return data

    @staticmethod
    def _port_to_dict(classified: ClassifiedPort) -> Dict[str, Any]:
        """Convert a user port to dictionary; width only when it says something."""
        port = classified.port
        d: Dict[str, Any] = {
            "name": port.name,
            "logicalName": classified.logical_name,
            "direction": port.direction.value,
        }
        if port.is_symbolic or (port.width is not None and port.width > 1):
            d["width"] = port.width
        return d

    @staticmethod
    def _parameter_to_dict(generic: ParsedGeneric) -> Dict[str, Any]:
        d: Dict[str, Any] = {"name": generic.name}
        value = parse_generic_value(generic.default)
        if value is not None:
            d["value"] = value
        d["dataType"] = generic.type.lower()
        return d

    @staticmethod
    def _bus_interface_to_dict(bus: DetectedBusInterface) -> Dict[str, Any]:
        return {
            "name": bus.name,
            "type": bus.type,
            "mode": bus.mode.value,
            "physicalPrefix": bus.physical_prefix,
            "description": "",
        }
