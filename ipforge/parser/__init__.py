"""
Parsers for IP core definition formats and VHDL entity headers.
"""

from .hdl.port_classifier import PortClassifier
from .hdl.vhdl_parser import EntityParser
from .yaml import ParseError, YamlIpCoreParser

__all__ = ["YamlIpCoreParser", "ParseError", "EntityParser", "PortClassifier"]
