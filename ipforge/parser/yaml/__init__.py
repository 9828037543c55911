"""
YAML parsers for IP core definitions.
"""

from ipforge.errors import ParseError

from .ip_yaml_parser import YamlIpCoreParser

__all__ = ["YamlIpCoreParser", "ParseError"]
