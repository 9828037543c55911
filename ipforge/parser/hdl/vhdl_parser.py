"""
VHDL entity parser.

Extracts the entity name plus its generic and port clauses from VHDL
source. Only the entity header is read; architectures and packages are
ignored. Type expressions are handed to a small pyparsing grammar that
infers port widths.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from pyparsing import (
    CaselessKeyword,
    ParseBaseException,
    ParserElement,
    Suppress,
    Word,
    alphanums,
    alphas,
    nums,
)

from ipforge.errors import EntityNotFoundError
from ipforge.model.entity import ParsedEntity, ParsedGeneric, ParsedPort
from ipforge.model.port import PortDirection

logger = logging.getLogger(__name__)

ENTITY_RE = re.compile(r"\bentity\s+(\w+)\s+is\b", re.IGNORECASE)
PORT_MODE_RE = re.compile(r"^(in|out|inout)\s+(.+)$", re.IGNORECASE)
COMMENT_RE = re.compile(r"--.*$", re.MULTILINE)

WidthResult = Optional[Union[int, str]]


def _build_width_grammar() -> ParserElement:
    """Grammar over a port's type expression; each branch yields the width."""
    identifier = Word(alphas + "_", alphanums + "_")
    type_name = Word(alphas + "_", alphanums + "_.")
    integer = Word(nums).set_parse_action(lambda t: int(t[0]))

    scalar = (
        CaselessKeyword("std_logic") | CaselessKeyword("std_ulogic") | CaselessKeyword("bit")
    ).set_parse_action(lambda: 1)

    direction = CaselessKeyword("downto") | CaselessKeyword("to")
    numeric_range = (integer("left") + Suppress(direction) + integer("right")).set_parse_action(
        lambda t: abs(t.left - t.right) + 1
    )
    generic_range = (
        identifier("generic")
        + Suppress("-")
        + Suppress("1")
        + Suppress(CaselessKeyword("downto"))
        + Suppress("0")
    ).set_parse_action(lambda t: t.generic)

    vector = Suppress(type_name) + Suppress("(") + (numeric_range | generic_range) + Suppress(")")
    return vector | scalar


class EntityParser:
    """Parser for the entity header of VHDL source text."""

    def __init__(self):
        self.width_grammar = _build_width_grammar()

    def parse_file(self, file_path: Union[str, Path]) -> ParsedEntity:
        """
        Parse a VHDL file.

        Args:
            file_path: Path to the VHDL file

        Returns:
            Parsed entity

        Raises:
            EntityNotFoundError: If the file declares no entity.
        """
        content = Path(file_path).read_text(encoding="utf-8")
        try:
            return self.parse(content)
        except EntityNotFoundError:
            raise EntityNotFoundError(f"No VHDL entity found in {file_path}") from None

    def parse(self, vhdl_text: str) -> ParsedEntity:
        """
        Parse VHDL text.

        Args:
            vhdl_text: VHDL source

        Returns:
            Entity name, generics and ports in declaration order

        Raises:
            EntityNotFoundError: If no ``entity <name> is`` clause exists.
        """
        cleaned = COMMENT_RE.sub("", vhdl_text)

        match = ENTITY_RE.search(cleaned)
        if match is None:
            raise EntityNotFoundError("No VHDL entity found")

        header = cleaned[match.start() :]
        generics = self._parse_generics(self._extract_clause(header, "generic"))
        ports = self._parse_ports(self._extract_clause(header, "port"))
        logger.debug(
            "Parsed entity %s: %d generics, %d ports", match.group(1), len(generics), len(ports)
        )
        return ParsedEntity(name=match.group(1), generics=generics, ports=ports)

    def resolve_width(self, type_expr: str) -> WidthResult:
        """
        Infer a port width from its type expression.

        Returns:
            1 for scalar types, the range length for numeric ranges, the
            generic name for ``<GENERIC> - 1 downto 0``, else ``None``.
        """
        try:
            result = self.width_grammar.parse_string(type_expr, parse_all=True)
        except ParseBaseException:
            return None
        return result[0]

    @staticmethod
    def _extract_clause(text: str, keyword: str) -> str:
        """Body of the parenthesis group following ``keyword``, or ''."""
        match = re.search(rf"\b{keyword}\b", text, re.IGNORECASE)
        if match is None:
            return ""
        start = text.find("(", match.end())
        if start == -1:
            return ""

        depth = 0
        for i in range(start, len(text)):
            if text[i] == "(":
                depth += 1
            elif text[i] == ")":
                depth -= 1
                if depth == 0:
                    return text[start + 1 : i]
        return ""

    @staticmethod
    def _split_entries(body: str) -> List[str]:
        """Split a clause body on semicolons outside parentheses."""
        entries = []
        depth = 0
        current: List[str] = []
        for char in body:
            if char == "(":
                depth += 1
            elif char == ")":
                depth = max(0, depth - 1)

            if char == ";" and depth == 0:
                entries.append("".join(current))
                current = []
            else:
                current.append(char)
        entries.append("".join(current))

        return [" ".join(e.split()) for e in entries if e.strip()]

    @staticmethod
    def _split_names(entry: str) -> Optional[tuple]:
        if ":" not in entry:
            return None
        names_part, rest = entry.split(":", 1)
        names = [n.strip() for n in names_part.split(",") if n.strip()]
        return names, rest.strip()

    def _parse_generics(self, body: str) -> List[ParsedGeneric]:
        generics = []
        for entry in self._split_entries(body):
            split = self._split_names(entry)
            if split is None:
                continue
            names, rest = split
            type_part, _, default = rest.partition(":=")
            default = default.strip() or None
            for name in names:
                generics.append(ParsedGeneric(name=name, type=type_part.strip(), default=default))
        return generics

    def _parse_ports(self, body: str) -> List[ParsedPort]:
        ports = []
        for entry in self._split_entries(body):
            split = self._split_names(entry)
            if split is None:
                continue
            names, rest = split
            mode = PORT_MODE_RE.match(rest)
            if mode is None:
                logger.debug("Skipping port entry without in/out/inout mode: %s", entry)
                continue
            direction = PortDirection.from_string(mode.group(1))
            # A port default value is not part of its type
            type_expr = mode.group(2).split(":=", 1)[0].strip()
            width = self.resolve_width(type_expr)
            for name in names:
                ports.append(
                    ParsedPort(name=name, direction=direction, type=type_expr, width=width)
                )
        return ports
