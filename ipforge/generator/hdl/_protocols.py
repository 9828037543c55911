"""Typing protocols for generator mixins."""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Protocol

from jinja2 import Environment

from ipforge.model.core import IpCore


class GeneratorHost(Protocol):
    """Protocol for the host class that generator mixins expect."""

    env: Environment

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render one template."""
        ...

    def build_context(self, ip_core: IpCore, bus_type: Optional[str] = None) -> Dict[str, Any]:
        """Build common template context."""
        ...
