"""
Base generator for template-driven output.

Template text is supplied by the caller: a generator is pointed at a
directory of Jinja2 templates and only owns the context it renders them
with. Concrete generators implement ``generate_all``.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ipforge.model.core import IpCore

logger = logging.getLogger(__name__)


class BaseGenerator(ABC):
    """
    Abstract base class for template-driven generators.

    Args:
        template_dir: Directory holding the Jinja2 templates.
        strict_undefined: Fail on context keys a template references but
            the generator never provides.
    """

    def __init__(self, template_dir: Union[str, Path], strict_undefined: bool = False):
        self.template_dir = Path(template_dir)
        env_options: Dict[str, Any] = {"trim_blocks": True, "lstrip_blocks": True}
        if strict_undefined:
            env_options["undefined"] = StrictUndefined
        self.env = Environment(loader=FileSystemLoader(str(self.template_dir)), **env_options)

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render one template with ``context``.

        Raises:
            jinja2.TemplateNotFound: If the template directory lacks it.
        """
        template = self.env.get_template(template_name)
        return template.render(**context)

    @abstractmethod
    def generate_all(self, ip_core: IpCore, **options: Any) -> Dict[str, str]:
        """
        Generate every output file for the IP core.

        Returns:
            Dictionary mapping relative path to content
        """

    def write_files(
        self, ip_core: IpCore, output_dir: Union[str, Path], **options: Any
    ) -> Dict[str, Path]:
        """
        Generate and write all files to output directory.

        Args:
            ip_core: IP core definition
            output_dir: Output directory path
            **options: Forwarded to ``generate_all``

        Returns:
            Dictionary mapping relative path to written file path
        """
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        written = {}
        for filename, content in self.generate_all(ip_core, **options).items():
            file_path = output_path / filename
            # Structured paths like 'rtl/file.vhd' need their subdirectory
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
            written[filename] = file_path

        logger.info("Wrote %d files to %s", len(written), output_path)
        return written
