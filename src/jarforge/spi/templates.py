"""Descriptor template engine interface and the bundled implementation."""

from abc import ABC, abstractmethod
from importlib import resources
from string import Template
from typing import Mapping, Optional


class TemplateError(Exception):
    """Raised when a template cannot be rendered."""
    pass


class DescriptorTemplate:
    """A ``string.Template`` based template using ``${name}`` placeholders."""

    def __init__(self, name: str, text: str):
        self.name = name
        self._template = Template(text)

    def render(self, data: Mapping[str, str]) -> str:
        try:
            return self._template.substitute(data)
        except (KeyError, ValueError) as e:
            raise TemplateError(f"Failed to render {self.name}: {e}") from e


class ITemplateEngine(ABC):
    """Looks up descriptor templates by name."""

    @abstractmethod
    def get_template(self, name: str) -> Optional[DescriptorTemplate]:
        """Return the named template, or None when it does not exist."""
        pass


class PackageTemplateEngine(ITemplateEngine):
    """Loads templates shipped inside a Python package (jarforge.templates)."""

    def __init__(self, package: str = "jarforge.templates"):
        self.package = package

    def get_template(self, name: str) -> Optional[DescriptorTemplate]:
        resource = resources.files(self.package).joinpath(name)
        if not resource.is_file():
            return None
        return DescriptorTemplate(name, resource.read_text(encoding="utf-8"))
