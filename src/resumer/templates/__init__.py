"""Template registry, section renderers, and default section data."""

from .registry import RendererCapability, Template, TemplateRegistry
from .builtin import builtin_registry

__all__ = ["RendererCapability", "Template", "TemplateRegistry", "builtin_registry"]
