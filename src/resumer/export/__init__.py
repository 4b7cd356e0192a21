"""Export pipeline turning a document into print units and PDF bytes."""

from .pipeline import ExportPipeline, PrintDocument, PrintStyle

__all__ = ["ExportPipeline", "PrintDocument", "PrintStyle"]
