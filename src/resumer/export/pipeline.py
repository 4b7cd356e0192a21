"""Turn a document snapshot into a print model and hand it to a consumer.

The pipeline never touches the live document: it clones the input, renders
each section in ``section_order`` through the template registry and converts
the style into points with :mod:`resumer.export.units`. What happens to the
resulting :class:`PrintDocument` is up to the consumer, by default
:class:`~resumer.export.pdf_writer.ReportLabPdfWriter`.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Union

from ..editor.document_model import Document
from ..editor.style import Style
from ..errors import ExportError, ResumerError
from ..events import EventBus, ExportCompleted, ExportFailed
from ..templates.registry import TemplateRegistry
from ..templates.renderers import RenderedSection
from . import units

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PrintStyle:
    """Style values resolved to absolute PDF units."""

    page_margin: float
    section_spacing: float
    font_size: float
    line_height: float
    font_name: str
    bold_font_name: str
    italic_font_name: str
    primary_color: str
    accent_color: str

    @classmethod
    def from_style(cls, style: Style) -> "PrintStyle":
        font_name = units.pdf_font(style.font_family)
        return cls(
            page_margin=units.page_margin_points(style.page_margins),
            section_spacing=units.section_spacing_points(style.section_spacing),
            font_size=units.font_size_points(style.font_size),
            line_height=float(style.line_height),
            font_name=font_name,
            bold_font_name=units.BOLD_FONTS.get(font_name, font_name),
            italic_font_name=units.ITALIC_FONTS.get(font_name, font_name),
            primary_color=style.primary_color,
            accent_color=style.accent_color,
        )

    @property
    def leading(self) -> float:
        """Baseline-to-baseline distance for body text."""

        return self.font_size * self.line_height

    def to_payload(self) -> dict[str, Any]:
        return {
            "pageMargin": round(self.page_margin, 4),
            "sectionSpacing": round(self.section_spacing, 4),
            "fontSize": self.font_size,
            "lineHeight": self.line_height,
            "fontName": self.font_name,
            "boldFontName": self.bold_font_name,
            "primaryColor": self.primary_color,
            "accentColor": self.accent_color,
        }


@dataclass(slots=True)
class PrintDocument:
    """Read-only input of an export consumer."""

    title: str
    template: str
    style: PrintStyle
    sections: List[RenderedSection] = field(default_factory=list)
    header_align: str = "left"

    def section(self, section_type: str) -> RenderedSection | None:
        for rendered in self.sections:
            if rendered.section_type == section_type:
                return rendered
        return None


ExportConsumer = Callable[[PrintDocument], Union[bytes, Awaitable[bytes]]]


class ExportPipeline:
    """Render documents and pass them to an export consumer."""

    def __init__(
        self,
        registry: TemplateRegistry,
        consumer: ExportConsumer | None = None,
        *,
        event_bus: EventBus | None = None,
    ) -> None:
        if consumer is None:
            from .pdf_writer import ReportLabPdfWriter

            consumer = ReportLabPdfWriter()
        self._registry = registry
        self._consumer = consumer
        self._event_bus = event_bus

    @property
    def consumer(self) -> ExportConsumer:
        return self._consumer

    def build(self, document: Document) -> PrintDocument:
        """Render a snapshot of ``document`` without calling the consumer."""

        snapshot = document.clone()
        template = self._registry.get(snapshot.template)
        rendered = [
            self._registry.render(snapshot.template, section, snapshot.settings_for(section.type))
            for section in snapshot.ordered_sections()
        ]
        return PrintDocument(
            title=snapshot.title,
            template=snapshot.template,
            style=PrintStyle.from_style(snapshot.style),
            sections=rendered,
            header_align=template.header_align if template is not None else "left",
        )

    async def export(self, document: Document) -> bytes:
        """Render ``document`` and return what the consumer produced.

        Raises:
            ExportError: rendering or the consumer failed. ``ExportFailed`` is
                published once for the attempt.
        """

        try:
            print_document = self.build(document)
            result = self._consumer(print_document)
            if inspect.isawaitable(result):
                result = await result
        except ExportError as exc:
            self._failed(exc)
            raise
        except (ResumerError, ValueError, TypeError, KeyError, OSError, RuntimeError) as exc:
            error = ExportError(message=f"Failed to generate PDF: {exc}", details={"template": document.template})
            self._failed(error)
            raise error from exc

        data = bytes(result or b"")
        LOGGER.info("Exported %s (%d sections, %d bytes)", document.title, len(print_document.sections), len(data))
        if self._event_bus is not None:
            self._event_bus.publish(ExportCompleted(len(data)))
        return data

    def _failed(self, error: ExportError) -> None:
        LOGGER.warning("Export failed: %s", error)
        if self._event_bus is not None:
            self._event_bus.publish(ExportFailed(error.message))


__all__ = ["ExportConsumer", "ExportPipeline", "PrintDocument", "PrintStyle"]
