"""Default export consumer drawing a :class:`PrintDocument` with reportlab."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .pipeline import PrintDocument, PrintStyle

LOGGER = logging.getLogger(__name__)

BULLET_CHAR = "•"
BULLET_INDENT = 10.0
TITLE_SCALE = 2.0
HEADING_SCALE = 1.15
META_SCALE = 0.9
TEXT_COLOR = colors.HexColor("#1f2937")
MUTED_COLOR = colors.HexColor("#4b5563")


def _text_width(text: str, font: str, size: float) -> float:
    return pdfmetrics.stringWidth(text, font, size)


def wrap_text(text: str, font: str, size: float, max_width: float) -> List[str]:
    """Greedy word wrap; a word wider than the line gets a line of its own."""

    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and _text_width(candidate, font, size) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class _PageCursor:
    """Tracks the vertical position and breaks pages when content runs out."""

    def __init__(self, pdf: canvas.Canvas, style: PrintStyle, pagesize: Tuple[float, float]) -> None:
        self.pdf = pdf
        self.style = style
        self.width, self.height = pagesize
        self.left = style.page_margin
        self.right = self.width - style.page_margin
        self.y = self.height - style.page_margin
        self.pages = 1

    @property
    def max_width(self) -> float:
        return self.right - self.left

    def ensure(self, needed: float) -> None:
        if self.y - needed < self.style.page_margin:
            self.pdf.showPage()
            self.pages += 1
            self.y = self.height - self.style.page_margin

    def advance(self, amount: float) -> None:
        self.y -= amount


class ReportLabPdfWriter:
    """Write A4 PDF bytes for a rendered resume."""

    def __init__(self, *, pagesize: Tuple[float, float] = A4) -> None:
        self._pagesize = pagesize

    def __call__(self, document: PrintDocument) -> bytes:
        return self.write(document)

    def write(self, document: PrintDocument) -> bytes:
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self._pagesize)
        pdf.setTitle(document.title)
        cursor = _PageCursor(pdf, document.style, self._pagesize)

        for index, section in enumerate(document.sections):
            if index:
                cursor.advance(document.style.section_spacing)
            if section.heading:
                self._draw_heading(cursor, section.heading)
            for line in section.lines:
                if line.role == "title":
                    self._draw_title(cursor, line.text, document.header_align)
                elif line.role == "bullet":
                    self._draw_bullet(cursor, line.text)
                else:
                    self._draw_paragraph(cursor, line.text, line.role, document.header_align if section.section_type == "header" else "left")

        pdf.save()
        data = buffer.getvalue()
        LOGGER.debug("Wrote PDF with %d page(s), %d bytes", cursor.pages, len(data))
        return data

    def _draw_title(self, cursor: _PageCursor, text: str, align: str) -> None:
        style = cursor.style
        size = style.font_size * TITLE_SCALE
        cursor.ensure(size * 1.2)
        cursor.advance(size)
        cursor.pdf.setFont(style.bold_font_name, size)
        cursor.pdf.setFillColor(colors.HexColor(style.primary_color))
        self._draw_aligned(cursor, text, style.bold_font_name, size, align)
        cursor.advance(size * 0.3)

    def _draw_heading(self, cursor: _PageCursor, text: str) -> None:
        style = cursor.style
        size = style.font_size * HEADING_SCALE
        cursor.ensure(size * 2 + style.leading)
        cursor.advance(size)
        pdf = cursor.pdf
        pdf.setFont(style.bold_font_name, size)
        pdf.setFillColor(colors.HexColor(style.primary_color))
        pdf.drawString(cursor.left, cursor.y, text.upper())
        cursor.advance(size * 0.35)
        pdf.setStrokeColor(colors.HexColor(style.accent_color))
        pdf.setLineWidth(0.6)
        pdf.line(cursor.left, cursor.y, cursor.right, cursor.y)
        cursor.advance(size * 0.4)

    def _draw_paragraph(self, cursor: _PageCursor, text: str, role: str, align: str) -> None:
        style = cursor.style
        font = style.font_name
        size = style.font_size
        color = TEXT_COLOR
        if role == "subheading":
            font = style.bold_font_name
        elif role == "meta":
            font = style.italic_font_name
            size = style.font_size * META_SCALE
            color = MUTED_COLOR
        leading = size * style.line_height
        for line in wrap_text(text, font, size, cursor.max_width):
            cursor.ensure(leading)
            cursor.advance(leading)
            cursor.pdf.setFont(font, size)
            cursor.pdf.setFillColor(color)
            self._draw_aligned(cursor, line, font, size, align)

    def _draw_bullet(self, cursor: _PageCursor, text: str) -> None:
        style = cursor.style
        font, size, leading = style.font_name, style.font_size, style.leading
        pdf = cursor.pdf
        lines = wrap_text(text, font, size, cursor.max_width - BULLET_INDENT)
        for index, line in enumerate(lines):
            cursor.ensure(leading)
            cursor.advance(leading)
            pdf.setFont(font, size)
            pdf.setFillColor(TEXT_COLOR)
            if index == 0:
                pdf.drawString(cursor.left, cursor.y, BULLET_CHAR)
            pdf.drawString(cursor.left + BULLET_INDENT, cursor.y, line)

    @staticmethod
    def _draw_aligned(cursor: _PageCursor, text: str, font: str, size: float, align: str) -> None:
        if align == "center":
            cursor.pdf.drawCentredString((cursor.left + cursor.right) / 2, cursor.y, text)
        elif align == "right":
            cursor.pdf.drawRightString(cursor.right, cursor.y, text)
        else:
            cursor.pdf.drawString(cursor.left, cursor.y, text)


__all__ = ["ReportLabPdfWriter", "wrap_text"]
