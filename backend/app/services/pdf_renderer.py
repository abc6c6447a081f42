"""BizDesk - PDF rendering of document HTML with ReportLab."""
import io
import logging
from html.parser import HTMLParser
from typing import Protocol
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A3, A4, A5, LEGAL, LETTER, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from app.schemas.documents import PdfOptions

logger = logging.getLogger(__name__)

PAGE_SIZES = {"A4": A4, "Letter": LETTER, "Legal": LEGAL, "A3": A3, "A5": A5}

_BLOCK_TAGS = {"p", "div", "tr", "li", "br", "h1", "h2", "h3", "h4", "header", "footer", "table", "section"}
_HEADING_STYLES = {"h1": "Heading1", "h2": "Heading2", "h3": "Heading3", "h4": "Heading4"}
_SKIPPED_TAGS = {"style", "script", "title", "head"}


class PdfRenderer(Protocol):
    def render(self, html: str, options: PdfOptions, title: str | None = None) -> bytes: ...


class _TextBlocks(HTMLParser):
    """Flatten HTML into (style, text) blocks; table cells on one row share a line."""

    def __init__(self):
        super().__init__()
        self.blocks: list[tuple[str, str]] = []
        self._parts: list[str] = []
        self._style = "Normal"
        self._skip = 0

    def _flush(self):
        text = " ".join(" ".join(self._parts).split())
        if text:
            self.blocks.append((self._style, text))
        self._parts = []
        self._style = "Normal"

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_TAGS:
            self._skip += 1
        elif tag in _BLOCK_TAGS:
            self._flush()
            self._style = _HEADING_STYLES.get(tag, "Normal")
        elif tag in ("td", "th") and self._parts:
            self._parts.append("|")

    def handle_endtag(self, tag):
        if tag in _SKIPPED_TAGS:
            self._skip = max(self._skip - 1, 0)
        elif tag in _BLOCK_TAGS:
            self._flush()

    def handle_data(self, data):
        if not self._skip:
            self._parts.append(data)

    def close(self):
        super().close()
        self._flush()


def html_blocks(html: str) -> list[tuple[str, str]]:
    parser = _TextBlocks()
    parser.feed(html)
    parser.close()
    return parser.blocks


class ReportLabPdfRenderer:
    """Lay the document's text out as flowing paragraphs on the requested paper."""

    def render(self, html: str, options: PdfOptions, title: str | None = None) -> bytes:
        pagesize = PAGE_SIZES[options.format]
        if options.orientation == "landscape":
            pagesize = landscape(pagesize)
        margins = options.margins

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=pagesize,
            topMargin=margins.top * mm,
            rightMargin=margins.right * mm,
            bottomMargin=margins.bottom * mm,
            leftMargin=margins.left * mm,
            title=title or "",
            author="BizDesk",
        )
        styles = getSampleStyleSheet()
        story = [Paragraph(escape(text), styles[style]) for style, text in html_blocks(html)]
        doc.build(story or [Spacer(1, 1)])
        return buffer.getvalue()


def get_pdf_renderer() -> PdfRenderer:
    return ReportLabPdfRenderer()
