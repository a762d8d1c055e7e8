"""PDF rendering of recipe cards and weekly menus with ReportLab."""

import io
import re
from dataclasses import dataclass
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus.flowables import Flowable

from recipe_costing.domain.documents import (
    MenuDocument,
    MenuDocumentSection,
    RecipeDocument,
    RenderedDocument,
)
from recipe_costing.services.reports import PdfRenderer, sanitize_filename

_MEDIA_TYPE = "application/pdf"
_HEADER_BG = colors.HexColor("#131820")
_GRID = colors.HexColor("#d5e2f3")
_STRIPES = [colors.HexColor("#f2f6fb"), colors.white]


@dataclass
class ReportLabPdfRenderer(PdfRenderer):
    """Renders structured documents to PDF bytes."""

    currency_symbol: str = "£"

    def render_recipe(self, document: RecipeDocument) -> RenderedDocument:
        """Render a recipe card."""
        styles = _styles()
        title = document.name
        if document.code:
            title = f"{document.name} ({document.code})"
        story: list[Flowable] = [
            Paragraph(escape(title), styles["H1"]),
            Paragraph(
                escape(
                    f"Serves {document.servings} • "
                    f"Total {self._money(document.total_cost)} • "
                    f"Per serving {self._money(document.cost_per_serving)}"
                ),
                styles["Meta"],
            ),
            Spacer(1, 8),
        ]
        if document.photo:
            story.append(Paragraph(escape(f"Photo: {document.photo}"), styles["Meta"]))

        rows: list[list[object]] = [["Ingredient", "Supplier", "Quantity", "Cost"]]
        for line in document.lines:
            quantity = f"{line.quantity:g} {line.unit or ''}".strip()
            rows.append(
                [
                    Paragraph(escape(line.name), styles["Cell"]),
                    Paragraph(escape(line.supplier or ""), styles["Cell"]),
                    quantity,
                    self._money(line.cost),
                ]
            )
        rows.append(["", "", "Total", self._money(document.total_cost)])
        story += [
            Paragraph("Ingredients", styles["H2"]),
            _table(rows, [70 * mm, 50 * mm, 30 * mm, 25 * mm]),
            Spacer(1, 10),
            Paragraph("Allergens", styles["H2"]),
            Paragraph(escape(_allergen_text(document.allergens)), styles["Cell"]),
        ]
        for heading, text in (
            ("Instructions", document.instructions),
            ("Notes", document.notes),
        ):
            if text:
                story += [
                    Spacer(1, 10),
                    Paragraph(heading, styles["H2"]),
                    *_paragraphs(text, styles["Cell"]),
                ]
        filename = f"{sanitize_filename(document.name)}.pdf"
        return RenderedDocument(
            content=_build(story, title), filename=filename, media_type=_MEDIA_TYPE
        )

    def render_menu(self, document: MenuDocument) -> RenderedDocument:
        """Render a weekly menu with costing."""
        styles = _styles()
        week = document.week_start_date.strftime("%d/%m/%Y")
        story: list[Flowable] = [
            Paragraph(escape(document.name), styles["H1"]),
            Paragraph(
                escape(
                    f"Week commencing {week} • "
                    f"Weekly cost {self._money(document.total_weekly_cost)} • "
                    f"Per person {self._money(document.cost_per_person)}"
                ),
                styles["Meta"],
            ),
            Spacer(1, 10),
        ]
        for section in document.sections:
            story += self._section(section, styles)
        story += [
            Paragraph("Allergens this week", styles["H2"]),
            Paragraph(escape(_allergen_text(document.allergens)), styles["Cell"]),
        ]
        filename = f"Menu-{sanitize_filename(document.name)}.pdf"
        return RenderedDocument(
            content=_build(story, document.name),
            filename=filename,
            media_type=_MEDIA_TYPE,
        )

    def _section(
        self, section: MenuDocumentSection, styles: dict[str, ParagraphStyle]
    ) -> list[Flowable]:
        rows: list[list[object]] = [["Slot", "Recipe", "Allergens", "Per serving"]]
        for row in section.rows:
            name = f"{row.name} ({row.code})" if row.code else row.name
            rows.append(
                [
                    row.slot,
                    Paragraph(escape(name), styles["Cell"]),
                    Paragraph(escape(_allergen_text(row.allergens)), styles["Cell"]),
                    self._money(row.cost_per_serving),
                ]
            )
        return [
            Paragraph(escape(section.title), styles["H2"]),
            Paragraph(
                escape(
                    f"Cost {self._money(section.cost)} • Serves {section.servings}"
                ),
                styles["Meta"],
            ),
            Spacer(1, 4),
            _table(rows, [35 * mm, 65 * mm, 50 * mm, 25 * mm]),
            Spacer(1, 10),
        ]

    def _money(self, amount: float) -> str:
        return f"{self.currency_symbol}{amount:.2f}"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "H1": ParagraphStyle(
            name="H1", parent=base["Heading1"], fontSize=20, leading=24
        ),
        "H2": ParagraphStyle(
            name="H2", parent=base["Heading2"], fontSize=14, leading=18
        ),
        "Meta": ParagraphStyle(
            name="Meta",
            parent=base["Normal"],
            fontSize=9,
            textColor=colors.HexColor("#45566b"),
        ),
        "Cell": ParagraphStyle(
            name="Cell", parent=base["Normal"], fontSize=10, leading=13
        ),
    }


def _table(rows: list[list[object]], widths: list[float]) -> Table:
    table = Table(rows, colWidths=widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ALIGN", (-1, 1), (-1, -1), "RIGHT"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), _STRIPES),
                ("GRID", (0, 0), (-1, -1), 0.25, _GRID),
            ]
        )
    )
    return table


def _paragraphs(text: str, style: ParagraphStyle) -> list[Flowable]:
    return [
        Paragraph(escape(chunk.strip()), style)
        for chunk in re.split(r"\n\s*\n|\n", text)
        if chunk.strip()
    ]


def _allergen_text(allergens: dict[str, str]) -> str:
    if not allergens:
        return "None declared"
    return ", ".join(
        name if mark == "✓" else f"{name} (may contain)"
        for name, mark in sorted(allergens.items())
    )


def _build(story: list[Flowable], title: str) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=title,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
    )
    doc.build(story)
    return buffer.getvalue()
