"""Spreadsheet rendering of the weekly allergy form."""

import io
from dataclasses import dataclass

import pandas as pd
from openpyxl.styles import Alignment, Font

from recipe_costing.domain.documents import AllergyMatrix, RenderedDocument
from recipe_costing.services.reports import SpreadsheetRenderer

SHEET_NAME = "Allergens"
_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
_HEADER_ROW = 5


@dataclass
class PandasSpreadsheetRenderer(SpreadsheetRenderer):
    """Writes allergy matrices to XLSX through pandas and openpyxl."""

    def render_allergy_matrix(self, document: AllergyMatrix) -> RenderedDocument:
        """Render the allergy form: title, menu name, then one block per day."""
        width = len(document.columns) + 1
        rows: list[list[object]] = [
            _padded([document.title], width),
            _padded([], width),
            _padded([document.menu_name], width),
            _padded([], width),
            ["Recipe", *document.columns],
        ]
        section_rows: list[int] = []
        for title, recipes in document.sections:
            rows.append(_padded([title], width))
            section_rows.append(len(rows))
            for name, marks in recipes:
                rows.append([name, *(marks.get(col, "") for col in document.columns)])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(
                writer, sheet_name=SHEET_NAME, index=False, header=False
            )
            sheet = writer.sheets[SHEET_NAME]
            sheet["A1"].font = Font(size=24, bold=True)
            sheet["A3"].font = Font(size=14, bold=True)
            for cell in sheet[_HEADER_ROW]:
                cell.font = Font(bold=True)
                cell.alignment = Alignment(
                    horizontal="center", vertical="center", text_rotation=90
                )
            for row_number in section_rows:
                sheet.cell(row=row_number, column=1).font = Font(bold=True)
            for row in sheet.iter_rows(min_row=_HEADER_ROW + 1, min_col=2):
                for cell in row:
                    cell.alignment = Alignment(horizontal="center", vertical="center")
            sheet.column_dimensions["A"].width = 48
        return RenderedDocument(
            content=buffer.getvalue(),
            filename=document.filename,
            media_type=_MEDIA_TYPE,
        )


def _padded(values: list[object], width: int) -> list[object]:
    return [*values, *([""] * (width - len(values)))]
