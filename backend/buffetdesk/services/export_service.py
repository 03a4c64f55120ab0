"""
Export Service - Excel rendering of the financial summary
"""
from datetime import date
from io import BytesIO
from typing import Dict

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter

MONEY_FORMAT = '#,##0.00'

header_font = Font(bold=True, color="FFFFFF", size=11)
header_fill = PatternFill(start_color="1e40af", end_color="1e40af", fill_type="solid")
title_font = Font(bold=True, size=14)
total_font = Font(bold=True, size=10)
total_fill = PatternFill(start_color="f3f4f6", end_color="f3f4f6", fill_type="solid")
thin_border = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


def _write_table(ws, start_row: int, title: str, headers, rows) -> int:
    """Write a titled table and return the next free row"""
    ws.cell(row=start_row, column=1, value=title).font = total_font
    header_row = start_row + 1
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=header_row, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin_border
        cell.alignment = Alignment(horizontal="center")

    row = header_row + 1
    for label, amount in rows:
        ws.cell(row=row, column=1, value=label).border = thin_border
        amount_cell = ws.cell(row=row, column=2, value=amount)
        amount_cell.number_format = MONEY_FORMAT
        amount_cell.border = thin_border
        row += 1

    if not rows:
        ws.cell(row=row, column=1, value="No data")
        row += 1
    return row + 1


def build_financial_summary_workbook(summary: Dict, start_date: date, end_date: date,
                                     title: str = "Financial Summary") -> bytes:
    """Render a financial summary dict (as returned by StatsService) to .xlsx bytes"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Financial Summary"

    ws['A1'] = title
    ws['A1'].font = title_font
    ws.merge_cells('A1:B1')
    ws['A2'] = f"Period: {start_date.isoformat()} to {end_date.isoformat()}"

    totals = [
        ("Total Revenue", summary["total_revenue"]),
        ("Total Expenses", summary["total_expenses"]),
        ("Net Profit", summary["net_profit"]),
    ]
    row = 4
    for label, amount in totals:
        ws.cell(row=row, column=1, value=label).font = total_font
        cell = ws.cell(row=row, column=2, value=amount)
        cell.number_format = MONEY_FORMAT
        cell.fill = total_fill
        row += 1
    ws.cell(row=row, column=1, value="Profit Margin (%)").font = total_font
    ws.cell(row=row, column=2, value=summary["profit_margin"]).number_format = '0.00'
    row += 2

    row = _write_table(
        ws, row, "Expenses by Category", ("Category", "Total"),
        [(r["category"], r["total"]) for r in summary["expenses_by_category"]],
    )
    _write_table(
        ws, row, "Revenue by Month", ("Month", "Revenue"),
        [(r["month"], r["revenue"]) for r in summary["revenue_by_month"]],
    )

    for col in range(1, 3):
        ws.column_dimensions[get_column_letter(col)].width = 24

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
