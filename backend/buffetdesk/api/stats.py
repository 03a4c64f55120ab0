"""
Statistics API Routes
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from buffetdesk.api.deps import require_user
from buffetdesk.core.database import get_db
from buffetdesk.core.money import utctoday
from buffetdesk.schemas import FinancialSummary, MonthlyStats
from buffetdesk.services.export_service import build_financial_summary_workbook
from buffetdesk.services.stats_service import StatsService

router = APIRouter(prefix="/stats", tags=["Statistics"], dependencies=require_user)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _default_range(start_date: Optional[date], end_date: Optional[date]):
    """Default: January 1st of the current year through today"""
    today = utctoday()
    return start_date or date(today.year, 1, 1), end_date or today


@router.get("", response_model=MonthlyStats)
def get_monthly_stats(db: Session = Depends(get_db)):
    """Get dashboard statistics for the current month"""
    return StatsService(db).get_monthly_stats()


@router.get("/financial", response_model=FinancialSummary)
def get_financial_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Get revenue/expense summary for a date range (inclusive)"""
    start_date, end_date = _default_range(start_date, end_date)
    return StatsService(db).get_financial_summary(start_date, end_date)


@router.get("/financial/excel")
def export_financial_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Download the financial summary as an Excel workbook"""
    start_date, end_date = _default_range(start_date, end_date)
    summary = StatsService(db).get_financial_summary(start_date, end_date)
    content = build_financial_summary_workbook(summary, start_date, end_date)
    filename = f"financial_summary_{start_date.isoformat()}_{end_date.isoformat()}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
