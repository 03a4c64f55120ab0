"""
Cash Flow API Routes
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from buffetdesk.api.deps import require_user
from buffetdesk.core.database import get_db
from buffetdesk.schemas import CashFlowEntryCreate, CashFlowEntryResponse
from buffetdesk.services import CashFlowService, StatsService

router = APIRouter(prefix="/cashflow", tags=["Cash Flow"], dependencies=require_user)


@router.get("", response_model=List[CashFlowEntryResponse])
def get_cash_flow(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    """Cash flow entries newest first, optionally within a date range"""
    return StatsService(db).get_cash_flow(start_date, end_date)


@router.post("", response_model=CashFlowEntryResponse, status_code=status.HTTP_201_CREATED)
def create_cash_flow_entry(entry_data: CashFlowEntryCreate, db: Session = Depends(get_db)):
    """Record a manual income/expense entry"""
    return CashFlowService(db).create_entry(entry_data)
