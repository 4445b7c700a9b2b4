from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_admin, require_staff
from app.db import SessionDep
from app.models import TicketPriority, TicketStatus, User
from app.schemas.report import DashboardStats, ReportFilters, TicketReport
from app.services.reports import build_dashboard_stats, build_ticket_report

router = APIRouter()


@router.get("/", response_model=DashboardStats, summary="Dashboard statistics")
def get_dashboard_stats(
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> DashboardStats:
    return build_dashboard_stats(session)


@router.get("/reports", response_model=TicketReport, summary="Ticket report")
def get_ticket_report(
    session: SessionDep,
    current_user: User = Depends(require_staff),
    start_date: Optional[date] = Query(None, description="Created on or after (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Created on or before (YYYY-MM-DD)"),
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    priority_filter: Optional[TicketPriority] = Query(None, alias="priority"),
    assignee_id: Optional[str] = Query(None, description="User id or 'unassigned'"),
    category_id: Optional[UUID] = Query(None),
) -> TicketReport:
    """
    Summary counts, distributions and operational KPIs over the filtered
    ticket set. All filters combine with AND.
    """
    filters = ReportFilters(
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
        priority=priority_filter,
        assignee_id=assignee_id,
        category_id=category_id,
    )
    return build_ticket_report(session, filters)
