from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.ticket import TicketPriority, TicketStatus


class ReportFilters(BaseModel):
    """Report query filters. assignee_id may be a user id or "unassigned"."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assignee_id: Optional[str] = None
    category_id: Optional[UUID] = None


class ReportSummary(BaseModel):
    total_tickets: int = 0
    open_tickets: int = 0
    in_progress_tickets: int = 0
    resolved_tickets: int = 0


class StatusCount(BaseModel):
    status: str
    count: int


class PriorityCount(BaseModel):
    priority: str
    count: int


class CategoryCount(BaseModel):
    category_id: Optional[UUID] = None
    category: str
    count: int


class DailyCount(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class OperationalMetrics(BaseModel):
    first_response_hours_avg: Optional[float] = None
    resolution_hours_avg: Optional[float] = None
    backlog_age_hours_avg: Optional[float] = None
    reopened_tickets: int = 0
    ever_resolved_tickets: int = 0
    reopened_rate_pct: float = 0.0
    sla_eligible_tickets: int = 0
    sla_breached_tickets: int = 0
    sla_breach_rate_pct: float = 0.0


class NamedOption(BaseModel):
    id: UUID
    name: str


class FilterOptions(BaseModel):
    assignees: List[NamedOption] = Field(default_factory=list)
    categories: List[NamedOption] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    priorities: List[str] = Field(default_factory=list)


class TicketReport(BaseModel):
    generated_at: datetime
    filters_applied: ReportFilters
    summary: ReportSummary
    status_distribution: List[StatusCount] = Field(default_factory=list)
    priority_distribution: List[PriorityCount] = Field(default_factory=list)
    category_distribution: List[CategoryCount] = Field(default_factory=list)
    tickets_over_time: List[DailyCount] = Field(default_factory=list)
    operational_metrics: OperationalMetrics
    sla_threshold_hours: Dict[str, float] = Field(default_factory=dict)
    filter_options: FilterOptions = Field(default_factory=FilterOptions)


class StaffWorkload(BaseModel):
    user_id: UUID
    name: str
    active_tickets: int = 0
    resolved_tickets: int = 0


class DashboardStats(BaseModel):
    total_open: int = 0
    staff_stats: List[StaffWorkload] = Field(default_factory=list)
