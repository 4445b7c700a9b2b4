"""
Ticket reporting.

Counts and distributions come straight from SQL; the time-based KPIs
(first response, resolution, backlog age, reopen rate, SLA breach) are
derived in Python from each ticket's history log.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import case, func
from sqlmodel import Session, select

from app.core.config import settings
from app.core.errors import ValidationFailed
from app.core.timeutils import utcnow
from app.models import (
    STAFF_ROLES,
    Ticket,
    TicketCategory,
    TicketHistory,
    TicketHistoryAction,
    TicketPriority,
    TicketStatus,
    User,
)
from app.schemas.report import (
    CategoryCount,
    DailyCount,
    DashboardStats,
    FilterOptions,
    NamedOption,
    OperationalMetrics,
    PriorityCount,
    ReportFilters,
    ReportSummary,
    StaffWorkload,
    StatusCount,
    TicketReport,
)
from app.services.tickets import assignee_condition

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"
OPEN_STATES = (TicketStatus.OPEN.value, TicketStatus.IN_PROGRESS.value)
STATUS_ORDER = [status.value for status in TicketStatus]
PRIORITY_ORDER = [TicketPriority.HIGH.value, TicketPriority.MEDIUM.value, TicketPriority.LOW.value]


def _hours(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def _average(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return round(sum(values) / len(values), 2)


def _rate(numerator: int, denominator: int) -> float:
    if not denominator:
        return 0.0
    return round(numerator * 100 / denominator, 2)


def report_conditions(filters: ReportFilters) -> list:
    """SQL WHERE clauses for a report filter set; end_date is inclusive."""
    if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
        raise ValidationFailed("start_date must be on or before end_date")

    conditions = []
    if filters.start_date:
        conditions.append(Ticket.created_at >= datetime.combine(filters.start_date, time.min))
    if filters.end_date:
        end = datetime.combine(filters.end_date, time.min) + timedelta(days=1)
        conditions.append(Ticket.created_at < end)
    if filters.status:
        conditions.append(Ticket.status == filters.status.value)
    if filters.priority:
        conditions.append(Ticket.priority == filters.priority.value)
    if filters.assignee_id:
        conditions.append(assignee_condition(filters.assignee_id))
    if filters.category_id:
        conditions.append(Ticket.category_id == filters.category_id)
    return conditions


def resolution_timestamp(ticket: Ticket, history: Iterable[TicketHistory]) -> Optional[datetime]:
    """closed_at when set, else the first status change to RESOLVED."""
    if ticket.closed_at:
        return ticket.closed_at
    resolved_at = [
        entry.created_at
        for entry in history
        if entry.action == TicketHistoryAction.STATUS_CHANGE
        and entry.new_value == TicketStatus.RESOLVED
    ]
    return min(resolved_at) if resolved_at else None


def is_reopened(history: Iterable[TicketHistory]) -> bool:
    return any(
        entry.action == TicketHistoryAction.STATUS_CHANGE
        and entry.old_value == TicketStatus.RESOLVED
        and entry.new_value in OPEN_STATES
        for entry in history
    )


def was_ever_resolved(ticket: Ticket, history: Iterable[TicketHistory]) -> bool:
    if ticket.status == TicketStatus.RESOLVED:
        return True
    return any(
        entry.action == TicketHistoryAction.STATUS_CHANGE
        and entry.new_value == TicketStatus.RESOLVED
        for entry in history
    )


def compute_operational_metrics(
    tickets: Iterable[Ticket],
    history_by_ticket: Mapping[UUID, List[TicketHistory]],
    now: datetime,
    sla_targets: Mapping[str, float],
) -> OperationalMetrics:
    first_response: List[float] = []
    resolution: List[float] = []
    backlog: List[float] = []
    reopened = ever_resolved = 0
    sla_eligible = sla_breached = 0

    for ticket in tickets:
        history = history_by_ticket.get(ticket.id, [])

        # Any status or assignee change counts as the first response
        responses = [entry.created_at for entry in history if entry.created_at >= ticket.created_at]
        if responses:
            first_response.append(_hours(ticket.created_at, min(responses)))

        resolved_at = resolution_timestamp(ticket, history)
        if resolved_at and resolved_at >= ticket.created_at:
            resolution.append(_hours(ticket.created_at, resolved_at))
        else:
            resolved_at = None

        if ticket.status in OPEN_STATES:
            backlog.append(_hours(ticket.created_at, now))

        if is_reopened(history):
            reopened += 1
        if was_ever_resolved(ticket, history):
            ever_resolved += 1

        target = sla_targets.get(ticket.priority)
        if target is not None:
            sla_eligible += 1
            if _hours(ticket.created_at, resolved_at or now) > target:
                sla_breached += 1

    return OperationalMetrics(
        first_response_hours_avg=_average(first_response),
        resolution_hours_avg=_average(resolution),
        backlog_age_hours_avg=_average(backlog),
        reopened_tickets=reopened,
        ever_resolved_tickets=ever_resolved,
        reopened_rate_pct=_rate(reopened, ever_resolved),
        sla_eligible_tickets=sla_eligible,
        sla_breached_tickets=sla_breached,
        sla_breach_rate_pct=_rate(sla_breached, sla_eligible),
    )


def _load_history(session: Session, ticket_ids: List[UUID]) -> Dict[UUID, List[TicketHistory]]:
    history_by_ticket: Dict[UUID, List[TicketHistory]] = defaultdict(list)
    if not ticket_ids:
        return history_by_ticket
    statement = (
        select(TicketHistory)
        .where(TicketHistory.ticket_id.in_(ticket_ids))
        .order_by(TicketHistory.created_at.asc())
    )
    for entry in session.exec(statement).all():
        history_by_ticket[entry.ticket_id].append(entry)
    return history_by_ticket


def _filter_options(session: Session) -> FilterOptions:
    staff = session.exec(
        select(User)
        .where(User.role.in_([role.value for role in STAFF_ROLES]), User.is_active == True)
        .order_by(User.name)
    ).all()
    categories = session.exec(
        select(TicketCategory)
        .where(TicketCategory.is_active == True)
        .order_by(TicketCategory.sort_order, TicketCategory.name)
    ).all()
    return FilterOptions(
        assignees=[NamedOption(id=user.id, name=user.name) for user in staff],
        categories=[NamedOption(id=category.id, name=category.name) for category in categories],
        statuses=STATUS_ORDER,
        priorities=PRIORITY_ORDER,
    )


def build_ticket_report(
    session: Session,
    filters: ReportFilters,
    now: Optional[datetime] = None,
    sla_targets: Optional[Mapping[str, float]] = None,
) -> TicketReport:
    now = now or utcnow()
    sla_targets = dict(settings.SLA_TARGET_HOURS if sla_targets is None else sla_targets)
    conditions = report_conditions(filters)

    tickets = session.exec(select(Ticket).where(*conditions)).all()

    # By status
    status_rows = dict(
        session.exec(
            select(Ticket.status, func.count(Ticket.id)).where(*conditions).group_by(Ticket.status)
        ).all()
    )
    status_distribution = [
        StatusCount(status=status, count=status_rows[status])
        for status in STATUS_ORDER
        if status_rows.get(status)
    ]

    # By priority
    priority_rows = dict(
        session.exec(
            select(Ticket.priority, func.count(Ticket.id)).where(*conditions).group_by(Ticket.priority)
        ).all()
    )
    priority_distribution = [
        PriorityCount(priority=priority, count=priority_rows[priority])
        for priority in PRIORITY_ORDER
        if priority_rows.get(priority)
    ]

    # By category, uncategorized tickets in their own bucket
    category_rows = session.exec(
        select(Ticket.category_id, TicketCategory.name, func.count(Ticket.id))
        .select_from(Ticket)
        .outerjoin(TicketCategory, Ticket.category_id == TicketCategory.id)
        .where(*conditions)
        .group_by(Ticket.category_id, TicketCategory.name)
    ).all()
    category_distribution = sorted(
        (
            CategoryCount(category_id=category_id, category=name or UNCATEGORIZED, count=count)
            for category_id, name, count in category_rows
        ),
        key=lambda item: (-item.count, item.category),
    )

    # By creation day
    per_day = Counter(ticket.created_at.date().isoformat() for ticket in tickets)
    tickets_over_time = [DailyCount(date=day, count=per_day[day]) for day in sorted(per_day)]

    summary = ReportSummary(
        total_tickets=len(tickets),
        open_tickets=status_rows.get(TicketStatus.OPEN.value, 0),
        in_progress_tickets=status_rows.get(TicketStatus.IN_PROGRESS.value, 0),
        resolved_tickets=status_rows.get(TicketStatus.RESOLVED.value, 0),
    )

    history_by_ticket = _load_history(session, [ticket.id for ticket in tickets])
    metrics = compute_operational_metrics(tickets, history_by_ticket, now, sla_targets)

    logger.debug(f"Report built over {len(tickets)} ticket(s)")
    return TicketReport(
        generated_at=now,
        filters_applied=filters,
        summary=summary,
        status_distribution=status_distribution,
        priority_distribution=priority_distribution,
        category_distribution=category_distribution,
        tickets_over_time=tickets_over_time,
        operational_metrics=metrics,
        sla_threshold_hours=sla_targets,
        filter_options=_filter_options(session),
    )


def build_dashboard_stats(session: Session) -> DashboardStats:
    """Open ticket count plus per-staff workload."""
    total_open = session.exec(
        select(func.count(Ticket.id)).where(Ticket.status == TicketStatus.OPEN.value)
    ).one()

    active = func.count(case((Ticket.status.in_(OPEN_STATES), Ticket.id)))
    resolved = func.count(case((Ticket.status == TicketStatus.RESOLVED.value, Ticket.id)))
    rows = session.exec(
        select(User.id, User.name, active, resolved)
        .select_from(User)
        .outerjoin(Ticket, Ticket.assignee_id == User.id)
        .where(User.role.in_([role.value for role in STAFF_ROLES]), User.is_active == True)
        .group_by(User.id, User.name)
        .order_by(User.name)
    ).all()

    staff_stats = [
        StaffWorkload(user_id=user_id, name=name, active_tickets=active_count, resolved_tickets=resolved_count)
        for user_id, name, active_count, resolved_count in rows
    ]
    return DashboardStats(total_open=total_open, staff_stats=staff_stats)
