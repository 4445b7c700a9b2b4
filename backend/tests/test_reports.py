from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest

from app.core.errors import ValidationFailed
from app.models import Ticket, TicketHistory, TicketStatus
from app.schemas.report import ReportFilters
from app.services.reports import (
    build_ticket_report,
    compute_operational_metrics,
    is_reopened,
    resolution_timestamp,
)

NOW = datetime(2024, 5, 10, 12, 0)
SLA = {"HIGH": 4, "MEDIUM": 8, "LOW": 24}


def make_ticket(created_at, status="OPEN", priority="MEDIUM", closed_at=None, **extra):
    return Ticket(
        caller_name="Caller",
        department="Finance",
        description="Something broke",
        priority=priority,
        status=status,
        created_by=extra.pop("created_by", uuid4()),
        created_at=created_at,
        updated_at=created_at,
        closed_at=closed_at,
        **extra,
    )


def status_change(ticket, old, new, at):
    return TicketHistory(
        ticket_id=ticket.id,
        user_id=uuid4(),
        action="STATUS_CHANGE",
        old_value=old,
        new_value=new,
        created_at=at,
    )


def test_empty_ticket_set_has_zero_rates_and_null_averages():
    metrics = compute_operational_metrics([], {}, NOW, SLA)

    assert metrics.first_response_hours_avg is None
    assert metrics.resolution_hours_avg is None
    assert metrics.backlog_age_hours_avg is None
    assert metrics.reopened_rate_pct == 0.0
    assert metrics.sla_breach_rate_pct == 0.0


def test_reopen_rate_is_zero_without_resolved_tickets():
    ticket = make_ticket(NOW - timedelta(hours=2))

    metrics = compute_operational_metrics([ticket], {}, NOW, SLA)

    assert metrics.ever_resolved_tickets == 0
    assert metrics.reopened_rate_pct == 0.0
    assert metrics.backlog_age_hours_avg == 2.0


def test_sla_rate_is_zero_when_no_priority_has_a_target():
    ticket = make_ticket(NOW - timedelta(hours=100), priority="HIGH")

    metrics = compute_operational_metrics([ticket], {}, NOW, {})

    assert metrics.sla_eligible_tickets == 0
    assert metrics.sla_breach_rate_pct == 0.0


def test_first_response_and_resolution_times():
    created = NOW - timedelta(hours=10)
    ticket = make_ticket(created, status="RESOLVED", closed_at=created + timedelta(hours=3))
    history = [
        status_change(ticket, "OPEN", "IN_PROGRESS", created + timedelta(minutes=30)),
        status_change(ticket, "IN_PROGRESS", "RESOLVED", created + timedelta(hours=3)),
    ]

    metrics = compute_operational_metrics([ticket], {ticket.id: history}, NOW, SLA)

    assert metrics.first_response_hours_avg == 0.5
    assert metrics.resolution_hours_avg == 3.0
    assert metrics.backlog_age_hours_avg is None
    assert metrics.sla_breached_tickets == 0


def test_resolution_falls_back_to_first_resolved_history_entry():
    created = NOW - timedelta(hours=20)
    ticket = make_ticket(created, status="OPEN")
    history = [
        status_change(ticket, "OPEN", "RESOLVED", created + timedelta(hours=5)),
        status_change(ticket, "RESOLVED", "OPEN", created + timedelta(hours=6)),
        status_change(ticket, "OPEN", "RESOLVED", created + timedelta(hours=9)),
    ]

    assert resolution_timestamp(ticket, history) == created + timedelta(hours=5)
    assert is_reopened(history)


def test_sla_breach_uses_now_for_unresolved_tickets():
    high_late = make_ticket(NOW - timedelta(hours=5), priority="HIGH")
    low_on_time = make_ticket(NOW - timedelta(hours=5), priority="LOW")
    medium_resolved_late = make_ticket(
        NOW - timedelta(hours=30),
        status="RESOLVED",
        priority="MEDIUM",
        closed_at=NOW - timedelta(hours=20),
    )

    metrics = compute_operational_metrics([high_late, low_on_time, medium_resolved_late], {}, NOW, SLA)

    assert metrics.sla_eligible_tickets == 3
    assert metrics.sla_breached_tickets == 2
    assert metrics.sla_breach_rate_pct == 66.67


def test_reopened_rate_counts_resolved_to_open_transitions():
    created = NOW - timedelta(hours=10)
    reopened = make_ticket(created, status="IN_PROGRESS")
    resolved = make_ticket(created, status="RESOLVED", closed_at=created + timedelta(hours=1))
    history = {
        reopened.id: [
            status_change(reopened, "OPEN", "RESOLVED", created + timedelta(hours=1)),
            status_change(reopened, "RESOLVED", "IN_PROGRESS", created + timedelta(hours=2)),
        ],
    }

    metrics = compute_operational_metrics([reopened, resolved], history, NOW, SLA)

    assert metrics.reopened_tickets == 1
    assert metrics.ever_resolved_tickets == 2
    assert metrics.reopened_rate_pct == 50.0


def test_report_rejects_inverted_date_range(session):
    filters = ReportFilters(start_date=date(2024, 5, 10), end_date=date(2024, 5, 1))

    with pytest.raises(ValidationFailed):
        build_ticket_report(session, filters, now=NOW)


def test_report_distributions_and_inclusive_end_date(session, end_user, agent, taxonomy):
    hardware = taxonomy["hardware"]
    session.add(make_ticket(datetime(2024, 5, 1, 9), priority="HIGH", created_by=end_user.id,
                            category_id=hardware.id, subcategory_id=taxonomy["laptop"].id))
    session.add(make_ticket(datetime(2024, 5, 1, 23, 59), priority="LOW", created_by=end_user.id,
                            assignee_id=agent.id, status=TicketStatus.IN_PROGRESS.value))
    session.add(make_ticket(datetime(2024, 5, 3, 8), priority="HIGH", created_by=end_user.id,
                            category_id=hardware.id, subcategory_id=taxonomy["printer"].id))
    session.add(make_ticket(datetime(2024, 5, 4, 0, 0), created_by=end_user.id))
    session.commit()

    report = build_ticket_report(
        session,
        ReportFilters(start_date=date(2024, 5, 1), end_date=date(2024, 5, 3)),
        now=NOW,
    )

    assert report.summary.total_tickets == 3
    assert report.summary.open_tickets == 2
    assert report.summary.in_progress_tickets == 1
    assert [(item.status, item.count) for item in report.status_distribution] == [
        ("OPEN", 2),
        ("IN_PROGRESS", 1),
    ]
    assert [(item.priority, item.count) for item in report.priority_distribution] == [
        ("HIGH", 2),
        ("LOW", 1),
    ]
    assert [(item.category, item.count) for item in report.category_distribution] == [
        ("Hardware", 2),
        ("Uncategorized", 1),
    ]
    assert [(item.date, item.count) for item in report.tickets_over_time] == [
        ("2024-05-01", 2),
        ("2024-05-03", 1),
    ]
    assert report.sla_threshold_hours == SLA
    assert [option.name for option in report.filter_options.categories] == ["Hardware", "Software"]


def test_report_assignee_filters(session, end_user, agent):
    session.add(make_ticket(datetime(2024, 5, 1, 9), created_by=end_user.id, assignee_id=agent.id))
    session.add(make_ticket(datetime(2024, 5, 1, 10), created_by=end_user.id))
    session.commit()

    assigned = build_ticket_report(session, ReportFilters(assignee_id=str(agent.id)), now=NOW)
    unassigned = build_ticket_report(session, ReportFilters(assignee_id="unassigned"), now=NOW)

    assert assigned.summary.total_tickets == 1
    assert unassigned.summary.total_tickets == 1
