"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"civic_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"civic_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

ISSUES_CREATED = Counter(
	"civic_issues_created_total",
	"Issues reported",
	["category"],
)

ISSUE_STATUS_CHANGES = Counter(
	"civic_issue_status_changes_total",
	"Issue status transitions",
	["status"],
)

VOTE_TOGGLES = Counter(
	"civic_votes_total",
	"Vote toggle outcomes",
	["action"],
)

COMMENTS_CREATED = Counter(
	"civic_comments_created_total",
	"Comments posted on issues",
)

EVENTS_CREATED = Counter(
	"civic_events_created_total",
	"Community events created",
)

ATTENDANCE_UPDATES = Counter(
	"civic_attendance_updates_total",
	"Attendance rows written",
	["status"],
)

ATTENDANCE_REJECTS = Counter(
	"civic_attendance_rejects_total",
	"Attendance updates rejected",
	["reason"],
)

NOTIFICATIONS_SENT = Counter(
	"civic_notifications_total",
	"Notifications persisted",
	["type"],
)

SIDE_EFFECT_FAILURES = Counter(
	"civic_side_effect_failures_total",
	"Best-effort side effects that failed after commit",
	["kind"],
)

AI_REQUESTS = Counter(
	"civic_ai_requests_total",
	"AI assist calls by operation and result",
	["operation", "result"],
)

AI_LATENCY = Histogram(
	"civic_ai_request_duration_seconds",
	"Latency of upstream LLM completions",
	["operation"],
	buckets=(0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

ADMIN_USER_UPDATES = Counter(
	"civic_admin_user_updates_total",
	"Admin modifications of user profiles",
	["action"],
)

REPORTS_GENERATED = Counter(
	"civic_reports_generated_total",
	"Admin reports generated",
	["type"],
)

DEPENDENCY_UP = Gauge(
	"civic_dependency_up",
	"Backing service availability from readiness probes (1=up,0=down)",
	["dependency"],
)

DEPENDENCY_LATENCY = Summary(
	"civic_dependency_probe_seconds",
	"Readiness probe latency per backing service",
	["dependency"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_issue_created(category: str | None) -> None:
	ISSUES_CREATED.labels(category=category or "uncategorized").inc()


def inc_issue_status_change(status: str) -> None:
	ISSUE_STATUS_CHANGES.labels(status=status).inc()


def inc_vote_toggle(action: str) -> None:
	VOTE_TOGGLES.labels(action=action).inc()


def inc_comment_created() -> None:
	COMMENTS_CREATED.inc()


def inc_event_created() -> None:
	EVENTS_CREATED.inc()


def inc_attendance_update(status: str) -> None:
	ATTENDANCE_UPDATES.labels(status=status).inc()


def inc_attendance_reject(reason: str) -> None:
	ATTENDANCE_REJECTS.labels(reason=reason).inc()


def inc_notification_sent(kind: str) -> None:
	NOTIFICATIONS_SENT.labels(type=kind).inc()


def inc_side_effect_failure(kind: str) -> None:
	SIDE_EFFECT_FAILURES.labels(kind=kind).inc()


def record_ai_request(operation: str, *, result: str, latency_seconds: float | None = None) -> None:
	AI_REQUESTS.labels(operation=operation, result=result).inc()
	if latency_seconds is not None:
		AI_LATENCY.labels(operation=operation).observe(latency_seconds)


def inc_admin_user_update(action: str) -> None:
	ADMIN_USER_UPDATES.labels(action=action).inc()


def inc_report_generated(kind: str) -> None:
	REPORTS_GENERATED.labels(type=kind).inc()


def mark_dependency(name: str, ok: bool, *, latency_seconds: float | None = None) -> None:
	DEPENDENCY_UP.labels(dependency=name).set(1 if ok else 0)
	if latency_seconds is not None:
		DEPENDENCY_LATENCY.labels(dependency=name).observe(latency_seconds)
