"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


REQUEST_COUNTER = Counter(
	"clubhub_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"clubhub_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

CLUBS_CREATED = Counter(
	"clubhub_clubs_created_total",
	"Clubs submitted for review",
)

EVENTS_CREATED = Counter(
	"clubhub_events_created_total",
	"Events submitted for review",
)

APPROVAL_DECISIONS = Counter(
	"clubhub_approval_decisions_total",
	"Admin review decisions",
	["kind", "decision"],
)

MEMBERSHIP_CHANGES = Counter(
	"clubhub_membership_changes_total",
	"Club membership joins and leaves",
	["action"],
)

REGISTRATION_CHANGES = Counter(
	"clubhub_registration_changes_total",
	"Event registrations and cancellations",
	["action"],
)

ANNOUNCEMENTS_POSTED = Counter(
	"clubhub_announcements_posted_total",
	"Announcements posted",
)

PERMISSION_DENIED = Counter(
	"clubhub_permission_denied_total",
	"Workflow operations rejected by authorization policy",
	["reason"],
)

AUDIT_PUBLISH_FAILURES = Counter(
	"clubhub_audit_publish_failures_total",
	"Audit events that could not be appended to the stream",
)

POSTGRES_UP = Gauge("clubhub_postgres_up", "Postgres readiness (1 up, 0 down)")
POSTGRES_LATENCY = Histogram(
	"clubhub_postgres_ping_seconds",
	"Postgres readiness query latency",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)
REDIS_UP = Gauge("clubhub_redis_up", "Redis readiness (1 up, 0 down)")
REDIS_LATENCY = Histogram(
	"clubhub_redis_ping_seconds",
	"Redis readiness ping latency",
	buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_club_created() -> None:
	CLUBS_CREATED.inc()


def inc_event_created() -> None:
	EVENTS_CREATED.inc()


def inc_approval_decision(kind: str, decision: str) -> None:
	APPROVAL_DECISIONS.labels(kind=kind, decision=decision).inc()


def inc_membership_change(action: str) -> None:
	MEMBERSHIP_CHANGES.labels(action=action).inc()


def inc_registration_change(action: str) -> None:
	REGISTRATION_CHANGES.labels(action=action).inc()


def inc_announcement_posted() -> None:
	ANNOUNCEMENTS_POSTED.inc()


def inc_permission_denied(reason: str) -> None:
	PERMISSION_DENIED.labels(reason=reason).inc()


def inc_audit_publish_failure() -> None:
	AUDIT_PUBLISH_FAILURES.inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
