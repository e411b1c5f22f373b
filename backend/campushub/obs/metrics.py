"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary


REQUEST_COUNTER = Counter(
	"campushub_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"campushub_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

REGISTRATIONS = Counter(
	"campushub_registrations_total",
	"Members registered, by resolved role and registration kind",
	["role", "kind"],
)

APPROVALS = Counter(
	"campushub_approvals_total",
	"Admin approvals processed",
	["result"],
)

DOMAIN_REJECTS = Counter(
	"campushub_domain_rejects_total",
	"Requests rejected with a domain error",
	["reason"],
)

LEADERBOARD_COMPUTATIONS = Counter(
	"campushub_leaderboard_computations_total",
	"Leaderboard views computed",
)

LEADERBOARD_STUDENTS = Summary(
	"campushub_leaderboard_students",
	"Students considered per leaderboard computation",
)

LOGINS = Counter(
	"campushub_logins_total",
	"Password login attempts",
	["result"],
)

MEMBER_UPDATES = Counter(
	"campushub_member_updates_total",
	"Member self-service updates applied",
)

REDIS_UP = Gauge("campushub_redis_up", "Redis availability (1=up,0=down)")
REDIS_LATENCY = Summary("campushub_redis_latency_seconds", "Redis ping latency (seconds)")

POSTGRES_UP = Gauge("campushub_postgres_up", "Postgres availability (1=up,0=down)")
POSTGRES_LATENCY = Summary("campushub_postgres_latency_seconds", "Postgres ping latency (seconds)")


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_registration(role: str, kind: str) -> None:
	REGISTRATIONS.labels(role=role, kind=kind).inc()


def inc_approval(result: str) -> None:
	APPROVALS.labels(result=result).inc()


def inc_domain_reject(reason: str) -> None:
	DOMAIN_REJECTS.labels(reason=reason).inc()


def inc_leaderboard(students: int) -> None:
	LEADERBOARD_COMPUTATIONS.inc()
	LEADERBOARD_STUDENTS.observe(students)


def inc_login(result: str) -> None:
	LOGINS.labels(result=result).inc()


def inc_member_update() -> None:
	MEMBER_UPDATES.inc()


def mark_redis(ok: bool, *, latency_seconds: float | None = None) -> None:
	REDIS_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		REDIS_LATENCY.observe(latency_seconds)


def mark_postgres(ok: bool, *, latency_seconds: float | None = None) -> None:
	POSTGRES_UP.set(1 if ok else 0)
	if latency_seconds is not None:
		POSTGRES_LATENCY.observe(latency_seconds)
