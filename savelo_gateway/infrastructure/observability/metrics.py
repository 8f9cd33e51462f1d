"""Prometheus metrics for plan creation, payments, reconciliation and ledger health"""

from prometheus_client import Counter, Histogram

# Plan lifecycle metrics
plan_created_counter = Counter(
    "savelo_plans_created_total",
    "Saving plans created",
    ["level"],
)

payment_counter = Counter(
    "savelo_payments_total",
    "Daily payment attempts",
    ["outcome"],  # confirmed | rejected | not_active | not_owner | invalid | network_error | in_flight
)

reconciliation_eviction_counter = Counter(
    "savelo_index_evictions_total",
    "Plan ids evicted from a wallet's local index",
)

daily_amount_bucket_counter = Counter(
    "savelo_daily_amount_bucket",
    "Daily amounts committed by bucket",
    ["bucket"],  # <$5, $5-$20, $20-$50, $50+
)

# Ledger metrics
ledger_latency_histogram = Histogram(
    "ledger_latency_seconds",
    "Ledger API response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ledger_failure_counter = Counter(
    "ledger_failures_total",
    "Failed ledger API calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_plan_created(level_name: str, daily_amount: float) -> None:
    """Record creation metrics for tier popularity and amount distribution"""
    plan_created_counter.labels(level=level_name).inc()

    if daily_amount < 5:
        bucket = "<$5"
    elif daily_amount < 20:
        bucket = "$5-$20"
    elif daily_amount < 50:
        bucket = "$20-$50"
    else:
        bucket = "$50+"

    daily_amount_bucket_counter.labels(bucket=bucket).inc()
