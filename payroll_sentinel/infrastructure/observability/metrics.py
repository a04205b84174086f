"""Prometheus metrics for monitoring risk levels, alert delivery and upstream API health"""

from prometheus_client import Counter, Histogram

# Assessment metrics
assessment_counter = Counter(
    "payroll_sentinel_assessment_total",
    "Total payroll risk assessments performed",
    ["risk_level"],  # safe | warning | critical
)

risk_score_histogram = Histogram(
    "payroll_sentinel_risk_score",
    "Distribution of payroll risk scores",
    buckets=[10, 20, 40, 50, 70, 80, 90, 100],
)

# Alert metrics
alert_latency_histogram = Histogram(
    "slack_alert_latency_seconds",
    "Slack webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

alert_failure_counter = Counter(
    "slack_alert_failures_total",
    "Failed Slack alert deliveries",
)

alert_suppressed_counter = Counter(
    "slack_alert_suppressed_total",
    "Alerts skipped by cooldown or daily cap",
    ["reason"],  # cooldown | daily_limit
)

# Upstream API metrics
bank_fetch_failures_counter = Counter(
    "bank_fetch_failures_total",
    "Failed bank API calls",
)

payroll_fetch_failures_counter = Counter(
    "payroll_fetch_failures_total",
    "Failed payroll API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(risk_level: str, risk_score: int) -> None:
    """Record assessment metrics for tracking how many companies are at risk"""
    assessment_counter.labels(risk_level=str(getattr(risk_level, "value", risk_level))).inc()
    risk_score_histogram.observe(risk_score)
