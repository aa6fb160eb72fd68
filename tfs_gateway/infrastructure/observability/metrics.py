"""Prometheus metrics for monitoring scores, ranking reliability, and Gemini latency"""

from prometheus_client import Counter, Histogram

# Scoring metrics
tfs_score_histogram = Histogram(
    "tfs_score_calculated",
    "Distribution of calculated TFS Scores",
    buckets=[20, 35, 50, 60, 75, 90, 100],
)

score_band_counter = Counter(
    "tfs_score_band_total",
    "TFS Scores by band",
    ["band"],  # green | yellow | red
)

# Ranking metrics
ranking_attempts_counter = Counter(
    "tfs_ranking_attempts_total",
    "Vehicle ranking attempts",
    ["outcome"],  # success | invalid_json | error
)

ranking_failures_counter = Counter(
    "tfs_ranking_failures_total",
    "Vehicle ranking requests that exhausted all retries",
)

# Tax lookup metrics
tax_lookup_counter = Counter(
    "tfs_tax_lookup_total",
    "County/tax lookups",
    ["outcome"],  # success | error
)

# Gemini metrics
gemini_latency_histogram = Histogram(
    "gemini_request_latency_seconds",
    "Gemini generateContent response time",
    ["operation"],
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(score: int, band: str) -> None:
    """Record score distribution and band counts"""
    tfs_score_histogram.observe(score)
    score_band_counter.labels(band=band).inc()
