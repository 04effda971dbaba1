from __future__ import annotations

from prometheus_client import Counter, Histogram

city_upstream_requests_total = Counter(
    "city_upstream_requests_total",
    "Total upstream city data requests",
    labelnames=["source", "endpoint"],
)

city_upstream_errors_total = Counter(
    "city_upstream_errors_total",
    "Total upstream city data request errors",
    labelnames=["source", "endpoint", "error_type"],
)

city_upstream_latency_seconds = Histogram(
    "city_upstream_latency_seconds",
    "Latency of upstream city data requests",
    labelnames=["source", "endpoint"],
    buckets=(0.1, 0.3, 0.5, 1, 2, 5, 10, 20, 30),
)

city_enrichment_fallbacks_total = Counter(
    "city_enrichment_fallbacks_total",
    "Aggregations that substituted an all-null reading",
    labelnames=["source", "reason"],
)

wellbeing_scores_total = Counter(
    "wellbeing_scores_total",
    "Wellbeing scores computed",
    labelnames=["grade"],
)
