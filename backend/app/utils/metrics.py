"""
Prometheus metrics definitions for the upload API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload metrics
photo_uploads_total = Counter(
    'photo_uploads_total',
    'Total photos stored successfully'
)

photo_upload_failures_total = Counter(
    'photo_upload_failures_total',
    'Total photo uploads that ended in an error response',
    ['reason']
)

# Content store metrics
store_requests_total = Counter(
    'store_requests_total',
    'Total content store requests',
    ['operation']
)

store_failures_total = Counter(
    'store_failures_total',
    'Total content store request failures',
    ['operation']
)

store_request_duration_seconds = Histogram(
    'store_request_duration_seconds',
    'Content store request latency in seconds',
    ['operation'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)
