"""
Prometheus metrics for the clinic API.

Exposes /metrics with request counters, latencies and the number of
operations refused by plan quotas or account restrictions. Restrict the
endpoint to the internal network.
"""
import os
import time

from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share metrics through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
    _metric_registry = None
else:
    registry = REGISTRY
    _metric_registry = registry

api_requests_total = Counter(
    'clinic_api_requests_total',
    'API requests by endpoint and status',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

api_request_seconds = Histogram(
    'clinic_api_request_seconds',
    'API request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

quota_rejections_total = Counter(
    'clinic_quota_rejections_total',
    'Gated operations refused by a plan ceiling or account restriction',
    ['resource'],
    registry=_metric_registry
)


def record_quota_rejection(resource):
    """Count a refused operation: 'storage', 'users', 'clients' or 'restricted'."""
    quota_rejections_total.labels(resource=resource).inc()


def setup_metrics_instrumentation(app):
    """Time every request and count it by endpoint and status."""

    @app.before_request
    def start_request_timer():
        g._metrics_started = time.perf_counter()

    @app.after_request
    def record_request(response):
        started = g.pop('_metrics_started', None)
        if started is None:
            return response
        endpoint = request.endpoint or 'unknown'
        try:
            api_request_seconds.labels(method=request.method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
            api_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=response.status_code
            ).inc()
        except ValueError as e:
            app.logger.warning(f"Failed to record metrics: {e}")
        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus scrape endpoint (unauthenticated)."""
    return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)
