"""
Payments demo service.

A small FastAPI service (health, orders, payments) instrumented with
OpenTelemetry tracing, structured JSON logs and Prometheus metrics.
"""

__version__ = "1.0.0"
__author__ = "Payments Platform Team"
