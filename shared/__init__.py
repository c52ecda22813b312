"""
Shared utilities for the CRUD services.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- tracing: OpenTelemetry bootstrap and auto-instrumentation
- errors: Canonical error types and responses
- database: asyncpg pool ownership and driver error translation
- base_service: FastAPI app skeleton with health, metrics and error handlers

Do not import from service_* packages into shared/.
"""
