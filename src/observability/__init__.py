"""Observability for the RIM Agent Host (OpenTelemetry metrics)."""
