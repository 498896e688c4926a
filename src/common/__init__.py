"""Shared logging and telemetry utilities."""
