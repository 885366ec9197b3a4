"""HTTP API: event ingestion, manual sweeps, health and metrics."""

from threadwarden.api.app import create_app

__all__ = ["create_app"]
