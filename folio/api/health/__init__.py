"""Liveness and readiness probes."""

from folio.api.health.resources import HealthResource, ReadyResource

__all__ = ["HealthResource", "ReadyResource"]
