"""
Health monitoring: status flags, the bot canary, the composite health
report and the periodic audit.
"""

from .aggregator import HealthReport, HealthSignals, check_health
from .audit import audit_data, run_audit
from .canary import HealthCheckCanary
from .flags import LivenessFlag, StatusFlag
from .monitor import HealthMonitor

__all__ = [
    "StatusFlag",
    "LivenessFlag",
    "HealthCheckCanary",
    "HealthReport",
    "HealthSignals",
    "check_health",
    "HealthMonitor",
    "audit_data",
    "run_audit",
]
