"""
Monitoring - External URL watch configurations.
"""

from src.monitoring.registry import MonitorCheck, MonitorRegistry

__all__ = [
    "MonitorCheck",
    "MonitorRegistry",
]
