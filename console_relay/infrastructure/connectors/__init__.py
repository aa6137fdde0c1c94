"""
Destination connector implementations.
"""

from .stats import ConnectionStats, ConnectorStats
from .tcp import TCPConnector, TCPDestination

__all__ = [
    "ConnectionStats",
    "ConnectorStats",
    "TCPConnector",
    "TCPDestination",
]
