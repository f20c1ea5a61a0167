"""
Connectors package: transports to registration authorities.
"""

from .http import DataciteHttpTransport
from .test_transport import TestTransport, DepositCall

__all__ = [
    "DataciteHttpTransport",
    "TestTransport",
    "DepositCall",
]
