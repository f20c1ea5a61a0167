"""
HTTP transports.
"""

from .datacite_transport import DataciteHttpTransport, API_URL, TEST_API_URL

__all__ = ["DataciteHttpTransport", "API_URL", "TEST_API_URL"]
