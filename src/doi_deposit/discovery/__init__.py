"""
Discovery of objects waiting for DOI registration.
"""

from .object_discoverer import ObjectDiscoverer

__all__ = ["ObjectDiscoverer"]
