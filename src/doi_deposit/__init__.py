"""
DOI deposit: scheduled registration of DOIs with a registration authority.
"""

__version__ = "1.0.0"
