"""
Configuration for the DOI deposit job.
"""

from .config_loader import DepositConfig

__all__ = ["DepositConfig"]
