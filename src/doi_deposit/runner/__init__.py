"""
Runner module for orchestrating a deposit run.
"""

from .deposit_runner import DepositRunner

__all__ = ["DepositRunner"]
