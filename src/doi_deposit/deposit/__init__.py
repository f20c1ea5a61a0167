"""
Single deposit attempts.
"""

from .deposit_executor import DepositExecutor

__all__ = ["DepositExecutor"]
