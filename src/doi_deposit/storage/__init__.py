"""
Storage implementations for transient documents and run logs.
"""

from .transient_files import LocalTransientStorage
from .run_log_sink import JsonlRunLogSink, NullRunLogSink

__all__ = ["LocalTransientStorage", "JsonlRunLogSink", "NullRunLogSink"]
