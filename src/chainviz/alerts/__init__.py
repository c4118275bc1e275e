"""
Error Sinks

Exports:
- ErrorSink: notification interface used for soft failures
- LoggingErrorSink: logs every message
- SnackbarErrorSink: bounded, duplicate-free message list for display
"""

from src.chainviz.alerts.notifier import ErrorSink, LoggingErrorSink, SnackbarErrorSink

__all__ = ["ErrorSink", "LoggingErrorSink", "SnackbarErrorSink"]
