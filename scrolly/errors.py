# cpi_scrolly/scrolly/errors.py
"""Failure conditions raised while swapping charts for a scroll step.

Every condition below is caught at the top of
:meth:`scrolly.synchronizer.ChartSynchronizer.activate` and logged; none of
them ever reaches the step detector or the reader.
"""

from __future__ import annotations


class ChartSyncError(Exception):
    """Base class for recoverable chart synchronisation failures."""

    def __init__(self, message: str, *, step_index: object = None, identifier: str | None = None):
        super().__init__(message)
        self.step_index = step_index
        self.identifier = identifier


class MissingArtifactMapping(ChartSyncError):
    """The step index has no entry in the step table."""


class TransportFailure(ChartSyncError):
    """Retrieval of the chart artifact returned a non-success status."""

    def __init__(self, message: str, *, status: int, step_index: object = None, identifier: str | None = None):
        super().__init__(message, step_index=step_index, identifier=identifier)
        self.status = status


class DecodeFailure(ChartSyncError):
    """The retrieved body is not valid JSON."""


class RenderFailure(ChartSyncError):
    """The rendering surface rejected the chart specification."""


__all__ = [
    "ChartSyncError",
    "DecodeFailure",
    "MissingArtifactMapping",
    "RenderFailure",
    "TransportFailure",
]
