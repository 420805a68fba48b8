"""
Pupil transport request forms rendered to a printable PDF.

Data flows one way: request model -> row builder -> document composer ->
export driver -> PDF backend.
"""

from .compose import compose
from .errors import BackendUnavailable, DrawingFailure, ExportError, ProgrammingError
from .export import ExportResult, derive_file_name, export_request, render_request_pdf
from .model import (
    WEEKDAYS,
    GroupInfo,
    RequestMode,
    ScheduleEntry,
    SplitScheduleEntry,
    Student,
    TransportRequest,
    TripLegs,
)
from .rows import RowSet, build_rows

__all__ = [
    "WEEKDAYS",
    "BackendUnavailable",
    "DrawingFailure",
    "ExportError",
    "ExportResult",
    "GroupInfo",
    "ProgrammingError",
    "RequestMode",
    "RowSet",
    "ScheduleEntry",
    "SplitScheduleEntry",
    "Student",
    "TransportRequest",
    "TripLegs",
    "build_rows",
    "compose",
    "derive_file_name",
    "export_request",
    "render_request_pdf",
]
