"""Error hierarchy for request export.

ExportError subclasses are user-reportable and carry a readable message.
ProgrammingError marks a broken precondition and is never swallowed by the
export driver.
"""


class ExportError(Exception):
    """Base exception for failures the user should see once."""

    pass


class BackendUnavailable(ExportError):
    """The PDF backend (fpdf2) or its table support cannot be used.

    Fatal for the current export. No retry.
    """

    pass


class DrawingFailure(ExportError):
    """Any exception raised while issuing drawing calls or writing the file.

    The original exception is chained as __cause__.
    """

    pass


class ProgrammingError(Exception):
    """Request violates a precondition (unknown mode, empty schedule, duplicate weekday)."""

    pass
