import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .compose import DrawingSurface, compose
from .config import (
    FALLBACK_FIRST_NAME,
    FALLBACK_GROUP,
    FALLBACK_LAST_NAME,
    FILE_PREFIX,
    GROUP_FILE_PREFIX,
    MORE_SUFFIX,
    resolve_output_dir,
)
from .errors import BackendUnavailable, DrawingFailure, ExportError, ProgrammingError
from .logging import get_logger
from .model import RequestMode, TransportRequest
from .pdf import FpdfSurface, save_pdf
from .rows import build_rows

log = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")
_PATH_UNSAFE = re.compile(r"[/\\\x00]")


def _safe_part(text: str) -> str:
    # Typed names become part of a file name; they must never add path segments.
    return _PATH_UNSAFE.sub("_", text).lstrip(".") or "_"


@dataclass(frozen=True)
class ExportResult:
    file_name: str
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def derive_file_name(request: TransportRequest) -> str:
    """
    File name for the exported PDF. Pure: the same request always gives
    the same name.
    """
    if request.mode == RequestMode.GROUP:
        names = request.group.clean_names()
        if names:
            base = names[0] + (MORE_SUFFIX if len(names) > 1 else "")
        else:
            base = FALLBACK_GROUP
        return f"{GROUP_FILE_PREFIX}_{_safe_part(_WHITESPACE.sub('_', base))}.pdf"

    if request.mode == RequestMode.SINGLE:
        first = request.students[0] if request.students else None
        last_name = (first.last_name.strip() if first else "") or FALLBACK_LAST_NAME
        first_name = (first.first_name.strip() if first else "") or FALLBACK_FIRST_NAME
        suffix = MORE_SUFFIX if len(request.students) > 1 else ""
        return f"{FILE_PREFIX}_{_safe_part(last_name)}_{_safe_part(first_name)}{suffix}.pdf"

    raise ProgrammingError(f"Unknown request mode: {request.mode!r}")


def user_message(exc: Exception) -> str:
    return f"Ein Fehler ist aufgetreten: {exc}. Bitte versuchen Sie es später erneut."


def _target_path(output_dir: Path, file_name: str) -> Path:
    base = Path(output_dir).resolve()
    target = (base / file_name).resolve()
    if target.parent != base:
        raise DrawingFailure(f"Der Dateiname {file_name} liegt außerhalb des Ablageordners")
    return target


def render_request_pdf(
    request: TransportRequest,
    surface_factory: Callable[[], DrawingSurface] = FpdfSurface,
) -> bytes:
    """
    Build rows, compose them onto a fresh surface and return the PDF bytes.
    Backend and drawing problems come out as ExportError subclasses;
    precondition violations propagate as ProgrammingError.
    """
    row_set = build_rows(request)

    try:
        surface = surface_factory()
    except ExportError:
        raise
    except Exception as exc:
        raise BackendUnavailable(f"Das PDF-Dokument konnte nicht angelegt werden ({exc})") from exc

    try:
        compose(request, row_set, surface)
        return surface.output()
    except ExportError:
        raise
    except Exception as exc:
        raise DrawingFailure(f"Die PDF-Erstellung ist fehlgeschlagen ({exc})") from exc


def export_request(
    request: TransportRequest,
    output_dir: Optional[Path] = None,
    surface_factory: Callable[[], DrawingSurface] = FpdfSurface,
) -> ExportResult:
    """
    Render the request and save it under its derived name. Failures are
    reported once through ExportResult.error; nothing is written unless the
    whole document was produced.
    """
    file_name = derive_file_name(request)
    log.info("export_started", file_name=file_name, mode=RequestMode(request.mode).value, entries=len(request.entries))

    try:
        target = _target_path(output_dir or resolve_output_dir(), file_name)
        pdf_bytes = render_request_pdf(request, surface_factory)
    except ExportError as exc:
        log.error("export_failed", file_name=file_name, error=str(exc), kind=type(exc).__name__)
        return ExportResult(file_name=file_name, error=user_message(exc))

    try:
        path = save_pdf(pdf_bytes, target)
    except OSError as exc:
        if target.is_file():
            target.unlink()
        failure = DrawingFailure(f"Die Datei {file_name} konnte nicht gespeichert werden ({exc})")
        log.error("export_failed", file_name=file_name, error=str(failure), kind=type(failure).__name__)
        return ExportResult(file_name=file_name, error=user_message(failure))

    log.info("export_saved", path=str(path), size=len(pdf_bytes))
    return ExportResult(file_name=file_name, path=path)
