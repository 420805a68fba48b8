import streamlit as st

from schulweg.config import TITLE
from schulweg.errors import ExportError
from schulweg.export import derive_file_name, render_request_pdf, user_message
from schulweg.export_queue import ExportQueue
from schulweg.layout import render_group, render_mode_bar, render_schedule, render_students
from schulweg.logging import get_logger, setup_logging
from schulweg.model import RequestMode, add_entry, add_student, new_request, remove_entry, remove_student
from schulweg.preview import rows_to_frame
from schulweg.rows import build_rows

# =========================================================
# CONFIG
# =========================================================
st.set_page_config(page_title=TITLE, layout="centered")
setup_logging()
log = get_logger("schulweg.app")

REQUEST_KEY = "antrag_request"
IN_FLIGHT_KEY = "antrag_generating"
PDF_KEY = "antrag_pdf"
NAME_KEY = "antrag_pdf_name"
SIG_KEY = "antrag_pdf_sig"
JOB_KEY = "antrag_job"
QUEUE_KEY = "antrag_export_queue"


def get_export_queue() -> ExportQueue:
    # Per browser session: the in-flight flag belongs to this form only.
    if QUEUE_KEY not in st.session_state:
        st.session_state[QUEUE_KEY] = ExportQueue()
    return st.session_state[QUEUE_KEY]


# =========================================================
# STATE HELPERS
# =========================================================
if REQUEST_KEY not in st.session_state:
    st.session_state[REQUEST_KEY] = new_request()
if IN_FLIGHT_KEY not in st.session_state:
    st.session_state[IN_FLIGHT_KEY] = False


def _add_entry() -> None:
    st.session_state[REQUEST_KEY] = add_entry(st.session_state[REQUEST_KEY])


def _remove_entry(entry_id: str) -> None:
    st.session_state[REQUEST_KEY] = remove_entry(st.session_state[REQUEST_KEY], entry_id)


def _add_student() -> None:
    st.session_state[REQUEST_KEY] = add_student(st.session_state[REQUEST_KEY])


def _remove_student(student_id: str) -> None:
    st.session_state[REQUEST_KEY] = remove_student(st.session_state[REQUEST_KEY], student_id)


# =========================================================
# FORM
# =========================================================
st.title(TITLE)
st.caption("Füllen Sie das folgende Formular aus, um den Transportbedarf zu melden.")

request = render_mode_bar(st.session_state[REQUEST_KEY])
if request.mode == RequestMode.GROUP:
    request = render_group(request)
else:
    request = render_students(request, on_add=_add_student, on_remove=_remove_student)
request = render_schedule(request, on_add=_add_entry, on_remove=_remove_entry)
st.session_state[REQUEST_KEY] = request

row_set = build_rows(request)
with st.expander("Vorschau der Tabelle", expanded=False):
    st.dataframe(rows_to_frame(row_set), width="stretch", hide_index=True)

# =========================================================
# EXPORT
# =========================================================
# A generated PDF belongs to the form state it was built from.
signature = request.cache_key()
if st.session_state.get(SIG_KEY) != signature:
    st.session_state[SIG_KEY] = signature
    st.session_state.pop(PDF_KEY, None)
    st.session_state.pop(NAME_KEY, None)

generate_clicked = st.button(
    "PDF erstellen",
    type="primary",
    disabled=st.session_state[IN_FLIGHT_KEY],
    width="stretch",
)

if generate_clicked and not st.session_state[IN_FLIGHT_KEY]:
    st.session_state[IN_FLIGHT_KEY] = True
    try:
        with st.status("PDF wird erstellt...", expanded=False):
            st.session_state[PDF_KEY] = render_request_pdf(request)
            st.session_state[NAME_KEY] = derive_file_name(request)
    except ExportError as exc:
        log.error("export_failed", error=str(exc), kind=type(exc).__name__)
        st.error(user_message(exc))
    finally:
        st.session_state[IN_FLIGHT_KEY] = False

if isinstance(st.session_state.get(PDF_KEY), bytes):
    st.download_button(
        "PDF herunterladen",
        st.session_state[PDF_KEY],
        st.session_state.get(NAME_KEY, "Antrag.pdf"),
        "application/pdf",
        width="stretch",
    )

# Server-side copy goes through the export queue; one job at a time.
queue = get_export_queue()
if st.button("Im Ablageordner speichern", disabled=queue.in_flight()):
    job_id = queue.submit(request)
    if job_id is None:
        st.warning("Es wird bereits ein Antrag gespeichert.")
    else:
        st.session_state[JOB_KEY] = job_id

job_id = st.session_state.get(JOB_KEY)
job = queue.get(job_id) if job_id else None
if job is not None:
    if job.status in {"queued", "running"}:
        st.info("Antrag wird gespeichert...")
    elif job.status == "completed":
        st.success(f"Gespeichert unter {job.result_path}")
    else:
        st.error(job.error or "Speichern fehlgeschlagen.")

st.markdown(
    "<div style='text-align:center;color:#64748b;font-size:0.85rem;margin-top:2rem'>"
    "Beförderungsdienst. Alle Rechte vorbehalten."
    "</div>",
    unsafe_allow_html=True,
)
