import os
from pathlib import Path

# Environment overrides for artifacts and logging.
ENV_OUTPUT_DIR = "SCHULWEG_OUTPUT_DIR"
ENV_LOG_LEVEL = "SCHULWEG_LOG_LEVEL"
ENV_LOG_JSON = "SCHULWEG_LOG_JSON"

DEFAULT_OUTPUT_DIR = Path.cwd() / "antraege"

# Fixed label text printed on the request document.
TITLE = "Schülerbeförderungsantrag"
SINGLE_HEADERS = ("Tag", "Abfahrt Haltestelle", "Ankunft Schule", "Abfahrt Schule", "Ankunft Haltestelle")
GROUP_HEADERS = ("Tag", "Hinfahrt", "Rückfahrt")
STUDENT_LABEL = "Name des Schülers / der Schülerin"
ADDRESS_LABEL = "Anschrift"
GROUP_LABEL = "Gruppe(n)"
HEADCOUNT_LABEL = "Anzahl Schüler/innen"
RESPONSIBLE_LABEL = "Verantwortliche Person"
GUARDIAN_SIGNATURE = "Datum, Unterschrift Erziehungsberechtigte/r"
SCHOOL_SIGNATURE = "Stempel und Unterschrift der Schule"

MISSING_TIME = "-"
MISSING_GROUP_TIME = "--:--"
MISSING_LOCATION = "N/A"
MORNING_PLACEHOLDER = "Vormittag"
AFTERNOON_PLACEHOLDER = "Nachmittag"
DEPART_LABEL = "Abfahrt"
ARRIVE_LABEL = "Ankunft"

FILE_PREFIX = "Antrag"
GROUP_FILE_PREFIX = "Antrag_Gruppe"
MORE_SUFFIX = "_und_weitere"
FALLBACK_GROUP = "Unbenannt"
FALLBACK_LAST_NAME = "Name"
FALLBACK_FIRST_NAME = "Vorname"

# Page geometry in mm (A4 portrait).
PAGE_MARGIN = 14
TITLE_Y = 22
HEADER_START_Y = 40
LINE_STEP = 5
TABLE_GAP = 5
BOTTOM_MARGIN = 20
SIGNATURE_BLOCK_HEIGHT = 20
SIGNATURE_GAP = 20
SIGNATURE_TOP_Y = 30
SIGNATURE_LINE_LENGTH = 85
GROUP_DAY_COLUMN_WIDTH = 30

TITLE_SIZE = 18
HEADER_SIZE = 12
TABLE_SIZE = 9
SECONDARY_SIZE = 8
SIGNATURE_SIZE = 10

PALETTE = {
    "header_fill": (30, 58, 138),
    "header_text": (255, 255, 255),
    "ink": (0, 0, 0),
    "muted": (100, 116, 139),
}


def resolve_output_dir() -> Path:
    """
    Directory for saved PDFs. The env var wins so deployments can point
    exports at a shared folder.
    """
    env_path = os.getenv(ENV_OUTPUT_DIR, "").strip()
    if env_path:
        return Path(env_path)
    return DEFAULT_OUTPUT_DIR


def resolve_log_settings() -> tuple[bool, str]:
    json_output = os.getenv(ENV_LOG_JSON, "").strip().lower() in {"1", "true", "yes"}
    log_level = os.getenv(ENV_LOG_LEVEL, "").strip() or "INFO"
    return json_output, log_level
