import hashlib
import uuid
from dataclasses import dataclass, field, replace
from datetime import time
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import ProgrammingError
from .logging import get_logger

log = get_logger(__name__)

WEEKDAYS: Tuple[str, ...] = ("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag")


class RequestMode(str, Enum):
    SINGLE = "single"
    GROUP = "group"


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def parse_time(value) -> Optional[time]:
    """
    Parse 'HH:MM' (24h) into a time. Blank input means "not set" and
    returns None; anything else malformed raises ValueError.
    """
    if value is None or isinstance(value, time):
        return value
    text = str(value).strip()
    if not text:
        return None
    parts = text.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {value!r}")
    h = int(parts[0])
    m = int(parts[1])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {value!r}")
    return time(h, m)


def format_time(value: Optional[time]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class Student:
    id: str = field(default_factory=new_id)
    first_name: str = ""
    last_name: str = ""
    street: str = ""
    zip_code: str = ""
    city: str = ""

    def is_empty(self) -> bool:
        values = (self.first_name, self.last_name, self.street, self.zip_code, self.city)
        return not any(v.strip() for v in values)

    def display_name(self) -> str:
        return f"{self.first_name.strip() or 'N/A'} {self.last_name.strip() or 'N/A'}"

    def address_line(self) -> str:
        town = " ".join(p for p in (self.zip_code.strip(), self.city.strip()) if p)
        return ", ".join(p for p in (self.street.strip(), town) if p)


@dataclass(frozen=True)
class TripLegs:
    """The four legs of one school day: stop -> school -> school -> stop."""

    departure_stop: Optional[time] = None
    departure_stop_location: str = ""
    arrival_school: Optional[time] = None
    arrival_school_location: str = ""
    departure_school: Optional[time] = None
    departure_school_location: str = ""
    arrival_stop: Optional[time] = None
    arrival_stop_location: str = ""

    def times(self) -> Tuple[Optional[time], ...]:
        return (self.departure_stop, self.arrival_school, self.departure_school, self.arrival_stop)

    def locations(self) -> Tuple[str, ...]:
        return (
            self.departure_stop_location,
            self.arrival_school_location,
            self.departure_school_location,
            self.arrival_stop_location,
        )


@dataclass(frozen=True)
class ScheduleEntry:
    day: str
    legs: TripLegs = field(default_factory=TripLegs)
    id: str = field(default_factory=new_id)

    @property
    def split(self) -> bool:
        return False

    def all_legs(self) -> Tuple[TripLegs, ...]:
        return (self.legs,)


@dataclass(frozen=True)
class SplitScheduleEntry:
    """Entry with separate morning and afternoon sessions."""

    day: str
    morning: TripLegs = field(default_factory=TripLegs)
    afternoon: TripLegs = field(default_factory=TripLegs)
    id: str = field(default_factory=new_id)

    @property
    def split(self) -> bool:
        return True

    def all_legs(self) -> Tuple[TripLegs, ...]:
        return (self.morning, self.afternoon)


Entry = Union[ScheduleEntry, SplitScheduleEntry]


@dataclass(frozen=True)
class GroupInfo:
    names: Tuple[str, ...] = ()
    headcount: Optional[int] = None
    responsible: str = ""

    def clean_names(self) -> Tuple[str, ...]:
        return tuple(n.strip() for n in self.names if n and n.strip())


@dataclass(frozen=True)
class TransportRequest:
    """
    Immutable snapshot of one export. The form produces a new snapshot on
    every edit; the row builder and composer only ever read it.
    """

    mode: RequestMode
    entries: Tuple[Entry, ...]
    students: Tuple[Student, ...] = ()
    group: GroupInfo = field(default_factory=GroupInfo)

    def is_split(self) -> bool:
        return bool(self.entries) and self.entries[0].split

    def validate(self) -> None:
        if self.mode not in (RequestMode.SINGLE, RequestMode.GROUP):
            raise ProgrammingError(f"Unknown request mode: {self.mode!r}")
        if not self.entries:
            raise ProgrammingError("Request has no schedule entries.")
        if len(self.entries) > len(WEEKDAYS):
            raise ProgrammingError(f"Request has {len(self.entries)} entries, at most {len(WEEKDAYS)} allowed.")
        days = [e.day for e in self.entries]
        unknown = [d for d in days if d not in WEEKDAYS]
        if unknown:
            raise ProgrammingError(f"Unknown weekday(s): {', '.join(unknown)}")
        if len(set(days)) != len(days):
            raise ProgrammingError("Each weekday may appear only once.")

    def cache_key(self) -> str:
        """Stable identifier for this snapshot; changes whenever any field does."""
        return hashlib.sha256(repr(self).encode("utf-8")).hexdigest()[:16]


def blank_entry(day: str, split: bool = False) -> Entry:
    if split:
        return SplitScheduleEntry(day=day)
    return ScheduleEntry(day=day)


def new_request(mode: RequestMode = RequestMode.SINGLE, split: bool = False) -> TransportRequest:
    students = (Student(),) if mode == RequestMode.SINGLE else ()
    return TransportRequest(mode=mode, entries=(blank_entry(WEEKDAYS[0], split),), students=students)


def add_entry(request: TransportRequest) -> TransportRequest:
    """
    Append a blank entry for the first unused weekday. Once all weekdays
    are taken the request comes back unchanged.
    """
    used = {e.day for e in request.entries}
    available = [d for d in WEEKDAYS if d not in used]
    if not available:
        log.warning("entry_limit_reached", entries=len(request.entries))
        return request
    entry = blank_entry(available[0], request.is_split())
    return replace(request, entries=request.entries + (entry,))


def remove_entry(request: TransportRequest, entry_id: str) -> TransportRequest:
    if len(request.entries) <= 1:
        return request
    return replace(request, entries=tuple(e for e in request.entries if e.id != entry_id))


def update_entry(request: TransportRequest, entry_id: str, **changes) -> TransportRequest:
    day = changes.get("day")
    if day is not None:
        if day not in WEEKDAYS:
            raise ProgrammingError(f"Unknown weekday: {day!r}")
        if any(e.day == day and e.id != entry_id for e in request.entries):
            raise ProgrammingError(f"Weekday {day} is already scheduled.")
    entries = tuple(replace(e, **changes) if e.id == entry_id else e for e in request.entries)
    return replace(request, entries=entries)


def set_split(request: TransportRequest, split: bool) -> TransportRequest:
    """
    Switch every entry between the simple and the morning/afternoon shape.
    Simple legs become the morning session and vice versa.
    """
    if all(entry.split == split for entry in request.entries):
        return request
    converted = []
    for entry in request.entries:
        if entry.split == split:
            converted.append(entry)
        elif split:
            converted.append(SplitScheduleEntry(day=entry.day, morning=entry.legs, id=entry.id))
        else:
            converted.append(ScheduleEntry(day=entry.day, legs=entry.morning, id=entry.id))
    return replace(request, entries=tuple(converted))


def add_student(request: TransportRequest) -> TransportRequest:
    return replace(request, students=request.students + (Student(),))


def remove_student(request: TransportRequest, student_id: str) -> TransportRequest:
    if len(request.students) <= 1:
        return request
    return replace(request, students=tuple(s for s in request.students if s.id != student_id))


def update_student(request: TransportRequest, student_id: str, **changes) -> TransportRequest:
    students = tuple(replace(s, **changes) if s.id == student_id else s for s in request.students)
    return replace(request, students=students)


def known_locations(request: TransportRequest) -> Tuple[str, ...]:
    """Every non-blank location typed so far, for input suggestions only."""
    found = set()
    for entry in request.entries:
        for legs in entry.all_legs():
            for loc in legs.locations():
                if loc and loc.strip():
                    found.add(loc.strip())
    return tuple(sorted(found))
