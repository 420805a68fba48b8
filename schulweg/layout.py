from dataclasses import replace
from typing import Callable, Sequence, Tuple

import streamlit as st

from .model import (
    WEEKDAYS,
    GroupInfo,
    RequestMode,
    TransportRequest,
    TripLegs,
    add_student,
    known_locations,
    set_split,
    update_entry,
    update_student,
)

MODE_LABELS = {RequestMode.SINGLE: "Einzelantrag", RequestMode.GROUP: "Gruppenantrag"}

# (time label, location label, time field, location field, placeholder)
LEG_FIELDS: Tuple[Tuple[str, str, str, str, str], ...] = (
    ("Abfahrt Hst.", "Ort Haltestelle", "departure_stop", "departure_stop_location", "Haltestelle"),
    ("Ankunft Schule", "Ort Schule", "arrival_school", "arrival_school_location", "Schule"),
    ("Abfahrt Schule", "Ort Schule", "departure_school", "departure_school_location", "Schule"),
    ("Ankunft Hst.", "Ort Haltestelle", "arrival_stop", "arrival_stop_location", "Haltestelle"),
)


def _suggestions_help(known: Sequence[str]) -> str | None:
    if not known:
        return None
    return "Bereits verwendet: " + ", ".join(known)


def render_mode_bar(request: TransportRequest) -> TransportRequest:
    """
    Request type and schedule shape. Switching the shape converts existing
    entries instead of dropping them.
    """
    modes = list(MODE_LABELS)
    mode = st.radio(
        "Antragsart",
        modes,
        index=modes.index(RequestMode(request.mode)),
        format_func=MODE_LABELS.get,
        horizontal=True,
        key="mode",
    )
    split = st.toggle("Vormittag und Nachmittag getrennt erfassen", value=request.is_split(), key="split")
    request = set_split(replace(request, mode=mode), split)
    if mode == RequestMode.SINGLE and not request.students:
        request = add_student(request)
    return request


def render_students(
    request: TransportRequest,
    on_add: Callable[[], None],
    on_remove: Callable[[str], None],
) -> TransportRequest:
    st.subheader("Angaben zum Schüler / zur Schülerin")
    for student in request.students:
        with st.container(border=True):
            c1, c2 = st.columns(2)
            first = c1.text_input("Vorname", value=student.first_name, placeholder="Max", key=f"{student.id}_first")
            last = c2.text_input("Name", value=student.last_name, placeholder="Mustermann", key=f"{student.id}_last")
            street = st.text_input("Straße und Hausnummer", value=student.street, key=f"{student.id}_street")
            c3, c4 = st.columns([1, 2])
            zip_code = c3.text_input("PLZ", value=student.zip_code, key=f"{student.id}_zip")
            city = c4.text_input("Ort", value=student.city, key=f"{student.id}_city")
            if len(request.students) > 1:
                st.button("Schüler/in entfernen", key=f"{student.id}_remove", on_click=on_remove, args=(student.id,))
        request = update_student(
            request,
            student.id,
            first_name=first,
            last_name=last,
            street=street,
            zip_code=zip_code,
            city=city,
        )
    st.button("Weitere/n Schüler/in hinzufügen", on_click=on_add, key="add_student")
    return request


def render_group(request: TransportRequest) -> TransportRequest:
    st.subheader("Angaben zur Gruppe")
    group = request.group
    names_raw = st.text_input(
        "Klassen / Gruppen (kommagetrennt)",
        value=", ".join(group.names),
        placeholder="3b, 4a",
        key="group_names",
    )
    headcount = st.number_input(
        "Anzahl Schüler/innen",
        min_value=0,
        step=1,
        value=group.headcount,
        key="group_headcount",
    )
    responsible = st.text_input("Verantwortliche Person", value=group.responsible, key="group_responsible")
    names = tuple(n.strip() for n in names_raw.split(",") if n.strip())
    info = GroupInfo(
        names=names,
        headcount=int(headcount) if headcount is not None else None,
        responsible=responsible,
    )
    return replace(request, group=info)


def _render_legs(legs: TripLegs, key_prefix: str, known: Sequence[str]) -> TripLegs:
    changes = {}
    for col, (time_label, loc_label, time_field, loc_field, placeholder) in zip(st.columns(4), LEG_FIELDS):
        with col:
            changes[time_field] = st.time_input(
                time_label,
                value=getattr(legs, time_field),
                step=300,
                key=f"{key_prefix}_{time_field}",
            )
            changes[loc_field] = st.text_input(
                loc_label,
                value=getattr(legs, loc_field),
                placeholder=placeholder,
                help=_suggestions_help(known),
                key=f"{key_prefix}_{loc_field}",
            )
    return TripLegs(**changes)


def render_schedule(
    request: TransportRequest,
    on_add: Callable[[], None],
    on_remove: Callable[[str], None],
) -> TransportRequest:
    st.subheader("Fahrzeiten")
    known = known_locations(request)
    for entry in request.entries:
        # Days already picked above in this run are no longer offered.
        taken = {e.day for e in request.entries if e.id != entry.id}
        options = [d for d in WEEKDAYS if d not in taken]
        index = options.index(entry.day) if entry.day in options else 0
        with st.container(border=True):
            head, remove = st.columns([4, 1])
            day = head.selectbox("Wochentag", options, index=index, key=f"{entry.id}_day")
            if len(request.entries) > 1:
                remove.button("Entfernen", key=f"{entry.id}_remove", on_click=on_remove, args=(entry.id,))
            if entry.split:
                st.caption("Vormittag")
                morning = _render_legs(entry.morning, f"{entry.id}_am", known)
                st.caption("Nachmittag")
                afternoon = _render_legs(entry.afternoon, f"{entry.id}_pm", known)
                request = update_entry(request, entry.id, day=day, morning=morning, afternoon=afternoon)
            else:
                legs = _render_legs(entry.legs, entry.id, known)
                request = update_entry(request, entry.id, day=day, legs=legs)
    st.button(
        "Weiteren Tag hinzufügen",
        on_click=on_add,
        disabled=len(request.entries) >= len(WEEKDAYS),
        key="add_entry",
    )
    return request
