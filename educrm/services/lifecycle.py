"""Pure display logic for applications.

Functions accept either ``ApplicationRead`` objects or raw records (mappings)
as returned by the collaborator, where stage flags may use the wire names
``Application_stage`` / ``Interview`` / ``Visa_process`` and 0/1 values.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from educrm.schemas.application import ApplicationFilter, FilterOptions, Stage, VerificationStatus


T = TypeVar("T")

BADGE_VISA = "Visa Process"
BADGE_INTERVIEW = "Interview Stage"
BADGE_APPLICATION = "Application Stage"
BADGE_NONE = "N/A"

# Later pipeline stages win.
_BADGE_PRIORITY: tuple[tuple[str, str], ...] = (
    ("visa_process", BADGE_VISA),
    ("interview", BADGE_INTERVIEW),
    ("application_stage", BADGE_APPLICATION),
)

_WIRE_NAMES = {
    "application_stage": "Application_stage",
    "interview": "Interview",
    "visa_process": "Visa_process",
}


def _get(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        wire = _WIRE_NAMES.get(name)
        return record.get(wire) if wire else None
    return getattr(record, name, None)


def derive_status_badge(application: Any) -> str:
    for flag, label in _BADGE_PRIORITY:
        if _get(application, flag):
            return label
    return BADGE_NONE


def next_verification_status(current: Any) -> VerificationStatus:
    if int(current or 0) == VerificationStatus.VERIFIED:
        return VerificationStatus.PENDING
    return VerificationStatus.VERIFIED


def matches_filter(application: Any, flt: ApplicationFilter) -> bool:
    if flt.university is not None and _get(application, "university_name") != flt.university:
        return False
    if flt.student is not None and _get(application, "student_name") != flt.student:
        return False
    if flt.travel_insurance is not None and bool(_get(application, "travel_insurance")) != flt.travel_insurance:
        return False
    if flt.stage is not None and not _get(application, Stage(flt.stage).flag):
        return False
    return True


def filter_applications(applications: Iterable[T], flt: ApplicationFilter | None = None) -> list[T]:
    applications = list(applications)
    if flt is None or flt.is_empty():
        return applications
    return [a for a in applications if matches_filter(a, flt)]


def filter_options(applications: Iterable[Any]) -> FilterOptions:
    universities: set[str] = set()
    students: set[str] = set()
    for a in applications:
        university = _get(a, "university_name")
        if university:
            universities.add(university)
        student = _get(a, "student_name")
        if student:
            students.add(student)
    return FilterOptions(universities=sorted(universities), students=sorted(students))
