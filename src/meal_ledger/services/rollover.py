from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from meal_ledger.models import MonthlyLedger, Student

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    ledger: MonthlyLedger
    added_ids: tuple[str, ...] = ()
    renamed_ids: tuple[str, ...] = ()
    source_found: bool = True

    @property
    def changed(self) -> bool:
        return bool(self.added_ids or self.renamed_ids)


def seed_from_previous(previous: MonthlyLedger, template: MonthlyLedger) -> MonthlyLedger:
    """Start ``template``'s month from ``previous``: same metadata and roster, no marks."""
    logger.info(
        "Copying roster from %s/%s into %s/%s",
        previous.month + 1,
        previous.year,
        template.month + 1,
        template.year,
    )
    return replace(
        template,
        school_name=previous.school_name,
        class_name=previous.class_name,
        teacher_name=previous.teacher_name,
        location=previous.location,
        standard_meals=previous.standard_meals,
        students=tuple(Student(id=student.id, name=student.name, meals={}) for student in previous.students),
        updated_at=None,
    )


def sync_from_previous(current: MonthlyLedger, previous: MonthlyLedger | None) -> SyncResult:
    """Merge names and missing students from ``previous`` without touching current marks."""
    if previous is None:
        return SyncResult(ledger=current, source_found=False)

    students = list(current.students)
    positions = {student.id: index for index, student in enumerate(students)}
    added: list[str] = []
    renamed: list[str] = []

    for prior in previous.students:
        index = positions.get(prior.id)
        if index is None:
            positions[prior.id] = len(students)
            students.append(Student(id=prior.id, name=prior.name, meals={}))
            added.append(prior.id)
            continue
        if students[index].name != prior.name:
            renamed.append(prior.id)
        students[index] = replace(students[index], name=prior.name)

    logger.info("Roster sync: %d added, %d renamed", len(added), len(renamed))
    return SyncResult(
        ledger=current.with_students(students),
        added_ids=tuple(added),
        renamed_ids=tuple(renamed),
    )
