"""Medication compliance rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..types import Urgency

DEFAULT_COMPLIANCE_THRESHOLD = 80.0
HIGH_URGENCY_COMPLIANCE_BELOW = 50.0
HIGH_URGENCY_EXPIRY_WITHIN_DAYS = 3


@dataclass(frozen=True)
class DoseRecord:
    animal_id: int
    status: str


@dataclass(frozen=True)
class ComplianceShortfall:
    animal_id: int
    compliance_percentage: int
    missed_doses: int


def compliance_urgency(compliance_percentage: float) -> Urgency:
    if compliance_percentage < HIGH_URGENCY_COMPLIANCE_BELOW:
        return Urgency.HIGH
    return Urgency.MEDIUM


def expiry_urgency(days_until_expiry: int) -> Urgency:
    if days_until_expiry <= HIGH_URGENCY_EXPIRY_WITHIN_DAYS:
        return Urgency.HIGH
    return Urgency.MEDIUM


def find_low_compliance(
    records: Iterable[DoseRecord],
    threshold: float = DEFAULT_COMPLIANCE_THRESHOLD,
) -> list[ComplianceShortfall]:
    """Return animals whose administered/total dose ratio is below `threshold` percent."""
    totals: dict[int, list[int]] = {}
    for record in records:
        counts = totals.setdefault(record.animal_id, [0, 0])
        counts[0] += 1
        if record.status == "administered":
            counts[1] += 1

    shortfalls: list[ComplianceShortfall] = []
    for animal_id in sorted(totals):
        total, administered = totals[animal_id]
        percentage = administered / total * 100
        if percentage < threshold:
            shortfalls.append(
                ComplianceShortfall(
                    animal_id=animal_id,
                    compliance_percentage=round(percentage),
                    missed_doses=total - administered,
                )
            )
    return shortfalls
