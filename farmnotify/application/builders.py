"""Use-case builders for the notifications FarmKonnect sends.

Each builder turns typed fields into a `NotificationPayload` (subject, body,
urgency, metadata) and hands it to the injected dispatch callable. None of
them retry; wrap `dispatch` with `retry_notification_delivery` for that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping, Sequence

from ..domain.compliance import (
    DEFAULT_COMPLIANCE_THRESHOLD,
    ComplianceShortfall,
    DoseRecord,
    compliance_urgency,
    expiry_urgency,
    find_low_compliance,
)
from ..types import DispatchFn, NotificationKind, NotificationPayload, NotificationResult, Urgency


def send_appointment_reminder(
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    animal_name: str,
    farm_name: str,
    appointment_date: datetime,
    veterinarian_name: str,
    clinic_location: str,
    urgency: Urgency = Urgency.MEDIUM,
) -> NotificationResult:
    when = _format_datetime(appointment_date)
    payload = NotificationPayload(
        kind=NotificationKind.APPOINTMENT,
        subject=f"Appointment Reminder: {animal_name}",
        message=(
            f"Reminder: veterinary appointment for {animal_name} with "
            f"{veterinarian_name} on {when} at {clinic_location}. "
            "Please arrive 10 minutes early."
        ),
        animal_name=animal_name,
        farm_name=farm_name,
        urgency=urgency,
        recipient_phone=recipient_phone,
        recipient_email=recipient_email,
        metadata={
            "appointment_date": appointment_date.isoformat(),
            "veterinarian": veterinarian_name,
            "clinic_location": clinic_location,
        },
    )
    return dispatch(payload)


def send_compliance_alert(
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    animal_name: str,
    farm_name: str,
    medication_name: str,
    compliance_percentage: float,
    dosage: str,
    frequency: str,
    missed_doses: int | None = None,
) -> NotificationResult:
    if not 0 <= compliance_percentage <= 100:
        raise ValueError("compliance_percentage must be between 0 and 100")

    message = (
        f"{animal_name} has {compliance_percentage:g}% compliance for "
        f"{medication_name} ({dosage}, {frequency})."
    )
    if missed_doses:
        message = f"{message} {missed_doses} doses missed."
    metadata: dict[str, object] = {
        "medication": medication_name,
        "compliance_percentage": compliance_percentage,
        "dosage": dosage,
        "frequency": frequency,
    }
    if missed_doses is not None:
        metadata["missed_doses"] = missed_doses

    payload = NotificationPayload(
        kind=NotificationKind.COMPLIANCE,
        subject=f"Medication Compliance Alert: {animal_name}",
        message=f"{message} Please take action.",
        animal_name=animal_name,
        farm_name=farm_name,
        urgency=compliance_urgency(compliance_percentage),
        recipient_phone=recipient_phone,
        recipient_email=recipient_email,
        metadata=metadata,
    )
    return dispatch(payload)


def send_prescription_expiry_alert(
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    animal_name: str,
    farm_name: str,
    medication_name: str,
    expiry_date: date,
    days_until_expiry: int,
) -> NotificationResult:
    if days_until_expiry < 0:
        timing = f"expired {-days_until_expiry} days ago"
    elif days_until_expiry == 0:
        timing = "expires today"
    else:
        timing = f"expires in {days_until_expiry} days"

    payload = NotificationPayload(
        kind=NotificationKind.REFILL,
        subject=f"Prescription Expiry Alert: {animal_name}",
        message=(
            f"The prescription for {medication_name} for {animal_name} {timing} "
            f"({expiry_date.isoformat()}). Arrange a refill with your veterinarian."
        ),
        animal_name=animal_name,
        farm_name=farm_name,
        urgency=expiry_urgency(days_until_expiry),
        recipient_phone=recipient_phone,
        recipient_email=recipient_email,
        metadata={
            "medication": medication_name,
            "expiry_date": expiry_date.isoformat(),
            "days_until_expiry": days_until_expiry,
        },
    )
    return dispatch(payload)


def send_health_alert(
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    animal_name: str,
    farm_name: str,
    health_issue: str,
    recommended_action: str,
) -> NotificationResult:
    payload = NotificationPayload(
        kind=NotificationKind.HEALTH_ALERT,
        subject=f"Health Alert: {animal_name}",
        message=f"Health issue detected: {health_issue}. Recommended action: {recommended_action}.",
        animal_name=animal_name,
        farm_name=farm_name,
        urgency=Urgency.HIGH,
        recipient_phone=recipient_phone,
        recipient_email=recipient_email,
        metadata={"health_issue": health_issue, "recommended_action": recommended_action},
    )
    return dispatch(payload)


def send_dose_reminder(
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    animal_name: str,
    farm_name: str,
    medication_name: str,
    scheduled_time: datetime,
) -> NotificationResult:
    when = _format_datetime(scheduled_time)
    payload = NotificationPayload(
        kind=NotificationKind.PRESCRIPTION,
        subject=f"Medication Reminder: {medication_name}",
        message=(
            f"Reminder: time to administer {medication_name} to {animal_name} at {when}. "
            "Please confirm administration."
        ),
        animal_name=animal_name,
        farm_name=farm_name,
        urgency=Urgency.MEDIUM,
        recipient_phone=recipient_phone,
        recipient_email=recipient_email,
        metadata={"medication": medication_name, "scheduled_time": scheduled_time.isoformat()},
    )
    return dispatch(payload)


def check_and_send_compliance_alerts(
    records: Iterable[DoseRecord],
    dispatch: DispatchFn,
    *,
    recipient_phone: str | None,
    recipient_email: str | None,
    farm_name: str,
    medication_name: str,
    dosage: str = "as prescribed",
    frequency: str = "as scheduled",
    animal_names: Mapping[int, str] | None = None,
    threshold: float = DEFAULT_COMPLIANCE_THRESHOLD,
) -> list[tuple[ComplianceShortfall, NotificationResult]]:
    """Send a compliance alert for every animal below `threshold` percent."""
    names = animal_names or {}
    sent: list[tuple[ComplianceShortfall, NotificationResult]] = []
    for shortfall in find_low_compliance(records, threshold):
        result = send_compliance_alert(
            dispatch,
            recipient_phone=recipient_phone,
            recipient_email=recipient_email,
            animal_name=names.get(shortfall.animal_id, f"Animal {shortfall.animal_id}"),
            farm_name=farm_name,
            medication_name=medication_name,
            compliance_percentage=shortfall.compliance_percentage,
            dosage=dosage,
            frequency=frequency,
            missed_doses=shortfall.missed_doses,
        )
        sent.append((shortfall, result))
    return sent


@dataclass(frozen=True)
class FarmDoseRecords:
    """One farm's dose history and where its compliance alerts go."""

    farm_name: str
    records: Sequence[DoseRecord]
    medication_name: str
    recipient_phone: str | None = None
    recipient_email: str | None = None
    animal_names: Mapping[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BulkComplianceSummary:
    farms_notified: int
    alerts_sent: int


def send_bulk_compliance_notifications(
    farms: Iterable[FarmDoseRecords],
    dispatch: DispatchFn,
    *,
    threshold: float = DEFAULT_COMPLIANCE_THRESHOLD,
) -> BulkComplianceSummary:
    """Run the compliance check for every farm.

    A farm counts as notified when at least one alert was dispatched for it,
    whether or not delivery succeeded.
    """
    farms_notified = 0
    alerts_sent = 0
    for farm in farms:
        alerts = check_and_send_compliance_alerts(
            farm.records,
            dispatch,
            recipient_phone=farm.recipient_phone,
            recipient_email=farm.recipient_email,
            farm_name=farm.farm_name,
            medication_name=farm.medication_name,
            animal_names=farm.animal_names,
            threshold=threshold,
        )
        if alerts:
            farms_notified += 1
            alerts_sent += len(alerts)
    return BulkComplianceSummary(farms_notified=farms_notified, alerts_sent=alerts_sent)


def _format_datetime(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")
