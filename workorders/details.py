"""
Type-specific work order details.

`work_type` is a tagged union: each variant carries only the optional
fields that make sense for that kind of work. The variant is persisted as
a JSON object in `WorkOrder.details` and rebuilt on read; fields that do
not belong to the work order's type are rejected rather than stored.

    Preventive  recurrence rule and window
    Complaint   (no extra fields)
    Job         job category, service provider and contact triple
    Repair      unit number and contact triple
"""

from dataclasses import asdict, dataclass, fields
from datetime import date


class WorkType:
    """Work type constants. Fixed at creation."""
    PREVENTIVE = 'preventive'
    COMPLAINT = 'complaint'
    JOB = 'job'
    REPAIR = 'repair'

    CHOICES = [
        (PREVENTIVE, 'Preventive'),
        (COMPLAINT, 'Complaint'),
        (JOB, 'Job'),
        (REPAIR, 'Repair'),
    ]


class JobCategory:
    """Job categories offered for Job work orders."""
    MAINTENANCE = 'maintenance'
    CLEANING = 'cleaning'
    INSPECTION = 'inspection'
    INSTALLATION = 'installation'
    OTHER = 'other'

    CHOICES = [
        (MAINTENANCE, 'Maintenance'),
        (CLEANING, 'Cleaning'),
        (INSPECTION, 'Inspection'),
        (INSTALLATION, 'Installation'),
        (OTHER, 'Other'),
    ]


class RecurrenceRule:
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    QUARTERLY = 'quarterly'
    YEARLY = 'yearly'

    CHOICES = [
        (DAILY, 'Daily'),
        (WEEKLY, 'Weekly'),
        (MONTHLY, 'Monthly'),
        (QUARTERLY, 'Quarterly'),
        (YEARLY, 'Yearly'),
    ]


@dataclass(frozen=True)
class PreventiveDetails:
    recurrence_rule: str = ''
    recurrence_start_date: date = None
    recurrence_end_date: date = None

    work_type = WorkType.PREVENTIVE


@dataclass(frozen=True)
class ComplaintDetails:
    work_type = WorkType.COMPLAINT


@dataclass(frozen=True)
class JobDetails:
    job_type: str = JobCategory.MAINTENANCE
    service_provider: str = ''
    contact_person: str = ''
    contact_number: str = ''
    contact_email: str = ''

    work_type = WorkType.JOB


@dataclass(frozen=True)
class RepairDetails:
    unit_number: str = ''
    contact_person: str = ''
    contact_number: str = ''
    contact_email: str = ''

    work_type = WorkType.REPAIR


VARIANTS = {
    WorkType.PREVENTIVE: PreventiveDetails,
    WorkType.COMPLAINT: ComplaintDetails,
    WorkType.JOB: JobDetails,
    WorkType.REPAIR: RepairDetails,
}

DATE_FIELDS = ('recurrence_start_date', 'recurrence_end_date')


def variant_for(work_type):
    """Details class for a work type; KeyError for unknown types."""
    return VARIANTS[work_type]


def field_names(work_type):
    return [f.name for f in fields(variant_for(work_type))]


def build_details(work_type, values=None):
    """Construct the variant for `work_type` from already-validated values."""
    return variant_for(work_type)(**(values or {}))


def details_to_json(details):
    """JSON-safe dict for storage; dates become ISO strings."""
    data = asdict(details)
    for name in DATE_FIELDS:
        if data.get(name) is not None:
            data[name] = data[name].isoformat()
    return data


def details_from_json(work_type, data):
    """
    Rebuild a variant from its stored form.

    Keys that are not part of the variant are ignored so older rows keep
    loading after a field is retired.
    """
    data = data or {}
    allowed = set(field_names(work_type))
    values = {}
    for name, value in data.items():
        if name not in allowed:
            continue
        if name in DATE_FIELDS and isinstance(value, str) and value:
            value = date.fromisoformat(value)
        values[name] = value
    return build_details(work_type, values)
