"""
Sequential report numbers: A00001 .. A99999, B00001 .. Z99999, AA00001 ...

There is no global lock. Two requests may compute the same candidate; the
unique constraint on ``Complaint.report_number`` rejects the loser, which
recomputes and tries again a bounded number of times.
"""

import logging
import re

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models.functions import Length

from apps.core.exceptions import ConflictError
from apps.complaints.models import Complaint

logger = logging.getLogger(__name__)

REPORT_NUMBER_RE = re.compile(r'^([A-Z]+)(\d{5})$')
REPORT_NUMBER_DB_PATTERN = r'^[A-Z]+[0-9]{5}$'
FIRST_PREFIX = 'A'
MAX_SEQUENCE = 99999


def _increment_prefix(letters):
    """A -> B, Z -> AA, AZ -> BA, ZZ -> AAA."""
    chars = list(letters)
    for i in range(len(chars) - 1, -1, -1):
        if chars[i] != 'Z':
            chars[i] = chr(ord(chars[i]) + 1)
            return ''.join(chars)
        chars[i] = 'A'
    return 'A' + ''.join(chars)


def next_report_number(current=None):
    """Return the report number following ``current`` (or the first one)."""
    if not current:
        return f"{FIRST_PREFIX}{1:05d}"

    match = REPORT_NUMBER_RE.match(current)
    if not match:
        raise ValueError(f"Malformed report number: {current!r}")

    letters, number = match.group(1), int(match.group(2))
    if number < MAX_SEQUENCE:
        return f"{letters}{number + 1:05d}"
    return f"{_increment_prefix(letters)}{1:05d}"


def current_max_report_number():
    """
    Highest allocated report number.

    Longer prefixes sort after shorter ones, so ordering by length first and
    then by the string gives numeric order across ``Z99999`` -> ``AA00001``.
    """
    return (
        Complaint.objects
        .filter(report_number__regex=REPORT_NUMBER_DB_PATTERN)
        .order_by(Length('report_number').desc(), '-report_number')
        .values_list('report_number', flat=True)
        .first()
    )


def save_with_report_number(complaint, max_attempts=None):
    """
    Assign the next report number to an unsaved complaint and insert it.

    Each attempt runs in its own savepoint so a unique-constraint violation
    does not poison the caller's transaction.
    """
    if max_attempts is None:
        max_attempts = getattr(settings, 'COMPLAINT_REPORT_NUMBER_MAX_RETRIES', 5)

    for attempt in range(1, max_attempts + 1):
        complaint.report_number = next_report_number(current_max_report_number())
        try:
            with transaction.atomic():
                complaint.save(force_insert=True)
        except IntegrityError:
            if not Complaint.objects.filter(report_number=complaint.report_number).exists():
                raise
            logger.warning(
                "Report number %s already taken (attempt %s/%s)",
                complaint.report_number, attempt, max_attempts,
            )
            complaint.pk = None
            continue
        return complaint

    raise ConflictError("Could not allocate a report number. Please try again.")
