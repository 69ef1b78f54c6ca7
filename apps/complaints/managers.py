"""
Query helpers for complaints.

``visible_to`` is the single place where list/detail scoping is decided:
customers see their own complaints, technicians see what is assigned to
them and admins see everything.
"""

import re
from datetime import datetime

from django.db import models


# "03/02/2026", "3-2-2026" or "2026-02-03"
_DMY_RE = re.compile(r'^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$')
_ISO_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')


def parse_search_date(term):
    """Return a date when the search term looks like one, else None."""
    term = (term or '').strip()
    match = _ISO_RE.match(term)
    if match:
        year, month, day = match.groups()
    else:
        match = _DMY_RE.match(term)
        if not match:
            return None
        day, month, year = match.groups()
    try:
        return datetime(int(year), int(month), int(day)).date()
    except ValueError:
        return None


class ComplaintQuerySet(models.QuerySet):

    def visible_to(self, actor):
        role = getattr(actor, 'role', None)
        if role == 'admin':
            return self
        if role == 'technician':
            return self.filter(assigned_to=actor)
        if role == 'customer':
            return self.filter(customer=actor)
        return self.none()

    def not_forwarded(self):
        return self.filter(status='pending', assigned_to__isnull=True)

    def search(self, term):
        """Match report number, customer name or IC number, or a submission date."""
        term = (term or '').strip()
        if not term:
            return self
        query = (
            models.Q(report_number__icontains=term)
            | models.Q(customer__first_name__icontains=term)
            | models.Q(customer__last_name__icontains=term)
            | models.Q(customer__username__icontains=term)
            | models.Q(customer__ic_number__icontains=term)
        )
        search_date = parse_search_date(term)
        if search_date:
            query |= models.Q(created_at__date=search_date)
        return self.filter(query)

    def with_relations(self):
        return self.select_related(
            'customer', 'assigned_to', 'category', 'subcategory', 'brand', 'state'
        )
