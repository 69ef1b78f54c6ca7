import django_filters
from django.contrib.auth import get_user_model

from .models import Complaint

User = get_user_model()

NOT_FORWARDED = 'not_forwarded'


class ComplaintFilter(django_filters.FilterSet):
    """
    List filters shared by the API and the service layer.

    ``status=not_forwarded`` selects pending complaints nobody has been
    assigned to yet. Scoping by role happens before this filter runs.
    """

    status = django_filters.ChoiceFilter(
        choices=Complaint.STATUS_CHOICES + [(NOT_FORWARDED, 'Not Forwarded')],
        method='filter_status',
    )
    from_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    to_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')
    assigned_to = django_filters.ModelChoiceFilter(
        queryset=User.objects.filter(role=User.ROLE_TECHNICIAN),
    )
    customer = django_filters.ModelChoiceFilter(
        queryset=User.objects.filter(role=User.ROLE_CUSTOMER),
    )
    warranty_status = django_filters.ChoiceFilter(choices=Complaint.WARRANTY_CHOICES)
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Complaint
        fields = ['status', 'from_date', 'to_date', 'assigned_to', 'customer', 'warranty_status', 'category']

    def filter_status(self, queryset, name, value):
        if value == NOT_FORWARDED:
            return queryset.not_forwarded()
        return queryset.filter(status=value)

    def filter_search(self, queryset, name, value):
        return queryset.search(value)
