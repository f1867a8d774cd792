# vouchers/api/filters.py

"""
VOUCHER LIST FILTERS (django-filter)

?voucher_type=&status=&date_from=&date_to=&party_ledger=&search=
search matches voucher_number, reference_number or narration.
"""

import django_filters
from django.db.models import Q

from vouchers.models import Voucher


class VoucherFilter(django_filters.FilterSet):
    voucher_type = django_filters.ChoiceFilter(choices=Voucher.VoucherType.choices)
    status = django_filters.ChoiceFilter(choices=Voucher.Status.choices)
    date_from = django_filters.DateFilter(field_name="voucher_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="voucher_date", lookup_expr="lte")
    party_ledger = django_filters.NumberFilter(field_name="party_ledger_id")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Voucher
        fields = ["voucher_type", "status", "party_ledger"]

    def filter_search(self, queryset, name, value):
        term = (value or "").strip()
        if not term:
            return queryset
        return queryset.filter(
            Q(voucher_number__icontains=term)
            | Q(reference_number__icontains=term)
            | Q(narration__icontains=term)
        )
