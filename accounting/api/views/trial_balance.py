"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE API VIEW (READ-ONLY)

GET /api/accounting/trial-balance/?as_of=YYYY-MM-DD
- as_of omitted -> all entries
- Money is returned as 2dp strings
"""

from __future__ import annotations

from decimal import Decimal

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from vouchers.services.reporting import trial_balance


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(
            name="as_of",
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Snapshot date (YYYY-MM-DD), inclusive.",
        ),
    ],
    responses={200: dict},
)
class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        as_of = None
        raw = (request.query_params.get("as_of") or "").strip()
        if raw:
            try:
                as_of = parse_date(raw)
            except ValueError:
                # Well-formed but impossible dates (2025-02-30).
                as_of = None
            if as_of is None:
                return Response(
                    {"detail": "Invalid as_of (expected YYYY-MM-DD)"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        data = trial_balance(as_of=as_of)
        return Response(_jsonable(data), status=status.HTTP_200_OK)
