# accounting/api/views/chart.py

"""
PATH: accounting/api/views/chart.py

CHART OF ACCOUNTS API (READ-ONLY)

GET /api/accounting/groups/                          -> groups by group_code
GET /api/accounting/groups/<group_code>/
GET /api/accounting/ledgers/?group_code=&nature=&balance_type=&is_active=&search=
GET /api/accounting/ledgers/<id>/
GET /api/accounting/ledgers/<id>/balance-as-of/?as_of=YYYY-MM-DD
GET /api/accounting/ledgers/<id>/statement/?date_from=&date_to=

Rules:
- Ledgers are always ordered by ledger_name
- current_balance is read-only here (moved only by posting / cancellation)
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from drf_spectacular.utils import OpenApiParameter, extend_schema

from accounting.api.errors import error_response
from accounting.api.serializers.chart import (
    AccountGroupSerializer,
    AsOfQuerySerializer,
    LedgerSerializer,
    LedgerStatementSerializer,
    StatementQuerySerializer,
)
from accounting.models import AccountGroup
from accounting.services.chart_registry import get_group, get_ledger, list_ledgers
from accounting.services.exceptions import AccountingServiceError
from vouchers.services.reporting import ledger_balance_as_of, ledger_statement


def _bool_param(raw):
    value = (raw or "").strip().lower()
    if value in {"1", "true", "yes"}:
        return True
    if value in {"0", "false", "no"}:
        return False
    return None


@extend_schema(tags=["accounting"])
class AccountGroupViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = AccountGroupSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
    lookup_field = "group_code"
    lookup_value_regex = r"[\w.\-]+"
    queryset = AccountGroup.objects.select_related("parent").order_by("group_code")

    def retrieve(self, request, group_code=None):
        try:
            group = get_group(group_code)
        except AccountingServiceError as exc:
            return error_response(exc)
        return Response(self.get_serializer(group).data, status=status.HTTP_200_OK)


@extend_schema(tags=["accounting"])
class LedgerViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = LedgerSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = []

    def get_queryset(self):
        params = self.request.query_params
        return list_ledgers(
            group_code=(params.get("group_code") or "").strip() or None,
            nature=(params.get("nature") or "").strip() or None,
            balance_type=(params.get("balance_type") or "").strip() or None,
            is_active=_bool_param(params.get("is_active")),
            search=params.get("search"),
        )

    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except AccountingServiceError as exc:
            return error_response(exc)

    def retrieve(self, request, pk=None):
        try:
            ledger = get_ledger(pk)
        except AccountingServiceError as exc:
            return error_response(exc)
        return Response(self.get_serializer(ledger).data, status=status.HTTP_200_OK)

    @extend_schema(
        parameters=[OpenApiParameter("as_of", str, required=True, description="YYYY-MM-DD")],
        responses={200: dict},
    )
    @action(detail=True, methods=["get"], url_path="balance-as-of")
    def balance_as_of(self, request, pk=None):
        q = AsOfQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        as_of = q.validated_data["as_of"]

        try:
            ledger = get_ledger(pk)
            balance = ledger_balance_as_of(ledger.id, as_of)
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(
            {
                "ledger_id": ledger.id,
                "ledger_name": ledger.ledger_name,
                "balance_type": ledger.balance_type,
                "as_of": as_of.isoformat(),
                "balance": str(balance),
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        parameters=[
            OpenApiParameter("date_from", str, required=False),
            OpenApiParameter("date_to", str, required=False),
        ],
        responses=LedgerStatementSerializer,
    )
    @action(detail=True, methods=["get"], url_path="statement")
    def statement(self, request, pk=None):
        q = StatementQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        try:
            data = ledger_statement(
                pk,
                date_from=q.validated_data.get("date_from"),
                date_to=q.validated_data.get("date_to"),
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return Response(LedgerStatementSerializer(data).data, status=status.HTTP_200_OK)
