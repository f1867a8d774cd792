# vouchers/api/viewsets.py

"""
======================================================
PATH: vouchers/api/viewsets.py
======================================================
VOUCHER VIEWSET

Purpose:
- Voucher list / detail for the voucher screens
- Draft create / edit / discard
- Post and cancel transitions
- Status summaries for dashboard tiles

Routes (mounted at /api/vouchers/):
    GET    /                              list (filters, ordering, page)
    POST   /                              create draft
    GET    /<id>/                         detail
    PATCH  /<id>/                         edit draft
    DELETE /<id>/                         discard draft
    GET    /<id>/balance/                 debit/credit check
    POST   /<id>/post/                    draft -> posted
    POST   /<id>/cancel/                  posted -> cancelled
    GET    /summary/by-status/
    GET    /summary/by-type-status/

Errors:
- Domain errors are returned as {"detail", "code", "retryable", ...}
  (see accounting.api.errors)
======================================================
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import error_response
from accounting.services.exceptions import AccountingServiceError
from vouchers.api.filters import VoucherFilter
from vouchers.api.serializers import (
    CancelVoucherSerializer,
    PostVoucherSerializer,
    VoucherDraftInputSerializer,
    VoucherDraftUpdateSerializer,
    VoucherListSerializer,
    VoucherSerializer,
)
from vouchers.models import Voucher
from vouchers.services.balance_validator import validate_balance
from vouchers.services.cancellation import cancel_voucher
from vouchers.services.draft_builder import create_draft, delete_draft, update_draft
from vouchers.services.posting_engine import post_voucher
from vouchers.services.reporting import sum_by_status, sum_by_type_and_status


def _entries_payload(entries):
    return [
        {
            "ledger_id": e["ledger_id"],
            "debit": e.get("debit"),
            "credit": e.get("credit"),
            "narration": e.get("narration", ""),
        }
        for e in entries
    ]


def _money_rows(rows):
    return [{**r, "total_amount": str(r["total_amount"])} for r in rows]


@extend_schema(tags=["vouchers"])
class VoucherViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = VoucherFilter
    ordering_fields = ["voucher_date", "voucher_number", "total_amount", "created_at"]
    ordering = ["-voucher_date", "-voucher_number"]

    def get_queryset(self):
        qs = Voucher.objects.select_related("party_ledger")
        if self.action == "retrieve":
            qs = qs.prefetch_related(
                "draft_lines__ledger",
                "draft_items__item",
                "ledger_entries__ledger",
                "items__item",
            )
        return qs

    def get_serializer_class(self):
        if self.action == "list":
            return VoucherListSerializer
        return VoucherSerializer

    def _detail(self, voucher_id, *, http_status=status.HTTP_200_OK):
        voucher = self.get_queryset().prefetch_related(
            "draft_lines__ledger",
            "draft_items__item",
            "ledger_entries__ledger",
            "items__item",
        ).get(pk=voucher_id)
        return Response(VoucherSerializer(voucher).data, status=http_status)

    # ======================================================
    # DRAFTS
    # ======================================================

    @extend_schema(request=VoucherDraftInputSerializer, responses={201: VoucherSerializer})
    def create(self, request):
        ser = VoucherDraftInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        try:
            voucher = create_draft(
                voucher_type=data["voucher_type"],
                voucher_date=data["voucher_date"],
                party_ledger_id=data.get("party_ledger_id"),
                entries=_entries_payload(data["entries"]),
                items=data.get("items") or [],
                narration=data.get("narration", ""),
                reference_number=data.get("reference_number", ""),
                voucher_number=data.get("voucher_number", ""),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return self._detail(voucher.id, http_status=status.HTTP_201_CREATED)

    @extend_schema(request=VoucherDraftUpdateSerializer, responses={200: VoucherSerializer})
    def partial_update(self, request, pk=None):
        ser = VoucherDraftUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        kwargs = {
            "voucher_id": pk,
            "expected_version": data.get("expected_version"),
            "voucher_date": data.get("voucher_date"),
            "narration": data.get("narration"),
            "reference_number": data.get("reference_number"),
        }
        if "party_ledger_id" in data:
            kwargs["party_ledger_id"] = data["party_ledger_id"]
        if "entries" in data:
            kwargs["entries"] = _entries_payload(data["entries"])
        if "items" in data:
            kwargs["items"] = data["items"]

        try:
            voucher = update_draft(**kwargs)
        except AccountingServiceError as exc:
            return error_response(exc)

        return self._detail(voucher.id)

    def destroy(self, request, pk=None):
        try:
            delete_draft(voucher_id=pk)
        except AccountingServiceError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ======================================================
    # BALANCE CHECK
    # ======================================================

    @extend_schema(responses={200: serializers.DictField()})
    @action(detail=True, methods=["get"], url_path="balance")
    def balance(self, request, pk=None):
        voucher = self.get_object()
        check = validate_balance(voucher)
        return Response(
            {
                "voucher_id": voucher.id,
                "debit_total": str(check.debit_total),
                "credit_total": str(check.credit_total),
                "delta": str(check.delta),
                "is_balanced": check.is_balanced,
            },
            status=status.HTTP_200_OK,
        )

    # ======================================================
    # TRANSITIONS
    # ======================================================

    @extend_schema(request=PostVoucherSerializer, responses={200: VoucherSerializer})
    @action(detail=True, methods=["post"], url_path="post")
    def post_voucher(self, request, pk=None):
        ser = PostVoucherSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            voucher = post_voucher(
                voucher_id=pk,
                expected_version=ser.validated_data.get("expected_version"),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return self._detail(voucher.id)

    @extend_schema(request=CancelVoucherSerializer, responses={200: VoucherSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        ser = CancelVoucherSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            voucher = cancel_voucher(
                voucher_id=pk,
                reason=ser.validated_data.get("reason", ""),
                expected_version=ser.validated_data.get("expected_version"),
                user=request.user,
            )
        except AccountingServiceError as exc:
            return error_response(exc)

        return self._detail(voucher.id)

    # ======================================================
    # SUMMARIES
    # ======================================================

    @extend_schema(responses={200: serializers.ListField(child=serializers.DictField())})
    @action(detail=False, methods=["get"], url_path="summary/by-status")
    def summary_by_status(self, request):
        return Response(_money_rows(sum_by_status()), status=status.HTTP_200_OK)

    @extend_schema(responses={200: serializers.ListField(child=serializers.DictField())})
    @action(detail=False, methods=["get"], url_path="summary/by-type-status")
    def summary_by_type_status(self, request):
        return Response(_money_rows(sum_by_type_and_status()), status=status.HTTP_200_OK)
