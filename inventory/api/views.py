# inventory/api/views.py

"""
INVENTORY API (READ-ONLY)

GET /api/inventory/items/?search=&is_active=
GET /api/inventory/items/<id>/
GET /api/inventory/items/<id>/movements/

quantity_on_hand / avg_cost are moved only by voucher posting and
cancellation, so there are no write endpoints here.
"""

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from inventory.api.serializers import InventoryItemSerializer, InventoryMovementSerializer
from inventory.models import InventoryItem


@extend_schema(tags=["inventory"])
class InventoryItemViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = InventoryItemSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = []

    def get_queryset(self):
        qs = InventoryItem.objects.order_by("item_name")
        params = self.request.query_params

        q = (params.get("search") or "").strip()
        if q:
            qs = qs.filter(Q(item_name__icontains=q) | Q(item_code__icontains=q))

        active = (params.get("is_active") or "").strip().lower()
        if active in {"true", "1"}:
            qs = qs.filter(is_active=True)
        elif active in {"false", "0"}:
            qs = qs.filter(is_active=False)

        return qs

    @extend_schema(responses=InventoryMovementSerializer(many=True))
    @action(detail=True, methods=["get"], url_path="movements")
    def movements(self, request, pk=None):
        item = self.get_object()
        qs = item.movements.select_related("voucher").order_by("-created_at", "-id")
        return Response(InventoryMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)
