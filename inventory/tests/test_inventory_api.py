# inventory/tests/test_inventory_api.py

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from vouchers.models import Voucher
from vouchers.services.draft_builder import create_draft
from vouchers.services.posting_engine import post_voucher
from vouchers.tests.helpers import build_chart, make_item

User = get_user_model()


class InventoryAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(
            user=User.objects.create_user(username="storekeeper", password="pass")
        )
        ledgers = build_chart()
        self.widget = make_item("Widget", quantity="10", avg_cost="5.00")
        make_item("Gadget", quantity="0", avg_cost="0")

        voucher = create_draft(
            voucher_type=Voucher.VoucherType.PURCHASE_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": ledgers["stock"].id, "debit": "35.00"},
                {"ledger_id": ledgers["creditors"].id, "credit": "35.00"},
            ],
            items=[{"item_id": self.widget.id, "quantity": "5", "rate": "7.00"}],
        )
        self.purchase = post_voucher(voucher_id=voucher.id)

    def test_items_list_and_search(self):
        response = self.client.get("/api/inventory/items/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r["item_name"] for r in response.data["results"]], ["Gadget", "Widget"])

        response = self.client.get("/api/inventory/items/", {"search": "wid"})
        self.assertEqual(response.data["count"], 1)

    def test_item_detail_reflects_valuation(self):
        response = self.client.get(f"/api/inventory/items/{self.widget.id}/")

        self.assertEqual(response.data["quantity_on_hand"], "15.000")
        self.assertEqual(response.data["avg_cost"], "5.6667")
        self.assertEqual(response.data["stock_value"], "85.00")

    def test_item_movements(self):
        response = self.client.get(f"/api/inventory/items/{self.widget.id}/movements/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["reason"], "PURCHASE")
        self.assertEqual(response.data[0]["voucher_number"], self.purchase.voucher_number)

    def test_items_are_read_only(self):
        response = self.client.post("/api/inventory/items/", {"item_name": "New"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
