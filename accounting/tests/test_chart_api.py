# accounting/tests/test_chart_api.py

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from vouchers.services.posting_engine import post_voucher
from vouchers.tests.helpers import build_chart, journal

User = get_user_model()


class ChartAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(
            user=User.objects.create_user(username="viewer", password="pass")
        )
        self.ledgers = build_chart()
        self.cash = self.ledgers["cash"]
        self.past = timezone.localdate() - timedelta(days=5)
        post_voucher(
            voucher_id=journal(self.cash, self.ledgers["sales"], "500.00", voucher_date=self.past).id
        )

    def test_groups_list(self):
        response = self.client.get("/api/accounting/groups/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([g["group_code"] for g in response.data], ["1", "2", "3", "4"])

    def test_group_detail_by_code(self):
        response = self.client.get("/api/accounting/groups/3/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["nature"], "income")

        response = self.client.get("/api/accounting/groups/9/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_ledgers_ordered_by_name(self):
        response = self.client.get("/api/accounting/ledgers/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [row["ledger_name"] for row in response.data["results"]]
        self.assertEqual(names, sorted(names))

    def test_ledgers_filter_by_nature(self):
        response = self.client.get("/api/accounting/ledgers/", {"nature": "income"})
        self.assertEqual([r["ledger_name"] for r in response.data["results"]], ["Sales"])

    def test_ledger_detail_shows_current_balance(self):
        response = self.client.get(f"/api/accounting/ledgers/{self.cash.id}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["current_balance"], "1500.00")

        response = self.client.get("/api/accounting/ledgers/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_balance_as_of(self):
        url = f"/api/accounting/ledgers/{self.cash.id}/balance-as-of/"

        before = self.client.get(url, {"as_of": (self.past - timedelta(days=1)).isoformat()})
        on = self.client.get(url, {"as_of": self.past.isoformat()})

        self.assertEqual(before.data["balance"], "1000.00")
        self.assertEqual(on.data["balance"], "1500.00")

        missing = self.client.get(url)
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

    def test_statement(self):
        response = self.client.get(f"/api/accounting/ledgers/{self.cash.id}/statement/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["opening_balance"], "1000.00")
        self.assertEqual(response.data["closing_balance"], "1500.00")
        self.assertEqual(len(response.data["lines"]), 1)

    def test_trial_balance(self):
        response = self.client.get("/api/accounting/trial-balance/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["totals"]["debit"], str(Decimal("1500.00")))

    def test_trial_balance_rejects_impossible_date(self):
        for raw in ("2025-02-30", "not-a-date"):
            response = self.client.get("/api/accounting/trial-balance/", {"as_of": raw})

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("as_of", response.data["detail"])

    def test_balance_as_of_rejects_impossible_date(self):
        response = self.client.get(
            f"/api/accounting/ledgers/{self.cash.id}/balance-as-of/", {"as_of": "2025-02-30"}
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
