# vouchers/tests/test_posting.py

from decimal import Decimal
from unittest import mock

from django.db import OperationalError
from django.test import TestCase, override_settings
from django.utils import timezone

from accounting.models import Ledger
from accounting.services.exceptions import (
    ConcurrentModificationError,
    ImbalancedVoucherError,
    InsufficientStockError,
    InvalidStateTransitionError,
    VoucherValidationError,
)
from inventory.models import InventoryMovement
from vouchers.models import Voucher, VoucherItem, VoucherLedgerEntry
from vouchers.services.balance_validator import assert_balanced, validate_balance
from vouchers.services.cancellation import cancel_voucher
from vouchers.services.draft_builder import create_draft
from vouchers.services.posting_engine import post_voucher
from vouchers.tests.helpers import balance_of, build_chart, journal, make_item, refresh


class JournalPostingTests(TestCase):
    """
    Posting a journal voucher.

    GUARANTEES:
    - Debit-normal ledgers grow with debits, credit-normal with credits
    - Posting writes one immutable entry per draft line
    - status=posted, total_amount=debit total
    """

    def setUp(self):
        self.ledgers = build_chart()
        self.cash = self.ledgers["cash"]
        self.bank = self.ledgers["bank"]
        self.sales = self.ledgers["sales"]

    def test_debit_normal_ledger_increases_by_debit(self):
        voucher = journal(self.cash, self.bank, "500.00")

        post_voucher(voucher_id=voucher.id)

        self.assertEqual(balance_of(self.cash), Decimal("1500.00"))
        self.assertEqual(balance_of(self.bank), Decimal("-500.00"))

    def test_credit_normal_ledger_increases_by_credit(self):
        voucher = journal(self.cash, self.sales, "250.00")

        post_voucher(voucher_id=voucher.id)

        self.assertEqual(balance_of(self.sales), Decimal("250.00"))
        self.assertEqual(balance_of(self.cash), Decimal("1250.00"))

    def test_post_sets_status_total_and_entries(self):
        voucher = journal(self.cash, self.bank, "500.00", narration="Transfer")

        posted = post_voucher(voucher_id=voucher.id)

        self.assertEqual(posted.status, Voucher.Status.POSTED)
        self.assertEqual(posted.total_amount, Decimal("500.00"))
        self.assertIsNotNone(posted.posted_at)
        self.assertEqual(posted.version, 2)

        entries = VoucherLedgerEntry.objects.filter(voucher=posted).order_by("id")
        self.assertEqual(entries.count(), 2)
        self.assertEqual(entries[0].ledger_id, self.cash.id)
        self.assertEqual(entries[0].debit_amount, Decimal("500.00"))
        self.assertEqual(entries[1].credit_amount, Decimal("500.00"))
        self.assertTrue(all(e.entry_date == posted.voucher_date for e in entries))
        self.assertFalse(any(e.is_reversal for e in entries))

    def test_same_ledger_on_both_sides_nets_to_zero(self):
        voucher = create_draft(
            voucher_type=Voucher.VoucherType.JOURNAL,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.cash.id, "debit": "100.00"},
                {"ledger_id": self.cash.id, "credit": "100.00"},
            ],
        )

        post_voucher(voucher_id=voucher.id)

        self.assertEqual(balance_of(self.cash), Decimal("1000.00"))
        self.assertEqual(VoucherLedgerEntry.objects.filter(voucher=voucher).count(), 2)

    def test_imbalanced_voucher_is_rejected(self):
        voucher = create_draft(
            voucher_type=Voucher.VoucherType.JOURNAL,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.cash.id, "debit": "500"},
                {"ledger_id": self.bank.id, "debit": "300"},
            ],
        )

        with self.assertRaises(ImbalancedVoucherError) as ctx:
            post_voucher(voucher_id=voucher.id)

        self.assertEqual(ctx.exception.debit_total, Decimal("800.00"))
        self.assertEqual(ctx.exception.credit_total, Decimal("0.00"))
        self.assertEqual(ctx.exception.delta, Decimal("800.00"))

        self.assertEqual(refresh(voucher).status, Voucher.Status.DRAFT)
        self.assertEqual(balance_of(self.cash), Decimal("1000.00"))
        self.assertFalse(VoucherLedgerEntry.objects.exists())

    def test_validate_balance_reports_delta(self):
        voucher = create_draft(
            voucher_type=Voucher.VoucherType.JOURNAL,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.cash.id, "debit": "500"},
                {"ledger_id": self.bank.id, "credit": "450"},
            ],
        )

        check = validate_balance(voucher)

        self.assertFalse(check.is_balanced)
        self.assertEqual(check.debit_total, Decimal("500.00"))
        self.assertEqual(check.credit_total, Decimal("450.00"))
        self.assertEqual(check.delta, Decimal("50.00"))

    def test_assert_balanced(self):
        balanced = journal(self.cash, self.bank, "40.00")
        self.assertTrue(assert_balanced(balanced).is_balanced)

        lopsided = create_draft(
            voucher_type=Voucher.VoucherType.JOURNAL,
            voucher_date=timezone.localdate(),
            entries=[{"ledger_id": self.cash.id, "debit": "40.00"}],
        )
        with self.assertRaises(ImbalancedVoucherError):
            assert_balanced(lopsided)

    def test_second_post_is_rejected_and_changes_nothing(self):
        voucher = journal(self.cash, self.bank, "500.00")
        post_voucher(voucher_id=voucher.id)

        with self.assertRaises(InvalidStateTransitionError):
            post_voucher(voucher_id=voucher.id)

        self.assertEqual(balance_of(self.cash), Decimal("1500.00"))
        self.assertEqual(VoucherLedgerEntry.objects.filter(voucher=voucher).count(), 2)
        self.assertEqual(refresh(voucher).version, 2)

    def test_inactive_ledger_blocks_posting(self):
        voucher = journal(self.cash, self.bank, "10.00")
        self.bank.is_active = False
        self.bank.save()

        with self.assertRaises(VoucherValidationError):
            post_voucher(voucher_id=voucher.id)

        self.assertEqual(refresh(voucher).status, Voucher.Status.DRAFT)
        self.assertEqual(balance_of(self.cash), Decimal("1000.00"))


class DraftIsolationTests(TestCase):
    """Drafts have no accounting effect until posted."""

    def setUp(self):
        self.ledgers = build_chart()
        self.item = make_item()

    def test_draft_does_not_touch_ledgers(self):
        journal(self.ledgers["cash"], self.ledgers["bank"], "500.00")

        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1000.00"))
        self.assertEqual(balance_of(self.ledgers["bank"]), Decimal("0.00"))
        self.assertFalse(VoucherLedgerEntry.objects.exists())

    def test_draft_does_not_touch_stock(self):
        create_draft(
            voucher_type=Voucher.VoucherType.PURCHASE_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.ledgers["stock"].id, "debit": "35.00"},
                {"ledger_id": self.ledgers["creditors"].id, "credit": "35.00"},
            ],
            items=[{"item_id": self.item.id, "quantity": "5", "rate": "7.00"}],
        )

        item = refresh(self.item)
        self.assertEqual(item.quantity_on_hand, Decimal("10.000"))
        self.assertEqual(item.avg_cost, Decimal("5.0000"))
        self.assertFalse(InventoryMovement.objects.exists())
        self.assertFalse(VoucherItem.objects.exists())


class StockPostingTests(TestCase):
    """
    Sales / purchase invoices move inventory at weighted-average cost.
    """

    def setUp(self):
        self.ledgers = build_chart()
        self.widget = make_item("Widget", quantity="10", avg_cost="5.00")

    def _purchase(self, quantity, rate, amount):
        return create_draft(
            voucher_type=Voucher.VoucherType.PURCHASE_INVOICE,
            voucher_date=timezone.localdate(),
            party_ledger_id=self.ledgers["creditors"].id,
            entries=[
                {"ledger_id": self.ledgers["stock"].id, "debit": amount},
                {"ledger_id": self.ledgers["creditors"].id, "credit": amount},
            ],
            items=[{"item_id": self.widget.id, "quantity": quantity, "rate": rate}],
        )

    def _sale(self, quantity, rate, amount):
        return create_draft(
            voucher_type=Voucher.VoucherType.SALES_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.ledgers["cash"].id, "debit": amount},
                {"ledger_id": self.ledgers["sales"].id, "credit": amount},
            ],
            items=[{"item_id": self.widget.id, "quantity": quantity, "rate": rate}],
        )

    def test_purchase_reblends_average_cost(self):
        voucher = self._purchase("5", "7.00", "35.00")

        post_voucher(voucher_id=voucher.id)

        widget = refresh(self.widget)
        self.assertEqual(widget.quantity_on_hand, Decimal("15.000"))
        self.assertEqual(widget.avg_cost, Decimal("5.6667"))

        line = VoucherItem.objects.get(voucher=voucher)
        self.assertEqual(line.amount, Decimal("35.00"))
        self.assertEqual(line.avg_cost_before, Decimal("5.0000"))
        self.assertEqual(line.avg_cost_after, Decimal("5.6667"))

        movement = InventoryMovement.objects.get(voucher=voucher)
        self.assertEqual(movement.reason, InventoryMovement.Reason.PURCHASE)
        self.assertEqual(movement.direction, InventoryMovement.Direction.IN)
        self.assertEqual(movement.quantity_after, Decimal("15.000"))

    def test_purchase_into_empty_stock_takes_purchase_rate(self):
        empty = make_item("Gadget", quantity="0", avg_cost="0")
        voucher = create_draft(
            voucher_type=Voucher.VoucherType.PURCHASE_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.ledgers["stock"].id, "debit": "24.00"},
                {"ledger_id": self.ledgers["creditors"].id, "credit": "24.00"},
            ],
            items=[{"item_id": empty.id, "quantity": "3", "rate": "8.00"}],
        )

        post_voucher(voucher_id=voucher.id)

        empty = refresh(empty)
        self.assertEqual(empty.quantity_on_hand, Decimal("3.000"))
        self.assertEqual(empty.avg_cost, Decimal("8.0000"))

    def test_sale_decrements_quantity_and_keeps_average(self):
        voucher = self._sale("4", "9.00", "36.00")

        post_voucher(voucher_id=voucher.id)

        widget = refresh(self.widget)
        self.assertEqual(widget.quantity_on_hand, Decimal("6.000"))
        self.assertEqual(widget.avg_cost, Decimal("5.0000"))

        line = VoucherItem.objects.get(voucher=voucher)
        self.assertEqual(line.unit_cost, Decimal("5.0000"))
        self.assertEqual(line.cost_amount, Decimal("20.00"))

    def test_sale_beyond_stock_raises_and_changes_nothing(self):
        self.widget.delete()
        self.widget = make_item("Widget", quantity="3", avg_cost="5.00")
        voucher = self._sale("5", "10.00", "50.00")

        with self.assertRaises(InsufficientStockError) as ctx:
            post_voucher(voucher_id=voucher.id)

        self.assertEqual(ctx.exception.requested, Decimal("5.000"))
        self.assertEqual(ctx.exception.available, Decimal("3.000"))

        self.assertEqual(refresh(self.widget).quantity_on_hand, Decimal("3.000"))
        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1000.00"))
        self.assertEqual(balance_of(self.ledgers["sales"]), Decimal("0.00"))
        self.assertEqual(refresh(voucher).status, Voucher.Status.DRAFT)
        self.assertFalse(VoucherLedgerEntry.objects.exists())
        self.assertFalse(InventoryMovement.objects.exists())

    @override_settings(INVENTORY_ALLOW_NEGATIVE_STOCK=True)
    def test_negative_stock_allowed_records_shortfall(self):
        voucher = self._sale("12", "9.00", "108.00")

        post_voucher(voucher_id=voucher.id)

        self.assertEqual(refresh(self.widget).quantity_on_hand, Decimal("-2.000"))
        self.assertEqual(VoucherItem.objects.get(voucher=voucher).stock_shortfall, Decimal("2.000"))


class PostingConcurrencyTests(TestCase):
    def setUp(self):
        self.ledgers = build_chart()
        self.voucher = journal(self.ledgers["cash"], self.ledgers["bank"], "500.00")

    def test_stale_expected_version_is_retryable(self):
        with self.assertRaises(ConcurrentModificationError) as ctx:
            post_voucher(voucher_id=self.voucher.id, expected_version=7)

        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(refresh(self.voucher).status, Voucher.Status.DRAFT)

    def test_matching_expected_version_posts(self):
        posted = post_voucher(voucher_id=self.voucher.id, expected_version=1)

        self.assertEqual(posted.status, Voucher.Status.POSTED)

    def test_lock_failure_surfaces_as_concurrent_modification(self):
        with mock.patch(
            "vouchers.services.posting_engine.lock_ledgers",
            side_effect=OperationalError("database is locked"),
        ):
            with self.assertRaises(ConcurrentModificationError):
                post_voucher(voucher_id=self.voucher.id)

        self.assertEqual(refresh(self.voucher).status, Voucher.Status.DRAFT)
        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1000.00"))
        self.assertFalse(VoucherLedgerEntry.objects.exists())

    def test_posting_can_be_retried_after_conflict(self):
        with mock.patch(
            "vouchers.services.posting_engine.lock_ledgers",
            side_effect=OperationalError("deadlock detected"),
        ):
            with self.assertRaises(ConcurrentModificationError):
                post_voucher(voucher_id=self.voucher.id)

        post_voucher(voucher_id=self.voucher.id)

        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1500.00"))


@override_settings(INVENTORY_COGS_LEDGER_CODE="COGS", INVENTORY_STOCK_LEDGER_CODE="STOCK")
class CostOfGoodsSoldPostingTests(TestCase):
    """
    With COGS ledgers configured, sales invoices also move stock value:
    Dr COGS / Cr Stock at avg_cost x quantity.
    """

    def setUp(self):
        self.ledgers = build_chart()
        self.cogs = Ledger.objects.create(
            ledger_name="Cost of Goods Sold",
            ledger_code="COGS",
            account_group=self.ledgers["rent"].account_group,
        )
        self.widget = make_item("Widget", quantity="10", avg_cost="5.00")

    def _sale(self, item=None, quantity="4", rate="9.00", amount="36.00"):
        return create_draft(
            voucher_type=Voucher.VoucherType.SALES_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.ledgers["cash"].id, "debit": amount},
                {"ledger_id": self.ledgers["sales"].id, "credit": amount},
            ],
            items=[{"item_id": (item or self.widget).id, "quantity": quantity, "rate": rate}],
        )

    def test_sale_books_cost_of_goods_sold(self):
        voucher = post_voucher(voucher_id=self._sale().id)

        self.assertEqual(balance_of(self.cogs), Decimal("20.00"))
        self.assertEqual(balance_of(self.ledgers["stock"]), Decimal("-20.00"))
        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1036.00"))
        self.assertEqual(balance_of(self.ledgers["sales"]), Decimal("36.00"))
        self.assertEqual(voucher.total_amount, Decimal("36.00"))

        entries = VoucherLedgerEntry.objects.filter(voucher=voucher)
        self.assertEqual(entries.count(), 4)
        cost_entry = entries.get(ledger=self.cogs)
        self.assertEqual(cost_entry.debit_amount, Decimal("20.00"))
        self.assertEqual(cost_entry.narration, "Cost of goods sold")
        self.assertEqual(entries.get(ledger=self.ledgers["stock"]).credit_amount, Decimal("20.00"))
        self.assertTrue(validate_balance(voucher).is_balanced)

    def test_cost_rounds_half_up_to_cents(self):
        gadget = make_item("Gadget", quantity="10", avg_cost="3.3333")

        post_voucher(voucher_id=self._sale(item=gadget, quantity="3", rate="5.00", amount="15.00").id)

        self.assertEqual(balance_of(self.cogs), Decimal("10.00"))

    def test_cancel_reverses_cost_of_goods_sold(self):
        voucher = post_voucher(voucher_id=self._sale().id)

        cancel_voucher(voucher_id=voucher.id, reason="returned")

        self.assertEqual(balance_of(self.cogs), Decimal("0.00"))
        self.assertEqual(balance_of(self.ledgers["stock"]), Decimal("0.00"))
        self.assertEqual(balance_of(self.ledgers["cash"]), Decimal("1000.00"))
        self.assertEqual(refresh(self.widget).quantity_on_hand, Decimal("10.000"))
        self.assertEqual(
            VoucherLedgerEntry.objects.filter(voucher=voucher, is_reversal=True).count(), 4
        )

    def test_purchase_books_no_cost(self):
        voucher = create_draft(
            voucher_type=Voucher.VoucherType.PURCHASE_INVOICE,
            voucher_date=timezone.localdate(),
            entries=[
                {"ledger_id": self.ledgers["stock"].id, "debit": "35.00"},
                {"ledger_id": self.ledgers["creditors"].id, "credit": "35.00"},
            ],
            items=[{"item_id": self.widget.id, "quantity": "5", "rate": "7.00"}],
        )

        post_voucher(voucher_id=voucher.id)

        self.assertEqual(VoucherLedgerEntry.objects.filter(voucher=voucher).count(), 2)
        self.assertEqual(balance_of(self.cogs), Decimal("0.00"))

    @override_settings(INVENTORY_COGS_LEDGER_CODE="")
    def test_disabled_when_a_code_is_blank(self):
        voucher = post_voucher(voucher_id=self._sale().id)

        self.assertEqual(VoucherLedgerEntry.objects.filter(voucher=voucher).count(), 2)
        self.assertEqual(balance_of(self.ledgers["stock"]), Decimal("0.00"))

    @override_settings(INVENTORY_COGS_LEDGER_CODE="MISSING")
    def test_unknown_cost_ledger_fails_the_post(self):
        voucher = self._sale()

        with self.assertRaises(VoucherValidationError):
            post_voucher(voucher_id=voucher.id)

        self.assertEqual(refresh(voucher).status, Voucher.Status.DRAFT)
        self.assertFalse(VoucherLedgerEntry.objects.exists())
        self.assertEqual(refresh(self.widget).quantity_on_hand, Decimal("10.000"))
