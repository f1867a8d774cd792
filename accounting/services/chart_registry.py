# accounting/services/chart_registry.py

"""
CHART OF ACCOUNTS REGISTRY (READ PATH)

Lookup helpers for account groups and ledgers.

Rules:
- READ-ONLY: no writes
- Missing ids/codes raise RecordNotFoundError (never return None)
- list_ledgers is always ordered by ledger_name (id breaks ties)
"""

from __future__ import annotations

from django.db.models import Q

from accounting.models import AccountGroup, Ledger
from accounting.services.exceptions import RecordNotFoundError


def get_group(code: str) -> AccountGroup:
    code = (code or "").strip()
    try:
        return AccountGroup.objects.get(group_code=code)
    except AccountGroup.DoesNotExist as exc:
        raise RecordNotFoundError(f"Account group '{code}' not found") from exc


def get_ledger(ledger_id) -> Ledger:
    try:
        return Ledger.objects.select_related("account_group").get(pk=ledger_id)
    except (Ledger.DoesNotExist, ValueError, TypeError) as exc:
        raise RecordNotFoundError(f"Ledger {ledger_id!r} not found") from exc


def _group_subtree_ids(group: AccountGroup) -> set:
    """The group plus every descendant, following parent links level by level."""
    ids = {group.id}
    frontier = [group.id]
    while frontier:
        frontier = list(
            AccountGroup.objects.filter(parent_id__in=frontier)
            .exclude(id__in=ids)
            .values_list("id", flat=True)
        )
        ids.update(frontier)
    return ids


def list_ledgers(
    *,
    group_code: str | None = None,
    nature: str | None = None,
    balance_type: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
):
    """
    Ledgers ordered by ledger_name.

    Filters are optional and combine with AND:
    - group_code: the group and all of its descendant groups
    - nature: account group nature (asset, liability, ...)
    - search: case-insensitive match on ledger_name or ledger_code
    """
    qs = Ledger.objects.select_related("account_group")

    if group_code:
        group = get_group(group_code)
        qs = qs.filter(account_group_id__in=_group_subtree_ids(group))

    if nature:
        qs = qs.filter(account_group__nature=nature)

    if balance_type:
        qs = qs.filter(balance_type=balance_type)

    if is_active is not None:
        qs = qs.filter(is_active=is_active)

    term = (search or "").strip()
    if term:
        qs = qs.filter(Q(ledger_name__icontains=term) | Q(ledger_code__icontains=term))

    return qs.order_by("ledger_name", "id")
