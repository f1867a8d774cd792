# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.views.chart import AccountGroupViewSet, LedgerViewSet
from accounting.api.views.trial_balance import TrialBalanceView

router = DefaultRouter()
router.register("groups", AccountGroupViewSet, basename="account-group")
router.register("ledgers", LedgerViewSet, basename="ledger")

urlpatterns = [
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    # Router endpoints
    path("", include(router.urls)),
]
