# vouchers/api/urls.py

"""
VOUCHER API URLS

Mounted at /api/vouchers/ by backend/urls.py.
SimpleRouter with an empty prefix: the list lives at the mount point itself.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from vouchers.api.viewsets import VoucherViewSet

router = SimpleRouter()
router.register(r"", VoucherViewSet, basename="voucher")

urlpatterns = [
    path("", include(router.urls)),
]
