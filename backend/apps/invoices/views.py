"""REST views for scheduled invoice generation."""
import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.core.auth import bearer_matches_secret
from apps.invoices.generation import MonthlyInvoiceGenerator

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class GenerateMonthlyInvoicesView(View):
    """Trigger for an external scheduler.

    Requires ``Authorization: Bearer <CRON_SECRET>``. Without a configured
    secret the endpoint refuses to run at all.
    """

    def get(self, request):
        if not settings.CRON_SECRET:
            logger.error("CRON_SECRET is not configured; refusing to generate invoices")
            return JsonResponse({"error": "Cron secret not configured"}, status=500)

        if not bearer_matches_secret(request, settings.CRON_SECRET):
            return JsonResponse({"error": "Unauthorized"}, status=401)

        try:
            report = MonthlyInvoiceGenerator().run()
        except DatabaseError:
            logger.exception("Failed to fetch organizations for invoice generation")
            return JsonResponse({"error": "Failed to fetch organizations"}, status=500)

        return JsonResponse(report.as_dict())

    def post(self, request):
        return self.get(request)
