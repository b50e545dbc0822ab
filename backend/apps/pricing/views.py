"""REST views for public price quotes."""
import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.organizations.models import Organization
from apps.pricing.frequencies import UnknownFrequencyError
from apps.pricing.quotes import PricingQuoteService

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class PricingQuoteView(View):
    """Unauthenticated quote endpoint used by the marketing site."""

    def get(self, request):
        """
        Quote a service configuration for the default organization.

        Query parameters:
            zipCode: Service zip code (required)
            numberOfDogs: Positive integer (required)
            frequency: Service frequency or a known alias (required)
            lastCleaned: Initial cleanup bracket, e.g. "two_months" (optional)
        """
        zip_code = request.GET.get("zipCode", "")
        number_of_dogs = request.GET.get("numberOfDogs", "")
        frequency = request.GET.get("frequency", "")
        last_cleaned = request.GET.get("lastCleaned") or None

        if not zip_code or not number_of_dogs or not frequency:
            return JsonResponse(
                {"error": "Missing required parameters: zipCode, numberOfDogs, frequency"},
                status=400,
            )

        try:
            dog_count = int(number_of_dogs)
        except ValueError:
            return JsonResponse({"error": "numberOfDogs must be an integer"}, status=400)
        if dog_count < 1:
            return JsonResponse({"error": "numberOfDogs must be at least 1"}, status=400)

        organization = Organization.objects.filter(
            slug=settings.DEFAULT_ORGANIZATION_SLUG, is_active=True
        ).first()
        if organization is None:
            logger.error(
                "Default organization %r not found", settings.DEFAULT_ORGANIZATION_SLUG
            )
            return JsonResponse({"error": "Service configuration error"}, status=500)

        try:
            quote = PricingQuoteService(organization).quote(
                zip_code=zip_code,
                number_of_dogs=dog_count,
                frequency=frequency,
                last_cleaned=last_cleaned,
            )
        except UnknownFrequencyError as e:
            return JsonResponse({"error": str(e)}, status=400)

        return JsonResponse(quote.as_dict())
