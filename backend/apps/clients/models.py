"""Client models."""
from django.db import models

from apps.core.models import OrganizationModel


class Client(OrganizationModel):
    """A residential or commercial customer of the scooping service."""

    class ClientType(models.TextChoices):
        RESIDENTIAL = "RESIDENTIAL", "Residential"
        COMMERCIAL = "COMMERCIAL", "Commercial"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"
        CANCELED = "CANCELED", "Canceled"

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    client_type = models.CharField(
        max_length=20,
        choices=ClientType.choices,
        default=ClientType.RESIDENTIAL,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self) -> str:
        if self.company_name:
            return self.company_name
        return f"{self.first_name} {self.last_name}".strip()


class Location(OrganizationModel):
    """A service address belonging to a client."""

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="locations",
    )
    address_line1 = models.CharField(max_length=255)
    address_line2 = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=50, blank=True)
    zip_code = models.CharField(max_length=10)
    is_primary = models.BooleanField(default=True)

    class Meta:
        ordering = ["client", "-is_primary", "id"]

    def __str__(self):
        return f"{self.address_line1}, {self.city} {self.zip_code}"


class Dog(OrganizationModel):
    """A dog at a client's property. Active dogs label invoice lines."""

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="dogs",
    )
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["client", "name"]

    def __str__(self):
        return self.name


class ClientCrossSell(OrganizationModel):
    """A recurring add-on billed to a client alongside their service."""

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        PAUSED = "PAUSED", "Paused"
        CANCELED = "CANCELED", "Canceled"

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="cross_sells",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    unit = models.CharField(max_length=50, blank=True)
    price_per_unit_cents = models.IntegerField(default=0)
    quantity = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["client", "id"]

    def __str__(self):
        return f"{self.name} ({self.client})"

    @property
    def total_cents(self) -> int:
        return self.quantity * self.price_per_unit_cents
