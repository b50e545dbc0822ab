from django.contrib import admin

from .models import Client, ClientCrossSell, Dog, Location


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0


class DogInline(admin.TabularInline):
    model = Dog
    extra = 0


class ClientCrossSellInline(admin.TabularInline):
    model = ClientCrossSell
    extra = 0


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ["__str__", "organization", "client_type", "status", "email"]
    list_filter = ["organization", "client_type", "status"]
    search_fields = ["first_name", "last_name", "company_name", "email"]
    inlines = [LocationInline, DogInline, ClientCrossSellInline]
