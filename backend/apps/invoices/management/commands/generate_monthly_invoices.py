"""Management command to run monthly invoice generation by hand."""
from django.core.management.base import BaseCommand, CommandError

from apps.invoices.generation import MonthlyInvoiceGenerator
from apps.organizations.models import Organization


class Command(BaseCommand):
    help = "Create this month's recurring DRAFT invoices (safe to re-run)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            dest="slug",
            help="Only bill the organization with this slug",
        )

    def handle(self, *args, **options):
        organizations = None
        if options["slug"]:
            organizations = Organization.objects.filter(slug=options["slug"])
            if not organizations.exists():
                raise CommandError(f"Organization not found: {options['slug']}")

        report = MonthlyInvoiceGenerator().run(organizations=organizations)

        self.stdout.write(self.style.SUCCESS(report.message))
        for error in report.errors:
            self.stderr.write(self.style.ERROR(error))
