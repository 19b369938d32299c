"""
Django management command to list balances that need manual review:
negative stock (oversold products), negative debt (overpaid customers)
and customers above their credit limit. Read-only.
"""
import json
from django.core.management.base import BaseCommand
from django.db.models import F
from backend.catalog.models import Product
from backend.parties.models import Customer


class Command(BaseCommand):
    help = 'Report negative stock, negative customer debt and customers over their credit limit'

    def add_arguments(self, parser):
        parser.add_argument(
            '--json',
            action='store_true',
            help='Print the report as JSON',
        )

    def handle(self, *args, **options):
        negative_stock = Product.objects.filter(current_stock__lt=0).order_by('id')
        negative_debt = Customer.objects.filter(total_debt__lt=0).order_by('id')
        over_limit = Customer.objects.filter(total_debt__gt=F('credit_limit')).order_by('id')

        if options['json']:
            report = {
                'negative_stock': [
                    {'id': p.id, 'name': p.name, 'current_stock': str(p.current_stock)} for p in negative_stock
                ],
                'negative_debt': [
                    {'id': c.id, 'name': c.name, 'total_debt': str(c.total_debt)} for c in negative_debt
                ],
                'over_credit_limit': [
                    {'id': c.id, 'name': c.name, 'total_debt': str(c.total_debt), 'credit_limit': str(c.credit_limit)}
                    for c in over_limit
                ],
            }
            self.stdout.write(json.dumps(report, indent=2))
            return

        self.stdout.write("=" * 80)
        self.stdout.write(self.style.SUCCESS("BALANCE REVIEW"))
        self.stdout.write("=" * 80)

        self.stdout.write(f"\nProducts with negative stock: {negative_stock.count()}")
        for p in negative_stock:
            self.stdout.write(self.style.WARNING(f"  - {p.name} (ID: {p.id}): {p.current_stock} {p.unit}"))

        self.stdout.write(f"\nCustomers with negative debt: {negative_debt.count()}")
        for c in negative_debt:
            self.stdout.write(self.style.WARNING(f"  - {c.name} (ID: {c.id}): {c.total_debt}"))

        self.stdout.write(f"\nCustomers over credit limit: {over_limit.count()}")
        for c in over_limit:
            self.stdout.write(self.style.WARNING(
                f"  - {c.name} (ID: {c.id}): debt {c.total_debt} / limit {c.credit_limit}"
            ))

        if not (negative_stock.exists() or negative_debt.exists() or over_limit.exists()):
            self.stdout.write(self.style.SUCCESS("\nNothing to review."))
