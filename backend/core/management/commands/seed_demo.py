"""
Django management command to seed a fresh database with demo data:
one supplier, two customers, two products and an opening purchase.
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal
from backend.catalog.models import Product
from backend.parties.models import Customer, Supplier
from backend.purchasing.services import post_purchase


class Command(BaseCommand):
    help = 'Seed demo suppliers, customers, products and an opening purchase (only when no products exist)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Seed even if products already exist',
        )

    def handle(self, *args, **options):
        if Product.objects.exists() and not options['force']:
            self.stdout.write(self.style.WARNING("Products already exist, skipping demo seed. Use --force to seed anyway."))
            return

        with transaction.atomic():
            supplier = Supplier.objects.create(
                name='Al Abdullah Farm',
                phone='0501234567',
                address='Al Kharj Road',
                notes='Spunta potatoes, grade one',
            )
            Customer.objects.create(
                name='Al Madinah Bukhari Restaurant',
                phone='0559876543',
                address='Riyadh - Al Malaz',
                credit_limit=Decimal('5000.00'),
                notes='Pays weekly',
            )
            Customer.objects.create(
                name='Al Amanah Buffet',
                phone='0543211234',
                address='Riyadh - Al Olaya',
                credit_limit=Decimal('1000.00'),
                notes='New customer',
            )
            spunta = Product.objects.create(
                name='Spunta Potatoes',
                unit='25kg bag',
                current_stock=Decimal('50.00'),
                reorder_level=Decimal('20.00'),
            )
            cara = Product.objects.create(
                name='Cara Potatoes (frying)',
                unit='20kg bag',
                current_stock=Decimal('10.00'),
                reorder_level=Decimal('15.00'),
            )

            purchase = post_purchase({
                'supplier': supplier,
                'total_cost': Decimal('2500.00'),
                'transport_cost': Decimal('200.00'),
                'labor_cost': Decimal('100.00'),
                'notes': 'Season opening stock',
            }, [
                {'product': spunta, 'quantity': Decimal('50'), 'unit_price': Decimal('40'), 'total_price': Decimal('2000')},
                {'product': cara, 'quantity': Decimal('20'), 'unit_price': Decimal('25'), 'total_price': Decimal('500')},
            ])

        self.stdout.write(self.style.SUCCESS(
            f"Seeded supplier {supplier.id}, 2 customers, 2 products and purchase {purchase.id}"
        ))
