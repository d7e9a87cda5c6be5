"""
Management command to delete storefront buckets from the key-value store
Usage: python manage.py clear_buckets [--confirm] [--key KEY ...]
"""
from django.core.management.base import BaseCommand

from backend.core.kv_store import delete_from_redis
from backend.core.management.commands.seed_defaults import default_buckets
from backend.catalog.reviews import ReviewStore
from backend.pricing.coupons import CouponStore
from backend.orders.orders import OrderStore


def all_bucket_keys():
    keys = [key for key, _ in default_buckets()]
    keys.extend(store.storage_key for store in (ReviewStore, CouponStore, OrderStore))
    return keys


class Command(BaseCommand):
    help = 'Delete storefront buckets (all of them unless --key is given)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--confirm',
            action='store_true',
            help='Skip confirmation prompt',
        )
        parser.add_argument(
            '--key',
            action='append',
            dest='keys',
            help='Bucket key to delete (repeatable)',
        )

    def handle(self, *args, **options):
        keys = options['keys'] or all_bucket_keys()

        if not options['confirm']:
            self.stdout.write(self.style.WARNING('⚠️  WARNING: This will delete these buckets:'))
            for key in keys:
                self.stdout.write(f'  - {key}')
            self.stdout.write('')

            confirm = input('Type "YES" to confirm: ')
            if confirm != 'YES':
                self.stdout.write(self.style.ERROR('Operation cancelled.'))
                return

        for key in keys:
            delete_from_redis(key)
            self.stdout.write(self.style.SUCCESS(f'  ✓ Deleted: {key}'))

        self.stdout.write(self.style.SUCCESS(f'\n✅ Deleted {len(keys)} bucket(s)'))
