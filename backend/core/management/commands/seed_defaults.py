"""
Management command to seed empty buckets with the storefront defaults
Usage: python manage.py seed_defaults [--force]
"""
import copy
from django.core.management.base import BaseCommand

from backend.core.kv_store import get_from_redis, set_to_redis
from backend.core.site_settings import SETTINGS_KEY, DEFAULT_SITE_SETTINGS
from backend.catalog.products import ProductStore
from backend.catalog.categories import CategoryStore
from backend.content.messages import MessageStore
from backend.content.banners import BannerStore
from backend.content.pages import PageStore
from backend.content.blog import BlogStore, BLOG_SETTINGS_KEY, DEFAULT_BLOG_SETTINGS
from backend.orders.bank_accounts import BankAccountStore

SEEDED_STORES = [
    ProductStore,
    CategoryStore,
    MessageStore,
    BannerStore,
    PageStore,
    BlogStore,
    BankAccountStore,
]


def default_buckets():
    """(key, default value) for every bucket that ships with defaults"""
    buckets = [(store.storage_key, copy.deepcopy(store.default_items)) for store in SEEDED_STORES]
    buckets.append((SETTINGS_KEY, copy.deepcopy(DEFAULT_SITE_SETTINGS)))
    buckets.append((BLOG_SETTINGS_KEY, copy.deepcopy(DEFAULT_BLOG_SETTINGS)))
    return buckets


class Command(BaseCommand):
    help = "Seeds empty storefront buckets with their default data"

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Overwrite buckets that already hold data',
        )

    def handle(self, *args, **options):
        force = options['force']

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING DEFAULT BUCKETS"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        seeded_count = 0
        skipped_count = 0

        for key, value in default_buckets():
            existing = get_from_redis(key)
            if existing and not force:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already has data): {key}"))
                continue

            set_to_redis(key, value)
            seeded_count += 1
            self.stdout.write(self.style.SUCCESS(f"  ✓ Seeded: {key}"))

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 80))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"Buckets Seeded: {seeded_count}")
        self.stdout.write(f"Buckets Skipped: {skipped_count}")
