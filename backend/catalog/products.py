"""
Product catalog store.

Products are kept in the goldenglass_products bucket. Besides CRUD the store
answers the storefront's listing queries (category pages, search, the
filter sidebar) from memory.
"""
import logging

from backend.core.entity_store import EntityStore
from backend.core.utils import now_iso, parse_datetime_value

logger = logging.getLogger(__name__)

PRODUCTS_KEY = 'goldenglass_products'

STATUS_CHOICES = [
    ('Active', 'Active'),
    ('Draft', 'Draft'),
    ('OutOfStock', 'Out of stock'),
]

# Option name under which sizes are listed
SIZE_OPTION_NAME = 'Ölçü'

SORT_CHOICES = ['default', 'price-asc', 'price-desc', 'name-asc', 'newest']

DEFAULT_PRODUCTS = [
    {
        'id': '1',
        'name': 'Cosmic Dreams Glass Art',
        'sku': 'GL-8832',
        'stock': 12,
        'price': 1250,
        'oldPrice': 1500,
        'status': 'Active',
        'category': 'soyut',
        'description': 'Uzay temalı modern cam tablo. UV baskı teknolojisi ile üretilmiştir.',
        'images': ['https://images.unsplash.com/photo-1579783902614-a3fb39279c78?w=800'],
        'isNew': True,
        'options': [
            {
                'id': 'opt1',
                'name': SIZE_OPTION_NAME,
                'values': [
                    {'value': '30x40', 'priceDiff': 0},
                    {'value': '50x70', 'priceDiff': 200},
                    {'value': '70x100', 'priceDiff': 500},
                ],
            }
        ],
        'technicalSpecs': 'Malzeme: 4mm Temperli Cam\nBaskı: UV Baskı (Tersten)\nMontaj: Çelik Asma Aparatı\nKenar: Rodajlı Güvenli Kesim',
    },
    {
        'id': '2',
        'name': 'Golden Waves Abstract',
        'sku': 'GL-9921',
        'stock': 5,
        'price': 2100,
        'status': 'Active',
        'category': 'modern',
        'description': 'Altın dalgalar soyut tasarım.',
        'images': ['https://images.unsplash.com/photo-1582201942988-13e60e4556ee?w=800'],
        'isBestseller': True,
        'options': [],
    },
    {
        'id': '3',
        'name': 'Nature Harmony Set',
        'sku': 'GL-1120',
        'stock': 8,
        'price': 850,
        'status': 'Active',
        'category': 'doga',
        'description': 'Doğa temalı üçlü set.',
        'images': ['https://images.unsplash.com/photo-1580137189272-c9379f8864fd?w=800'],
    },
    {
        'id': '4',
        'name': 'Islamic Calligraphy',
        'sku': 'GL-3342',
        'stock': 2,
        'price': 3500,
        'status': 'Active',
        'category': 'islami',
        'description': 'Hat sanatı özel koleksiyon.',
        'images': ['https://images.unsplash.com/photo-1584553181813-25c282650059?w=800'],
    },
]


def product_sizes(product):
    """Size values offered by a product's size option"""
    sizes = []
    for option in product.get('options') or []:
        if option.get('name') == SIZE_OPTION_NAME:
            sizes.extend(v.get('value') for v in option.get('values') or [])
    return sizes


def _created_at_key(product):
    parsed = parse_datetime_value(product.get('createdAt'))
    return parsed.timestamp() if parsed else 0


class ProductStore(EntityStore):
    storage_key = PRODUCTS_KEY
    default_items = DEFAULT_PRODUCTS

    def build_record(self, data):
        record = dict(data)
        record['createdAt'] = now_iso()
        return record

    def get_product(self, product_id):
        return self.get(product_id)

    def active_products(self):
        return [p for p in self.items if p.get('status') == 'Active']

    def get_products_by_category(self, category_slug):
        """Active products in a category"""
        return [p for p in self.active_products() if p.get('category') == category_slug]

    def search(self, query):
        """
        Case-insensitive match on name, category slug or description.

        An empty query returns no results.
        """
        if not query:
            return []
        needle = query.lower()
        return [
            p for p in self.items
            if needle in (p.get('name') or '').lower()
            or needle in (p.get('category') or '').lower()
            or needle in (p.get('description') or '').lower()
        ]

    def available_sizes(self):
        """Distinct sizes across active products, in first-seen order"""
        seen = []
        for product in self.active_products():
            for size in product_sizes(product):
                if size not in seen:
                    seen.append(size)
        return seen

    def available_categories(self):
        seen = []
        for product in self.active_products():
            if product.get('category') not in seen:
                seen.append(product.get('category'))
        return seen

    def filter_products(self, category=None, size=None, min_price=None, max_price=None, sort_by='default'):
        """
        Listing used by the all-products page.

        Only active products are considered; 'all' or None disables the
        category and size filters.
        """
        filtered = self.active_products()

        if category and category != 'all':
            filtered = [p for p in filtered if p.get('category') == category]

        if size and size != 'all':
            filtered = [p for p in filtered if size in product_sizes(p)]

        if min_price is not None:
            filtered = [p for p in filtered if (p.get('price') or 0) >= min_price]
        if max_price is not None:
            filtered = [p for p in filtered if (p.get('price') or 0) <= max_price]

        if sort_by == 'price-asc':
            filtered.sort(key=lambda p: p.get('price') or 0)
        elif sort_by == 'price-desc':
            filtered.sort(key=lambda p: p.get('price') or 0, reverse=True)
        elif sort_by == 'name-asc':
            filtered.sort(key=lambda p: (p.get('name') or '').lower())
        elif sort_by == 'newest':
            filtered.sort(key=_created_at_key, reverse=True)
        elif sort_by not in (None, 'default'):
            logger.debug(f"Unknown sort option {sort_by}, keeping stored order")

        return filtered
