"""
Static CMS pages (corporate and legal).

Default pages are merged in on load: any default whose slug is missing from
the stored bucket is appended and the bucket rewritten.
"""
import copy
import logging

from backend.core.entity_store import EntityStore

logger = logging.getLogger(__name__)

PAGES_KEY = 'goldenglass_pages'

GROUP_CHOICES = [
    ('corporate', 'Corporate'),
    ('legal', 'Legal'),
]

DEFAULT_PAGES = [
    {
        'id': '1',
        'slug': 'about-us',
        'title': 'Hakkımızda',
        'content': '<h2>Biz Kimiz?</h2><p>Golden Glass 777 olarak, camın zarafetini sanatla buluşturuyoruz...</p>',
        'group': 'corporate',
    },
    {
        'id': '2',
        'slug': 'contact',
        'title': 'İletişim',
        'content': '<p>Adres: İstanbul, Türkiye</p><p>Email: info@goldenglass777.com</p>',
        'group': 'corporate',
    },
    {
        'id': '3',
        'slug': 'privacy-policy',
        'title': 'Gizlilik Politikası',
        'content': '<h2>Gizlilik Politikası</h2><p>Kişisel verileriniz bizim için önemlidir...</p>',
        'group': 'legal',
    },
    {
        'id': '4',
        'slug': 'terms-of-service',
        'title': 'Kullanım Koşulları',
        'content': '<h2>Kullanım Koşulları</h2><p>Sitemizi kullanarak...</p>',
        'group': 'legal',
    },
    {
        'id': '5',
        'slug': 'cookie-policy',
        'title': 'Çerez Politikası',
        'content': '<h2>Çerez Politikası</h2><p>Çerezler hakkında...</p>',
        'group': 'legal',
    },
    {
        'id': '6',
        'slug': 'return-policy',
        'title': 'İade Politikası',
        'content': '<h2>İade Politikası ve Şartları</h2><p>İade süreçleri...</p>',
        'group': 'legal',
    },
    {
        'id': '7',
        'slug': 'kvkk',
        'title': 'KVKK Aydınlatma Metni',
        'content': '<h2>KVKK Hakkında</h2><p>Kişisel verileriniz...</p>',
        'group': 'legal',
    },
]


class PageStore(EntityStore):
    storage_key = PAGES_KEY
    default_items = DEFAULT_PAGES

    def prepare_loaded(self, items):
        stored_slugs = {p.get('slug') for p in items}
        missing = [copy.deepcopy(p) for p in DEFAULT_PAGES if p['slug'] not in stored_slugs]
        if not missing:
            return items

        merged = list(items) + missing
        logger.info(f"Added {len(missing)} default page(s) to {self.storage_key}")
        self.data_service.save_data(self.storage_key, merged)
        return merged

    def get_page(self, slug):
        return next((p for p in self.items if p.get('slug') == slug), None)

    def get_pages_by_group(self, group):
        return [p for p in self.items if p.get('group') == group]

    def get_published_page(self, slug):
        """A page counts as published unless isPublished is explicitly False"""
        page = self.get_page(slug)
        if page is None or page.get('isPublished') is False:
            return None
        return page
