"""Storefront-wide settings kept as a single dict bucket"""
import copy
import logging

from .data_service import get_data_service

logger = logging.getLogger(__name__)

SETTINGS_KEY = 'goldenglass_settings'

DEFAULT_SITE_SETTINGS = {
    'siteTitle': 'Golden Glass 777',
    'description': "Türkiye'nin en büyük cam tablo mağazası.",
    'email': 'info@goldenglass777.com.tr',
    'phone': '+90 (212) 555 01 23',
    'whatsapp': '+905551234567',
    'whatsappActive': True,
    'address': 'Maslak Mahallesi, Büyükdere Caddesi, Noramin İş Merkezi No: 237/A Sarıyer / İstanbul',
    'instagram': 'goldenglass777',
    'instagramActive': True,
    'facebook': 'goldenglass777',
    'facebookActive': True,
    'twitter': 'goldenglass777',
    'twitterActive': True,
    'freeShippingLimit': 1000,
    'shippingCost': 49,
    'currency': 'TRY',
    'homepageCategoryTitle': 'Kategoriler',
    'homepageCategorySubtitle': 'Koleksiyonlarımızı keşfedin',
    'announcementBarText': '1000 TL ve Üzeri Ücretsiz Kargo | Yeni Sezon Koleksiyonu Yayında',
    'announcementBarActive': True,
}


class SiteSettingsStore:
    """Settings dict merged over defaults on load; updates merge and persist"""

    storage_key = SETTINGS_KEY

    def __init__(self, data_service=None):
        self.data_service = data_service or get_data_service()
        self.settings = copy.deepcopy(DEFAULT_SITE_SETTINGS)
        self.is_loading = True
        self.unsynced = False

    def load(self):
        stored = self.data_service.fetch_data(self.storage_key, None)
        # Anything other than a dict (including the empty-list sentinel) counts as absent
        if isinstance(stored, dict):
            self.settings = {**copy.deepcopy(DEFAULT_SITE_SETTINGS), **stored}
        else:
            self.settings = copy.deepcopy(DEFAULT_SITE_SETTINGS)
        self.is_loading = False
        return self.settings

    def update_settings(self, new_settings) -> dict:
        self.settings = {**self.settings, **new_settings}
        self.unsynced = not self.data_service.save_data(self.storage_key, self.settings)
        if self.unsynced:
            logger.warning("Site settings saved locally only")
        return self.settings

    def shipping_cost_for(self, subtotal) -> float:
        """Shipping charged for an order subtotal (free above the limit)"""
        if subtotal >= self.settings.get('freeShippingLimit', 0):
            return 0
        return self.settings.get('shippingCost') or DEFAULT_SITE_SETTINGS['shippingCost']

    def get(self, name, default=None):
        return self.settings.get(name, default)
