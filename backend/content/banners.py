"""
Homepage hero banners.

Banners form a single ordered group; reorder_banners takes the full new
sequence of ids and renumbers order 0..n-1.
"""
import logging

from backend.core.entity_store import EntityStore
from backend.core.ordering import REORDER_STEPS, apply_order, move_item, next_order, siblings_of

logger = logging.getLogger(__name__)

BANNERS_KEY = 'goldenglass_banners'

DEFAULT_BANNERS = [
    {
        'id': '1',
        'title': 'Modern Cam Duvar Sanatı',
        'subtitle': 'Evinizin havasını değiştirecek premium tasarımlar',
        'cta': 'Koleksiyonu Keşfet',
        'link': '/collections/modern',
        'image': 'https://images.unsplash.com/photo-1580137189272-c9379f8864fd?auto=format&fit=crop&q=80&w=2000',
        'isActive': True,
        'order': 0,
    },
    {
        'id': '2',
        'title': 'Doğanın Renkleri',
        'subtitle': 'Canlı ve kırılmaz cam baskı teknolojisi',
        'cta': 'Doğa Koleksiyonu',
        'link': '/collections/nature',
        'image': 'https://images.unsplash.com/photo-1513519245088-0e12902e5a38?auto=format&fit=crop&q=80&w=2000',
        'isActive': True,
        'order': 1,
    },
]


class BannerStore(EntityStore):
    storage_key = BANNERS_KEY
    default_items = DEFAULT_BANNERS

    def build_record(self, data):
        record = dict(data)
        if record.get('order') is None:
            record['order'] = next_order(self.items, None)
        return record

    def reorder_banners(self, ordered_ids) -> bool:
        """
        Apply a new banner sequence.

        ordered_ids must name every banner exactly once; anything else is
        rejected without writing.
        """
        ordered_ids = [b['id'] if isinstance(b, dict) else b for b in ordered_ids]
        current_ids = [b.get('id') for b in self.items]
        if sorted(ordered_ids) != sorted(current_ids):
            logger.warning("reorder_banners: id set does not match stored banners")
            return False

        positions = {banner_id: idx for idx, banner_id in enumerate(ordered_ids)}
        new_items = sorted(apply_order(self.items, ordered_ids), key=lambda b: positions[b['id']])
        self.persist(new_items, ordered_ids)
        return True

    def move_banner(self, banner_id, direction) -> bool:
        """Move a banner one step; unknown directions and edge moves return False"""
        step = REORDER_STEPS.get(direction)
        if step is None:
            logger.warning(f"Unknown banner move direction: {direction}")
            return False
        new_items = move_item(self.items, banner_id, step)
        if new_items is None:
            return False
        self.persist(new_items, [b.get('id') for b in new_items])
        return True

    def get_ordered_banners(self):
        return siblings_of(self.items, None, None)

    def get_active_banners(self):
        return [b for b in self.get_ordered_banners() if b.get('isActive')]
