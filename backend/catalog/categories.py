"""
Category tree store.

Categories form a two-level tree through parent_id. Position within a
sibling group is held in "order"; reordering renumbers the whole group.
"""
import logging

from backend.core.entity_store import EntityStore
from backend.core.ordering import REORDER_STEPS, ensure_order, move_item, next_order, siblings_of

logger = logging.getLogger(__name__)

CATEGORIES_KEY = 'goldenglass_categories'

PARENT_FIELD = 'parent_id'

DEFAULT_CATEGORIES = [
    {'id': '1', 'name': 'Modern Art', 'slug': 'modern', 'image': 'https://images.unsplash.com/photo-1549887552-93f8efb87228?auto=format&fit=crop&q=80&w=300', 'order': 0},
    {'id': '2', 'name': 'Nature', 'slug': 'nature', 'image': 'https://images.unsplash.com/photo-1470071459604-3b5ec3a7fe05?auto=format&fit=crop&q=80&w=300', 'order': 1},
    {'id': '3', 'name': 'Doğa', 'slug': 'doga', 'image': 'https://images.unsplash.com/photo-1518173946687-a4c8892bbd9f?w=800', 'order': 2},
    {'id': '4', 'name': 'Manzara', 'slug': 'manzara', 'parent_id': '3', 'order': 0},
    {'id': '5', 'name': 'Hayvanlar', 'slug': 'hayvanlar', 'parent_id': '3', 'order': 1},
    {'id': '6', 'name': 'Soyut Sanat', 'slug': 'soyut-sanat', 'parent_id': '2', 'order': 0},
]


class CategoryStore(EntityStore):
    storage_key = CATEGORIES_KEY
    default_items = DEFAULT_CATEGORIES

    def prepare_loaded(self, items):
        with_order = ensure_order(items, PARENT_FIELD)
        if with_order != items:
            # Write back so stored records carry their order
            logger.info(f"Filled missing order values in {self.storage_key}")
            self.data_service.save_data(self.storage_key, with_order)
        return with_order

    def build_record(self, data):
        record = {k: v for k, v in data.items() if k not in ('id', 'order')}
        record['order'] = next_order(self.items, record.get(PARENT_FIELD) or None, PARENT_FIELD)
        return record

    def delete(self, item_id):
        """Delete a category together with its direct subcategories"""
        removed = [c.get('id') for c in self.items if c.get('id') == item_id or c.get(PARENT_FIELD) == item_id]
        new_items = [c for c in self.items if c.get('id') not in removed]
        self.persist(new_items, removed)

    def reorder_category(self, item_id, direction) -> bool:
        """
        Move a category one step within its sibling group.

        Returns False (and writes nothing) for an unknown id or direction,
        or when the category is already first/last.
        """
        step = REORDER_STEPS.get(direction)
        if step is None:
            logger.warning(f"Unknown reorder direction: {direction}")
            return False

        new_items = move_item(self.items, item_id, step, PARENT_FIELD)
        if new_items is None:
            return False

        parent = (self.get(item_id) or {}).get(PARENT_FIELD) or None
        touched = [c.get('id') for c in siblings_of(new_items, parent, PARENT_FIELD)]
        self.persist(new_items, touched)
        return True

    def get_root_categories(self):
        return siblings_of(self.items, None, PARENT_FIELD)

    def get_subcategories(self, parent_id):
        return siblings_of(self.items, parent_id, PARENT_FIELD)

    def get_by_slug(self, slug):
        return next((c for c in self.items if c.get('slug') == slug), None)
