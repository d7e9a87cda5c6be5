"""
Base class for the entity stores.

An entity store owns one bucket: it loads the whole collection through the
persistence facade, serves derived queries from memory, and on every change
rewrites the complete collection. Changes are applied in memory before the
write is confirmed and are never rolled back; ids touched by a failed write
are tracked in unsynced_ids until sync() succeeds.
"""
import copy
import logging

from .data_service import get_data_service
from .utils import generate_id

logger = logging.getLogger(__name__)


class EntityStore:
    """CRUD over a list-valued bucket of dicts keyed by "id" """

    storage_key = None
    default_items = []
    # New records go to the front of the collection when True
    prepend_new = False

    def __init__(self, data_service=None):
        if not self.storage_key:
            raise ValueError(f"{type(self).__name__} must define storage_key")
        self.data_service = data_service or get_data_service()
        self.items = self.get_defaults()
        self.is_loading = True
        self.unsynced_ids = set()

    def get_defaults(self):
        return copy.deepcopy(self.default_items)

    # ---- loading ----

    def load(self):
        """Load the bucket, seeding it with defaults the first time it is empty"""
        data = self.data_service.fetch_data(self.storage_key, None)
        defaults = self.get_defaults()

        if not isinstance(data, list) or (not data and defaults):
            if data is not None and not isinstance(data, list):
                logger.warning(f"Bucket {self.storage_key} holds {type(data).__name__}, expected list; using defaults")
            self.items = defaults
            if defaults:
                logger.info(f"Seeding {self.storage_key} with {len(defaults)} default records")
                self.data_service.save_data(self.storage_key, self.items)
        else:
            self.items = self.prepare_loaded(data)

        self.is_loading = False
        return self.items

    def prepare_loaded(self, items):
        """Hook for stores that normalise records after loading"""
        return items

    # ---- persistence ----

    def persist(self, new_items, touched_ids=()) -> bool:
        """Replace the in-memory collection and write it back"""
        self.items = new_items
        saved = self.data_service.save_data(self.storage_key, new_items)
        if saved:
            self.unsynced_ids.clear()
        else:
            self.unsynced_ids.update(touched_ids)
            logger.warning(f"Write to {self.storage_key} failed; {len(self.unsynced_ids)} record(s) unsynced")
        return saved

    def sync(self) -> bool:
        """Retry writing the current collection"""
        if not self.unsynced_ids:
            return True
        return self.persist(list(self.items), self.unsynced_ids)

    # ---- CRUD ----

    def new_id(self) -> str:
        return generate_id(item.get('id') for item in self.items)

    def build_record(self, data):
        """Hook for stores adding generated fields to new records"""
        return dict(data)

    def add(self, data):
        record = self.build_record(data)
        record['id'] = self.new_id()
        if self.prepend_new:
            new_items = [record] + list(self.items)
        else:
            new_items = list(self.items) + [record]
        self.persist(new_items, [record['id']])
        return record

    def update(self, item_id, updates):
        new_items = [
            {**item, **updates, 'id': item['id']} if item.get('id') == item_id else item
            for item in self.items
        ]
        self.persist(new_items, [item_id])
        return self.get(item_id)

    def delete(self, item_id):
        new_items = [item for item in self.items if item.get('id') != item_id]
        self.persist(new_items, [item_id])

    def get(self, item_id):
        return next((item for item in self.items if item.get('id') == item_id), None)

    def all(self):
        return list(self.items)

    def __len__(self):
        return len(self.items)
