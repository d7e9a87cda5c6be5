"""Contact form messages shown in the admin inbox"""
from backend.core.entity_store import EntityStore
from backend.core.utils import now_iso

MESSAGES_KEY = 'goldenglass_messages'

DEFAULT_MESSAGES = [
    {
        'id': '1',
        'name': 'Ahmet Yılmaz',
        'email': 'ahmet@example.com',
        'message': 'Merhaba, özel ölçü siparişi verebiliyor muyuz?',
        'date': '2025-01-01T09:00:00+00:00',
        'isRead': False,
    }
]


class MessageStore(EntityStore):
    storage_key = MESSAGES_KEY
    default_items = DEFAULT_MESSAGES
    prepend_new = True

    def build_record(self, data):
        record = dict(data)
        record['date'] = now_iso()
        record['isRead'] = False
        return record

    def mark_as_read(self, message_id):
        return self.update(message_id, {'isRead': True})

    @property
    def unread_count(self) -> int:
        return sum(1 for m in self.items if not m.get('isRead'))
