"""
Customer orders.

An order's id is its order number (GG-<epoch ms> unless the caller supplies
an unused one). New orders go to the front of the bucket with status
"Hazırlanıyor". Status values are the Turkish strings the storefront and
admin panel already write to the bucket.
"""
import logging

from backend.core.entity_store import EntityStore
from backend.core.utils import now_iso, now_ms

logger = logging.getLogger(__name__)

ORDERS_KEY = 'goldenglass_orders'

STATUS_PENDING = 'Beklemede'
STATUS_CONFIRMED = 'Onaylandı'
STATUS_PREPARING = 'Hazırlanıyor'
STATUS_SHIPPED = 'Kargoda'
STATUS_HANDED_TO_CARRIER = 'Kargoya Verildi'
STATUS_DELIVERED = 'Teslim Edildi'
STATUS_CANCELLED = 'İptal'
STATUS_CANCELLED_BY_ADMIN = 'İptal Edildi'

# Stored value -> display name; the admin panel uses the longer forms
STATUS_CHOICES = [
    (STATUS_PENDING, 'Pending'),
    (STATUS_CONFIRMED, 'Confirmed'),
    (STATUS_PREPARING, 'Preparing'),
    (STATUS_SHIPPED, 'Shipped'),
    (STATUS_HANDED_TO_CARRIER, 'Handed to carrier'),
    (STATUS_DELIVERED, 'Delivered'),
    (STATUS_CANCELLED, 'Cancelled'),
    (STATUS_CANCELLED_BY_ADMIN, 'Cancelled'),
]

PAYMENT_METHOD_CHOICES = [
    ('Credit Card', 'Credit Card'),
    ('Bank Transfer', 'Bank Transfer'),
]


class OrderStore(EntityStore):
    storage_key = ORDERS_KEY
    default_items = []
    prepend_new = True

    def generate_order_number(self) -> str:
        existing = {o.get('id') for o in self.items}
        stamp = now_ms()
        while f"GG-{stamp}" in existing:
            stamp += 1
        return f"GG-{stamp}"

    def add_order(self, order_data):
        """
        Create an order and put it at the front of the bucket.

        Raises ValueError when the caller supplies an order number that is
        already taken, so a resubmitted checkout cannot create a second
        record with the same id.
        """
        order_number = order_data.get('orderNumber')
        if order_number:
            if self.get(order_number) is not None:
                logger.warning(f"Rejected duplicate order number {order_number}")
                raise ValueError(f"Order number already exists: {order_number}")
        else:
            order_number = self.generate_order_number()
        order = {
            **order_data,
            'id': order_number,
            'orderNumber': order_number,
            'date': now_iso(),
            'status': STATUS_PREPARING,
        }
        self.persist([order] + list(self.items), [order_number])
        logger.info(f"Order {order_number} created")
        return order

    def add(self, data):
        return self.add_order(data)

    def update_order_status(self, order_id, status):
        valid = {choice for choice, _ in STATUS_CHOICES}
        if status not in valid:
            raise ValueError(f"Unknown order status: {status}")
        return self.update(order_id, {'status': status})

    def get_order(self, order_id):
        return self.get(order_id)

    def get_orders_by_status(self, status):
        return [o for o in self.items if o.get('status') == status]
