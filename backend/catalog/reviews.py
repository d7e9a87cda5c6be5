"""Customer product reviews with admin moderation"""
from decimal import Decimal, ROUND_HALF_UP
from backend.core.entity_store import EntityStore
from backend.core.utils import now_iso

REVIEWS_KEY = 'goldenglass_reviews'


class ReviewStore(EntityStore):
    storage_key = REVIEWS_KEY
    default_items = []

    def build_record(self, data):
        record = dict(data)
        record['isApproved'] = False
        record['createdAt'] = now_iso()
        return record

    def approve_review(self, review_id):
        return self.update(review_id, {'isApproved': True})

    def reject_review(self, review_id):
        return self.update(review_id, {'isApproved': False})

    def get_product_reviews(self, product_id):
        """Approved reviews for a product"""
        return [r for r in self.items if r.get('productId') == product_id and r.get('isApproved')]

    def get_product_rating(self, product_id):
        """Average rating (one decimal) and count over approved reviews"""
        reviews = self.get_product_reviews(product_id)
        if not reviews:
            return {'average': 0, 'count': 0}
        total = sum(r.get('rating') or 0 for r in reviews)
        return {
            'average': float(Decimal(str(total / len(reviews))).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)),
            'count': len(reviews),
        }

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self.items if not r.get('isApproved'))
