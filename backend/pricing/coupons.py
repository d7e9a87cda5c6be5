"""
Discount coupons.

validate_coupon is pure: given the same coupon set, order total and clock
it always returns the same result. Checks run in a fixed order and the
first failure wins: existence, active flag, expiry, usage limit, minimum
order amount.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from django.utils import timezone
import logging

from backend.core.entity_store import EntityStore
from backend.core.utils import now_iso, parse_datetime_value

logger = logging.getLogger(__name__)

COUPONS_KEY = 'goldenglass_coupons'

DISCOUNT_TYPE_CHOICES = [
    ('percentage', 'Percentage'),
    ('fixed', 'Fixed Amount'),
]

# Failure reasons, in the order they are checked
NOT_FOUND = 'not_found'
INACTIVE = 'inactive'
EXPIRED = 'expired'
USAGE_LIMIT_REACHED = 'usage_limit_reached'
BELOW_MINIMUM = 'below_minimum'


@dataclass
class CouponValidation:
    valid: bool
    error: Optional[str] = None
    reason: Optional[str] = None
    coupon: Optional[dict] = None


def find_coupon(coupons, code):
    """Case-insensitive lookup by code"""
    if not code:
        return None
    needle = code.lower()
    return next((c for c in coupons if (c.get('code') or '').lower() == needle), None)


def validate_coupon(coupons, code, order_total, now=None) -> CouponValidation:
    coupon = find_coupon(coupons, code)
    if coupon is None:
        return CouponValidation(False, 'Coupon code not found', NOT_FOUND)

    if not coupon.get('isActive'):
        return CouponValidation(False, 'This coupon is no longer valid', INACTIVE)

    expires_at = parse_datetime_value(coupon.get('expiresAt'))
    if expires_at is not None and expires_at < (now or timezone.now()):
        return CouponValidation(False, 'This coupon has expired', EXPIRED)

    max_uses = coupon.get('maxUses') or 0
    if max_uses > 0 and (coupon.get('usedCount') or 0) >= max_uses:
        return CouponValidation(False, 'Coupon usage limit reached', USAGE_LIMIT_REACHED)

    min_order = coupon.get('minOrderAmount') or 0
    if order_total < min_order:
        return CouponValidation(False, f'Minimum order amount is {min_order} TL', BELOW_MINIMUM)

    return CouponValidation(True, coupon=coupon)


def calculate_discount(coupon, subtotal):
    """Discount for a subtotal, never more than the subtotal itself"""
    subtotal = Decimal(str(subtotal))
    value = Decimal(str(coupon.get('discountValue') or 0))
    if coupon.get('discountType') == 'percentage':
        discount = subtotal * value / Decimal('100')
    else:
        discount = value
    return min(discount, subtotal)


class CouponStore(EntityStore):
    storage_key = COUPONS_KEY
    default_items = []

    def build_record(self, data):
        record = dict(data)
        record['usedCount'] = 0
        record['createdAt'] = now_iso()
        return record

    def get_by_code(self, code):
        return find_coupon(self.items, code)

    def validate_coupon(self, code, order_total, now=None) -> CouponValidation:
        return validate_coupon(self.items, code, order_total, now=now)

    def apply_coupon(self, code) -> bool:
        """Count one use of a coupon; unknown codes are ignored"""
        coupon = self.get_by_code(code)
        if coupon is None:
            logger.debug(f"apply_coupon: unknown code {code}")
            return False
        self.update(coupon['id'], {'usedCount': (coupon.get('usedCount') or 0) + 1})
        return True
