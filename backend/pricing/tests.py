"""
Test suite for coupons
Tests: validation order, expiry, usage limits, minimum amounts, discount calculation and usage counting
"""
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from django.test import TestCase, override_settings

from backend.core.kv_store import get_from_redis
from backend.core.test_utils import TEST_CACHES, TestDataFactory
from backend.pricing.coupons import (
    CouponStore, COUPONS_KEY, calculate_discount, validate_coupon,
    NOT_FOUND, INACTIVE, EXPIRED, USAGE_LIMIT_REACHED, BELOW_MINIMUM,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)


def coupon(**overrides):
    data = TestDataFactory.coupon_data(code='SAVE10')
    data.update({'id': '1', 'usedCount': 0})
    data.update(overrides)
    return data


class ValidateCouponTests(TestCase):
    """Test validate_coupon as a pure function"""

    def test_valid_coupon(self):
        result = validate_coupon([coupon()], 'SAVE10', 500, now=NOW)
        self.assertTrue(result.valid)
        self.assertIsNone(result.error)
        self.assertEqual(result.coupon['code'], 'SAVE10')

    def test_code_lookup_is_case_insensitive(self):
        self.assertTrue(validate_coupon([coupon()], 'save10', 500, now=NOW).valid)

    def test_unknown_code(self):
        result = validate_coupon([coupon()], 'NOPE', 500, now=NOW)
        self.assertFalse(result.valid)
        self.assertEqual(result.reason, NOT_FOUND)
        self.assertEqual(result.error, 'Coupon code not found')

    def test_empty_code(self):
        self.assertEqual(validate_coupon([coupon()], '', 500, now=NOW).reason, NOT_FOUND)

    def test_inactive(self):
        result = validate_coupon([coupon(isActive=False)], 'SAVE10', 500, now=NOW)
        self.assertEqual(result.reason, INACTIVE)

    def test_expired(self):
        result = validate_coupon([coupon(expiresAt='2025-05-31T23:59:59Z')], 'SAVE10', 500, now=NOW)
        self.assertEqual(result.reason, EXPIRED)
        self.assertEqual(result.error, 'This coupon has expired')

    def test_future_expiry_is_valid(self):
        self.assertTrue(validate_coupon([coupon(expiresAt='2025-12-31')], 'SAVE10', 500, now=NOW).valid)

    def test_unparseable_expiry_is_ignored(self):
        self.assertTrue(validate_coupon([coupon(expiresAt='someday')], 'SAVE10', 500, now=NOW).valid)

    def test_usage_limit(self):
        result = validate_coupon([coupon(maxUses=3, usedCount=3)], 'SAVE10', 500, now=NOW)
        self.assertEqual(result.reason, USAGE_LIMIT_REACHED)
        self.assertTrue(validate_coupon([coupon(maxUses=3, usedCount=2)], 'SAVE10', 500, now=NOW).valid)

    def test_zero_max_uses_is_unlimited(self):
        self.assertTrue(validate_coupon([coupon(maxUses=0, usedCount=500)], 'SAVE10', 500, now=NOW).valid)

    def test_minimum_order_amount(self):
        result = validate_coupon([coupon(minOrderAmount=1000)], 'SAVE10', 999, now=NOW)
        self.assertEqual(result.reason, BELOW_MINIMUM)
        self.assertEqual(result.error, 'Minimum order amount is 1000 TL')
        self.assertTrue(validate_coupon([coupon(minOrderAmount=1000)], 'SAVE10', 1000, now=NOW).valid)

    def test_first_failing_check_wins(self):
        """Inactive is reported before expiry, expiry before usage, usage before minimum"""
        everything_wrong = coupon(
            isActive=False, expiresAt='2020-01-01', maxUses=1, usedCount=1, minOrderAmount=10000,
        )
        self.assertEqual(validate_coupon([everything_wrong], 'SAVE10', 1, now=NOW).reason, INACTIVE)

        everything_wrong['isActive'] = True
        self.assertEqual(validate_coupon([everything_wrong], 'SAVE10', 1, now=NOW).reason, EXPIRED)

        del everything_wrong['expiresAt']
        self.assertEqual(validate_coupon([everything_wrong], 'SAVE10', 1, now=NOW).reason, USAGE_LIMIT_REACHED)

        everything_wrong['maxUses'] = 0
        self.assertEqual(validate_coupon([everything_wrong], 'SAVE10', 1, now=NOW).reason, BELOW_MINIMUM)

    def test_deterministic(self):
        coupons = [coupon(minOrderAmount=200)]
        results = {validate_coupon(coupons, 'SAVE10', 150, now=NOW).reason for _ in range(5)}
        self.assertEqual(results, {BELOW_MINIMUM})


class CalculateDiscountTests(TestCase):

    def test_percentage(self):
        self.assertEqual(calculate_discount(coupon(discountValue=15), 2000), Decimal('300'))

    def test_fixed(self):
        self.assertEqual(calculate_discount(coupon(discountType='fixed', discountValue=250), 2000), Decimal('250'))

    def test_discount_never_exceeds_subtotal(self):
        self.assertEqual(calculate_discount(coupon(discountType='fixed', discountValue=500), 300), Decimal('300'))
        self.assertEqual(calculate_discount(coupon(discountValue=150), 300), Decimal('300'))


@override_settings(CACHES=TEST_CACHES)
class CouponStoreTests(TestCase):
    """Test coupon persistence and usage counting"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = CouponStore(TestDataFactory.create_data_service())
        self.store.load()

    def test_add_coupon_resets_usage(self):
        data = TestDataFactory.coupon_data(code='WELCOME')
        data['usedCount'] = 42
        created = self.store.add(data)
        self.assertEqual(created['usedCount'], 0)
        self.assertIn('createdAt', created)
        self.assertEqual(get_from_redis(COUPONS_KEY)[0]['code'], 'WELCOME')

    def test_apply_coupon_increments_usage(self):
        self.store.add(TestDataFactory.coupon_data(code='ONCE', max_uses=1))
        self.assertTrue(self.store.validate_coupon('once', 100).valid)

        self.assertTrue(self.store.apply_coupon('ONCE'))
        self.assertEqual(self.store.get_by_code('ONCE')['usedCount'], 1)
        self.assertEqual(get_from_redis(COUPONS_KEY)[0]['usedCount'], 1)
        self.assertEqual(self.store.validate_coupon('ONCE', 100).reason, USAGE_LIMIT_REACHED)

    def test_apply_unknown_coupon(self):
        self.assertFalse(self.store.apply_coupon('GHOST'))
        self.assertIsNone(get_from_redis(COUPONS_KEY))

    def test_store_validation_uses_current_time(self):
        self.store.add(TestDataFactory.coupon_data(code='OLD', expires_at='2000-01-01T00:00:00Z'))
        self.assertEqual(self.store.validate_coupon('OLD', 100).reason, EXPIRED)
