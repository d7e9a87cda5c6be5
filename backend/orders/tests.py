"""
Test suite for orders and bank accounts
Tests: order numbering, status transitions and checkout with a coupon
"""
from decimal import Decimal
from unittest import mock
from django.test import TestCase, override_settings

from backend.core.kv_store import get_from_redis, set_to_redis
from backend.core.test_utils import TEST_CACHES, TestDataFactory
from backend.orders.bank_accounts import BankAccountStore
from backend.orders.orders import (
    OrderStore, ORDERS_KEY, STATUS_DELIVERED, STATUS_PREPARING, STATUS_SHIPPED,
)
from backend.pricing.coupons import CouponStore, calculate_discount


@override_settings(CACHES=TEST_CACHES)
class OrderStoreTests(TestCase):
    """Test order creation and status updates"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()
        self.store = OrderStore(self.service)
        self.store.load()

    def test_add_order(self):
        order = self.store.add_order(TestDataFactory.order_data())
        self.assertTrue(order['orderNumber'].startswith('GG-'))
        self.assertEqual(order['id'], order['orderNumber'])
        self.assertEqual(order['status'], STATUS_PREPARING)
        self.assertEqual(get_from_redis(ORDERS_KEY)[0]['id'], order['id'])

    def test_status_cannot_be_preset(self):
        data = TestDataFactory.order_data()
        data['status'] = STATUS_DELIVERED
        self.assertEqual(self.store.add(data)['status'], STATUS_PREPARING)

    def test_order_numbers_unique_within_same_millisecond(self):
        with mock.patch('backend.orders.orders.now_ms', return_value=1700000000000):
            first = self.store.add_order(TestDataFactory.order_data())
            second = self.store.add_order(TestDataFactory.order_data())
        self.assertEqual(first['id'], 'GG-1700000000000')
        self.assertEqual(second['id'], 'GG-1700000000001')
        self.assertEqual(self.store.items[0]['id'], second['id'])

    def test_supplied_order_number_kept(self):
        order = self.store.add_order({**TestDataFactory.order_data(), 'orderNumber': 'GG-42'})
        self.assertEqual(self.store.get_order('GG-42')['id'], order['id'])

    def test_duplicate_order_number_rejected(self):
        """A resubmitted order number leaves exactly one record in the bucket"""
        self.store.add_order({**TestDataFactory.order_data(), 'orderNumber': 'GG-1'})
        with self.assertRaises(ValueError):
            self.store.add_order({**TestDataFactory.order_data(total=99), 'orderNumber': 'GG-1'})
        stored_ids = [o['id'] for o in get_from_redis(ORDERS_KEY)]
        self.assertEqual(stored_ids, ['GG-1'])
        self.assertEqual(self.store.get_order('GG-1')['total'], 1500)

    def test_status_values_match_storefront(self):
        self.assertEqual(STATUS_PREPARING, 'Hazırlanıyor')
        self.assertEqual(STATUS_SHIPPED, 'Kargoda')

    def test_orders_written_by_storefront(self):
        """Orders already in the bucket with storefront statuses are queryable and updatable"""
        set_to_redis(ORDERS_KEY, [
            {'id': 'GG-5', 'orderNumber': 'GG-5', 'status': 'Hazırlanıyor'},
            {'id': 'GG-6', 'orderNumber': 'GG-6', 'status': 'Beklemede'},
        ])
        store = OrderStore(self.service)
        store.load()
        self.assertEqual([o['id'] for o in store.get_orders_by_status(STATUS_PREPARING)], ['GG-5'])

        store.update_order_status('GG-5', 'Kargoda')
        store.update_order_status('GG-6', 'Kargoya Verildi')
        stored = {o['id']: o['status'] for o in get_from_redis(ORDERS_KEY)}
        self.assertEqual(stored, {'GG-5': STATUS_SHIPPED, 'GG-6': 'Kargoya Verildi'})

    def test_update_status(self):
        order = self.store.add_order(TestDataFactory.order_data())
        self.store.update_order_status(order['id'], STATUS_SHIPPED)
        self.assertEqual(self.store.get_orders_by_status(STATUS_SHIPPED)[0]['id'], order['id'])
        self.assertEqual(get_from_redis(ORDERS_KEY)[0]['status'], STATUS_SHIPPED)

    def test_update_unknown_status_rejected(self):
        order = self.store.add_order(TestDataFactory.order_data())
        with self.assertRaises(ValueError):
            self.store.update_order_status(order['id'], 'lost')
        self.assertEqual(self.store.get_order(order['id'])['status'], STATUS_PREPARING)

    def test_checkout_with_coupon(self):
        """Order total reflects the discount and the coupon use is counted"""
        coupons = CouponStore(self.service)
        coupons.load()
        coupons.add(TestDataFactory.coupon_data(code='YAZ20', discount_value=20, min_order_amount=1000))

        subtotal = 1500
        result = coupons.validate_coupon('YAZ20', subtotal)
        self.assertTrue(result.valid)
        discount = calculate_discount(result.coupon, subtotal)
        self.assertEqual(discount, Decimal('300'))

        order = self.store.add_order(TestDataFactory.order_data(total=float(subtotal - discount), coupon_code='YAZ20'))
        coupons.apply_coupon(order['couponCode'])
        self.assertEqual(order['total'], 1200.0)
        self.assertEqual(coupons.get_by_code('YAZ20')['usedCount'], 1)


@override_settings(CACHES=TEST_CACHES)
class BankAccountStoreTests(TestCase):

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = BankAccountStore(TestDataFactory.create_data_service())
        self.store.load()

    def test_active_accounts(self):
        self.assertEqual(len(self.store.get_active_accounts()), 1)
        self.store.update('1', {'isActive': False})
        self.assertEqual(self.store.get_active_accounts(), [])
