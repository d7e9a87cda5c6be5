"""
Test suite for the catalog
Tests: product listing queries, category tree ordering and deletion, review moderation and ratings
"""
from django.test import TestCase, override_settings

from backend.core.kv_store import get_from_redis, set_to_redis
from backend.core.test_utils import TEST_CACHES, TestDataFactory
from backend.catalog.categories import CategoryStore, CATEGORIES_KEY
from backend.catalog.products import ProductStore, PRODUCTS_KEY, product_sizes
from backend.catalog.reviews import ReviewStore, REVIEWS_KEY


def ids(items):
    return [item['id'] for item in items]


@override_settings(CACHES=TEST_CACHES)
class ProductStoreTests(TestCase):
    """Test product CRUD and storefront queries"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = ProductStore(TestDataFactory.create_data_service())
        self.store.load()

    def test_empty_bucket_loads_defaults(self):
        self.assertEqual(ids(self.store.items), ['1', '2', '3', '4'])
        self.assertEqual(len(get_from_redis(PRODUCTS_KEY)), 4)

    def test_add_product(self):
        """A new product gets an id distinct from the defaults"""
        product = self.store.add(TestDataFactory.product_data(name='Sunset Panel'))
        self.assertEqual(len(self.store), 5)
        self.assertNotIn(product['id'], ['1', '2', '3', '4'])
        self.assertEqual(get_from_redis(PRODUCTS_KEY)[-1]['name'], 'Sunset Panel')

    def test_reload_sees_persisted_changes(self):
        self.store.update('2', {'price': 1999})
        self.store.delete('4')
        reloaded = ProductStore(TestDataFactory.create_data_service())
        reloaded.load()
        self.assertEqual(ids(reloaded.items), ['1', '2', '3'])
        self.assertEqual(reloaded.get_product('2')['price'], 1999)

    def test_products_by_category_only_active(self):
        self.store.add(TestDataFactory.product_data(category='modern', status='Draft'))
        self.assertEqual(ids(self.store.get_products_by_category('modern')), ['2'])
        self.assertEqual(self.store.get_products_by_category('missing'), [])

    def test_search(self):
        self.assertEqual(ids(self.store.search('glass')), ['1'])
        self.assertEqual(ids(self.store.search('DOGA')), ['3'])
        self.assertEqual(ids(self.store.search('hat sanatı')), ['4'])
        self.assertEqual(self.store.search(''), [])

    def test_available_sizes_and_categories(self):
        self.assertEqual(self.store.available_sizes(), ['30x40', '50x70', '70x100'])
        self.assertEqual(self.store.available_categories(), ['soyut', 'modern', 'doga', 'islami'])

    def test_product_sizes_without_options(self):
        self.assertEqual(product_sizes(self.store.get_product('3')), [])

    def test_filter_by_size_and_price(self):
        self.assertEqual(ids(self.store.filter_products(size='50x70')), ['1'])
        self.assertEqual(ids(self.store.filter_products(min_price=1000, max_price=2500)), ['1', '2'])
        self.assertEqual(ids(self.store.filter_products(category='all', size='all')), ['1', '2', '3', '4'])

    def test_filter_sorting(self):
        self.assertEqual(ids(self.store.filter_products(sort_by='price-asc')), ['3', '1', '2', '4'])
        self.assertEqual(ids(self.store.filter_products(sort_by='price-desc')), ['4', '2', '1', '3'])
        self.assertEqual(ids(self.store.filter_products(sort_by='name-asc')), ['1', '2', '4', '3'])

    def test_filter_newest_first(self):
        self.store.update('3', {'createdAt': '2025-03-01T00:00:00Z'})
        self.store.update('2', {'createdAt': '2025-01-01T00:00:00Z'})
        self.assertEqual(ids(self.store.filter_products(sort_by='newest'))[:2], ['3', '2'])

    def test_added_product_is_newest(self):
        """Products created through the store carry createdAt and sort ahead of older ones"""
        self.store.update('3', {'createdAt': '2025-03-01T00:00:00Z'})
        product = self.store.add(TestDataFactory.product_data(name='Fresh Panel'))
        self.assertIn('createdAt', product)
        self.assertEqual(ids(self.store.filter_products(sort_by='newest'))[0], product['id'])

    def test_non_list_bucket_replaced_by_defaults(self):
        set_to_redis(PRODUCTS_KEY, {'not': 'a list'})
        store = ProductStore(TestDataFactory.create_data_service())
        self.assertEqual(len(store.load()), 4)


@override_settings(CACHES=TEST_CACHES)
class CategoryStoreTests(TestCase):
    """Test category tree ordering"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()
        self.store = CategoryStore(self.service)
        self.store.load()

    def orders(self, group):
        return [(c['id'], c['order']) for c in group]

    def test_defaults(self):
        self.assertEqual(ids(self.store.get_root_categories()), ['1', '2', '3'])
        self.assertEqual(ids(self.store.get_subcategories('3')), ['4', '5'])
        self.assertEqual(self.store.get_by_slug('manzara')['parent_id'], '3')

    def test_reorder_root_category_up(self):
        self.assertTrue(self.store.reorder_category('2', 'up'))
        self.assertEqual(self.orders(self.store.get_root_categories()), [('2', 0), ('1', 1), ('3', 2)])
        stored = {c['id']: c['order'] for c in get_from_redis(CATEGORIES_KEY)}
        self.assertEqual((stored['1'], stored['2']), (1, 0))

    def test_reorder_subcategory_left(self):
        self.assertTrue(self.store.reorder_category('5', 'left'))
        self.assertEqual(self.orders(self.store.get_subcategories('3')), [('5', 0), ('4', 1)])
        # Root group untouched
        self.assertEqual(self.orders(self.store.get_root_categories()), [('1', 0), ('2', 1), ('3', 2)])

    def test_reorder_at_edges_is_noop(self):
        self.assertFalse(self.store.reorder_category('1', 'up'))
        self.assertFalse(self.store.reorder_category('3', 'down'))
        self.assertFalse(self.store.reorder_category('6', 'right'))
        self.assertFalse(self.store.reorder_category('missing', 'up'))
        self.assertFalse(self.store.reorder_category('2', 'sideways'))

    def test_orders_stay_contiguous_after_moves(self):
        for category_id, direction in [('3', 'up'), ('3', 'up'), ('1', 'down')]:
            self.store.reorder_category(category_id, direction)
        orders = sorted(c['order'] for c in self.store.get_root_categories())
        self.assertEqual(orders, [0, 1, 2])

    def test_add_appends_to_sibling_group(self):
        root = self.store.add({'name': 'Islami', 'slug': 'islami', 'order': 0})
        child = self.store.add({'name': 'Deniz', 'slug': 'deniz', 'parent_id': '3'})
        self.assertEqual(root['order'], 3)
        self.assertEqual(child['order'], 2)

    def test_delete_removes_children(self):
        self.store.delete('3')
        self.assertEqual(ids(self.store.items), ['1', '2', '6'])
        self.assertEqual(ids(get_from_redis(CATEGORIES_KEY)), ['1', '2', '6'])

    def test_missing_order_filled_and_saved(self):
        set_to_redis(CATEGORIES_KEY, [
            {'id': 'a', 'name': 'A', 'slug': 'a'},
            {'id': 'b', 'name': 'B', 'slug': 'b', 'order': 0},
        ])
        store = CategoryStore(self.service)
        store.load()
        self.assertEqual({c['id']: c['order'] for c in store.items}, {'a': 1, 'b': 0})
        self.assertTrue(all('order' in c for c in get_from_redis(CATEGORIES_KEY)))


@override_settings(CACHES=TEST_CACHES)
class ReviewStoreTests(TestCase):
    """Test review moderation and rating calculation"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = ReviewStore(TestDataFactory.create_data_service())
        self.store.load()

    def add_approved(self, product_id, *ratings):
        for rating in ratings:
            review = self.store.add(TestDataFactory.review_data(product_id=product_id, rating=rating))
            self.store.approve_review(review['id'])

    def test_empty_bucket_stays_empty(self):
        self.assertEqual(self.store.items, [])
        self.assertIsNone(get_from_redis(REVIEWS_KEY))

    def test_new_review_pending(self):
        review = self.store.add(TestDataFactory.review_data())
        self.assertFalse(review['isApproved'])
        self.assertIn('createdAt', review)
        self.assertEqual(self.store.pending_count, 1)
        self.assertEqual(self.store.get_product_reviews('1'), [])

    def test_client_cannot_pre_approve(self):
        data = TestDataFactory.review_data()
        data['isApproved'] = True
        self.assertFalse(self.store.add(data)['isApproved'])

    def test_approve_and_reject(self):
        review = self.store.add(TestDataFactory.review_data())
        self.store.approve_review(review['id'])
        self.assertEqual(len(self.store.get_product_reviews('1')), 1)
        self.store.reject_review(review['id'])
        self.assertEqual(self.store.get_product_reviews('1'), [])

    def test_rating_without_reviews(self):
        self.assertEqual(self.store.get_product_rating('1'), {'average': 0, 'count': 0})

    def test_rating_rounds_to_one_decimal(self):
        self.add_approved('1', 5, 4, 4)
        self.assertEqual(self.store.get_product_rating('1'), {'average': 4.3, 'count': 3})

    def test_rating_rounds_half_up(self):
        self.add_approved('2', 4, 5, 5, 5)
        self.assertEqual(self.store.get_product_rating('2'), {'average': 4.8, 'count': 4})

    def test_rating_ignores_pending_and_other_products(self):
        self.add_approved('1', 2)
        self.store.add(TestDataFactory.review_data(product_id='1', rating=5))
        self.add_approved('3', 5)
        self.assertEqual(self.store.get_product_rating('1'), {'average': 2.0, 'count': 1})
