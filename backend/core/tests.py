"""
Test suite for the core data layer
Tests: bucket endpoint, persistence facade, entity store base, ordering helpers,
site settings, admin auth gate and management commands
"""
from io import StringIO
from django.core.cache import caches
from django.core.management import call_command
from django.apps import apps
from django.conf import settings
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient
from unittest import mock
from pathlib import Path
import importlib.util
import json

from backend.core.admin_auth import (
    AdminAuth, AuthState, ADMIN_SESSION_KEY, ADMIN_USER_KEY, legacy_hash,
)
from backend.core.entity_store import EntityStore
from backend.core.kv_store import get_from_redis, set_to_redis, delete_from_redis
from backend.core.local_storage import LocalStorage
from backend.core.ordering import apply_order, ensure_order, move_item, next_order
from backend.core.site_settings import SiteSettingsStore, DEFAULT_SITE_SETTINGS, SETTINGS_KEY
from backend.core.test_utils import (
    TEST_CACHES, TestDataFactory, APIClientSession, StatusSession,
)
from backend.core.utils import generate_id, parse_datetime_value

FAST_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

HOUR_MS = 60 * 60 * 1000


class WidgetStore(EntityStore):
    storage_key = 'test_widgets'
    default_items = [
        {'id': '1', 'name': 'First'},
        {'id': '2', 'name': 'Second'},
    ]


class EmptyStore(EntityStore):
    storage_key = 'test_empty'
    default_items = []


@override_settings(CACHES=TEST_CACHES)
class KVStoreTests(TestCase):
    """Test JSON encoding in the bucket store"""

    def setUp(self):
        TestDataFactory.clear_caches()

    def test_missing_key_returns_none(self):
        self.assertIsNone(get_from_redis('nothing_here'))

    def test_set_and_get(self):
        set_to_redis('bucket', [{'id': '1'}])
        self.assertEqual(get_from_redis('bucket'), [{'id': '1'}])

    def test_values_stored_as_json_strings(self):
        set_to_redis('bucket', {'a': 1})
        self.assertEqual(json.loads(caches['default'].get('bucket')), {'a': 1})

    def test_malformed_json_treated_as_absent(self):
        caches['default'].set('broken', '{not json', None)
        self.assertIsNone(get_from_redis('broken'))

    def test_delete(self):
        set_to_redis('bucket', [1])
        delete_from_redis('bucket')
        self.assertIsNone(get_from_redis('bucket'))

    def test_last_write_wins(self):
        set_to_redis('bucket', [1, 2, 3])
        set_to_redis('bucket', ['replaced'])
        self.assertEqual(get_from_redis('bucket'), ['replaced'])


@override_settings(CACHES=TEST_CACHES)
class DataEndpointTests(TestCase):
    """Test GET/POST /api/data"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.client = APIClient()

    def test_get_requires_key(self):
        response = self.client.get('/api/data')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {'error': 'Key is required'})

    def test_get_missing_bucket_returns_empty_list(self):
        response = self.client.get('/api/data', {'key': 'goldenglass_products'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'data': [], 'exists': False})

    def test_post_then_get(self):
        payload = {'key': 'goldenglass_products', 'data': [{'id': '1', 'name': 'X'}]}
        response = self.client.post('/api/data', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {'success': True})

        response = self.client.get('/api/data', {'key': 'goldenglass_products'})
        self.assertEqual(response.json(), {'data': [{'id': '1', 'name': 'X'}], 'exists': True})

    def test_stored_empty_list_is_reported_as_existing(self):
        self.client.post('/api/data', {'key': 'goldenglass_coupons', 'data': []}, format='json')
        response = self.client.get('/api/data', {'key': 'goldenglass_coupons'})
        self.assertEqual(response.json(), {'data': [], 'exists': True})

    def test_post_requires_key(self):
        response = self.client.post('/api/data', {'data': [1]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json(), {'error': 'Key is required'})

    def test_post_requires_data(self):
        response = self.client.post('/api/data', {'key': 'bucket'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_post_rejects_non_object_body(self):
        response = self.client.post('/api/data', [1, 2], format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_post_rejects_malformed_json(self):
        response = self.client.post('/api/data', '{"key": ', content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.json())

    def test_get_store_failure_returns_500(self):
        with mock.patch('backend.core.views.get_from_redis', side_effect=ConnectionError('redis down')):
            response = self.client.get('/api/data', {'key': 'bucket'})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json(), {'error': 'Failed to fetch data'})

    def test_post_store_failure_returns_500(self):
        with mock.patch('backend.core.views.set_to_redis', side_effect=ConnectionError('redis down')):
            response = self.client.post('/api/data', {'key': 'bucket', 'data': [1]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json(), {'error': 'Failed to save data'})


@override_settings(CACHES=TEST_CACHES)
class DataServiceTests(TestCase):
    """Test the persistence facade against the endpoint and its local fallback"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()
        self.local = LocalStorage()

    def test_fetch_unwritten_key_returns_fallback(self):
        for key in ('goldenglass_products', 'goldenglass_settings', 'anything'):
            fallback = {'marker': key}
            self.assertEqual(self.service.fetch_data(key, fallback), fallback)

    def test_save_then_fetch_round_trip(self):
        values = [[], [{'id': '1'}], {'siteTitle': 'X'}, 'text', 0, False]
        for value in values:
            self.assertTrue(self.service.save_data('bucket', value))
            self.assertEqual(self.service.fetch_data('bucket', 'fallback'), value)

    def test_save_mirrors_to_local_storage(self):
        self.service.save_data('goldenglass_products', [{'id': '1'}])
        self.assertEqual(json.loads(self.local.get_item('goldenglass_products')), [{'id': '1'}])

    def test_save_is_full_overwrite(self):
        self.service.save_data('bucket', [{'id': '1'}, {'id': '2'}])
        self.service.save_data('bucket', [{'id': '3'}])
        self.assertEqual(self.service.fetch_data('bucket', None), [{'id': '3'}])

    def test_offline_save_returns_false_but_mirrors(self):
        offline = TestDataFactory.create_offline_data_service()
        self.assertFalse(offline.save_data('bucket', [{'id': '9'}]))
        self.assertEqual(json.loads(self.local.get_item('bucket')), [{'id': '9'}])
        self.assertIsNone(get_from_redis('bucket'))

    def test_offline_fetch_reads_local_mirror(self):
        self.local.set_item('bucket', json.dumps([{'id': 'local'}]))
        offline = TestDataFactory.create_offline_data_service()
        self.assertEqual(offline.fetch_data('bucket', []), [{'id': 'local'}])

    def test_offline_fetch_without_mirror_returns_fallback(self):
        offline = TestDataFactory.create_offline_data_service()
        self.assertEqual(offline.fetch_data('bucket', ['fallback']), ['fallback'])

    def test_offline_fetch_with_malformed_mirror_returns_fallback(self):
        self.local.set_item('bucket', '[not json')
        offline = TestDataFactory.create_offline_data_service()
        self.assertEqual(offline.fetch_data('bucket', ['fallback']), ['fallback'])

    def test_server_error_falls_back_to_local(self):
        self.local.set_item('bucket', json.dumps(['cached']))
        service = TestDataFactory.create_data_service(session=StatusSession(500))
        self.assertEqual(service.fetch_data('bucket', []), ['cached'])
        self.assertFalse(service.save_data('bucket', ['new']))
        self.assertEqual(json.loads(self.local.get_item('bucket')), ['new'])

    def test_unserializable_value_is_not_saved(self):
        session = APIClientSession()
        service = TestDataFactory.create_data_service(session=session)
        self.assertFalse(service.save_data('bucket', {'bad': object()}))
        self.assertEqual(session.calls, [])

    def test_fetch_sends_key_as_query_param(self):
        session = APIClientSession()
        service = TestDataFactory.create_data_service(session=session)
        service.fetch_data('goldenglass_pages', [])
        self.assertEqual(session.calls, [('GET', {'key': 'goldenglass_pages'})])


@override_settings(CACHES=TEST_CACHES)
class EntityStoreTests(TestCase):
    """Test the generic load/add/update/delete pattern"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()

    def test_requires_storage_key(self):
        with self.assertRaises(ValueError):
            EntityStore(self.service)

    def test_load_seeds_empty_bucket_with_defaults(self):
        store = WidgetStore(self.service)
        items = store.load()
        self.assertEqual([w['id'] for w in items], ['1', '2'])
        self.assertFalse(store.is_loading)
        self.assertEqual(get_from_redis('test_widgets'), WidgetStore.default_items)

    def test_load_seeds_stored_empty_list(self):
        set_to_redis('test_widgets', [])
        store = WidgetStore(self.service)
        self.assertEqual(len(store.load()), 2)
        self.assertEqual(len(get_from_redis('test_widgets')), 2)

    def test_load_keeps_stored_data(self):
        set_to_redis('test_widgets', [{'id': '7', 'name': 'Stored'}])
        store = WidgetStore(self.service)
        self.assertEqual(store.load(), [{'id': '7', 'name': 'Stored'}])

    def test_load_without_defaults_does_not_write(self):
        store = EmptyStore(self.service)
        self.assertEqual(store.load(), [])
        self.assertIsNone(get_from_redis('test_empty'))

    def test_defaults_are_not_shared_between_stores(self):
        first = WidgetStore(self.service)
        first.load()
        first.items[0]['name'] = 'Mutated'
        self.assertEqual(WidgetStore.default_items[0]['name'], 'First')

    def test_add_generates_unique_id_and_persists(self):
        store = WidgetStore(self.service)
        store.load()
        record = store.add({'name': 'Third'})
        self.assertNotIn(record['id'], ('1', '2'))
        self.assertEqual(len(get_from_redis('test_widgets')), 3)

    def test_add_ignores_caller_supplied_id(self):
        store = WidgetStore(self.service)
        store.load()
        record = store.add({'id': '1', 'name': 'Duplicate'})
        self.assertNotEqual(record['id'], '1')

    def test_rapid_adds_get_distinct_ids(self):
        store = EmptyStore(self.service)
        store.load()
        ids = [store.add({'n': i})['id'] for i in range(20)]
        self.assertEqual(len(set(ids)), 20)

    def test_update_merges_fields(self):
        store = WidgetStore(self.service)
        store.load()
        updated = store.update('1', {'name': 'Renamed', 'color': 'red'})
        self.assertEqual(updated, {'id': '1', 'name': 'Renamed', 'color': 'red'})
        self.assertEqual(get_from_redis('test_widgets')[0]['name'], 'Renamed')

    def test_update_cannot_change_id(self):
        store = WidgetStore(self.service)
        store.load()
        store.update('1', {'id': '99'})
        self.assertIsNotNone(store.get('1'))
        self.assertIsNone(store.get('99'))

    def test_delete_rewrites_bucket(self):
        store = WidgetStore(self.service)
        store.load()
        store.delete('1')
        self.assertEqual(get_from_redis('test_widgets'), [{'id': '2', 'name': 'Second'}])

    def test_offline_changes_are_optimistic_and_tracked(self):
        store = WidgetStore(TestDataFactory.create_offline_data_service())
        store.load()
        record = store.add({'name': 'Offline'})
        self.assertEqual(len(store.items), 3)
        self.assertIn(record['id'], store.unsynced_ids)

    def test_sync_retries_unsynced_writes(self):
        store = WidgetStore(TestDataFactory.create_offline_data_service())
        store.load()
        store.add({'name': 'Offline'})
        store.data_service = self.service
        self.assertTrue(store.sync())
        self.assertEqual(store.unsynced_ids, set())
        self.assertEqual(len(get_from_redis('test_widgets')), 3)


class OrderingTests(TestCase):
    """Test order helpers shared by categories and banners"""

    def test_ensure_order_fills_missing_values(self):
        items = [
            {'id': 'a', 'order': 1},
            {'id': 'b'},
            {'id': 'c', 'order': 0},
            {'id': 'd', 'parent_id': 'a'},
        ]
        result = {i['id']: i['order'] for i in ensure_order(items, 'parent_id')}
        self.assertEqual(result, {'c': 0, 'a': 1, 'b': 2, 'd': 0})

    def test_next_order(self):
        items = [{'id': 'a', 'order': 0}, {'id': 'b', 'order': 4}, {'id': 'c', 'parent_id': 'a', 'order': 0}]
        self.assertEqual(next_order(items, None, 'parent_id'), 5)
        self.assertEqual(next_order(items, 'a', 'parent_id'), 1)
        self.assertEqual(next_order(items, 'zzz', 'parent_id'), 0)

    def test_move_item_swaps_and_normalises(self):
        items = [{'id': 'a', 'order': 3}, {'id': 'b', 'order': 7}, {'id': 'c', 'order': 9}]
        moved = move_item(items, 'c', -1)
        self.assertEqual({i['id']: i['order'] for i in moved}, {'a': 0, 'b': 2, 'c': 1})

    def test_move_item_at_edge_returns_none(self):
        items = [{'id': 'a', 'order': 0}, {'id': 'b', 'order': 1}]
        self.assertIsNone(move_item(items, 'a', -1))
        self.assertIsNone(move_item(items, 'b', 1))
        self.assertIsNone(move_item(items, 'missing', 1))

    def test_apply_order_leaves_others(self):
        items = [{'id': 'a', 'order': 5}, {'id': 'b', 'order': 5}, {'id': 'x', 'order': 9}]
        result = apply_order(items, ['b', 'a'])
        self.assertEqual([i['order'] for i in result], [1, 0, 9])


class UtilsTests(TestCase):

    def test_generate_id_skips_existing(self):
        with mock.patch('backend.core.utils.now_ms', return_value=1000):
            self.assertEqual(generate_id(['1000', '1001']), '1002')

    def test_parse_datetime_value(self):
        self.assertIsNone(parse_datetime_value(None))
        self.assertIsNone(parse_datetime_value('not a date'))
        parsed = parse_datetime_value('2024-05-01T10:00:00.000Z')
        self.assertEqual((parsed.year, parsed.month, parsed.hour), (2024, 5, 10))
        self.assertIsNotNone(parse_datetime_value('2024-05-01').tzinfo)


@override_settings(CACHES=TEST_CACHES)
class SiteSettingsTests(TestCase):
    """Test settings merge and persistence"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()

    def test_load_defaults_when_absent(self):
        store = SiteSettingsStore(self.service)
        self.assertEqual(store.load(), DEFAULT_SITE_SETTINGS)

    def test_load_merges_stored_over_defaults(self):
        set_to_redis(SETTINGS_KEY, {'siteTitle': 'Custom', 'shippingCost': 79})
        loaded = SiteSettingsStore(self.service).load()
        self.assertEqual(loaded['siteTitle'], 'Custom')
        self.assertEqual(loaded['shippingCost'], 79)
        self.assertEqual(loaded['currency'], 'TRY')

    def test_empty_list_sentinel_is_ignored(self):
        set_to_redis(SETTINGS_KEY, [])
        self.assertEqual(SiteSettingsStore(self.service).load(), DEFAULT_SITE_SETTINGS)

    def test_update_settings_merges_and_persists(self):
        store = SiteSettingsStore(self.service)
        store.load()
        store.update_settings({'announcementBarActive': False})
        stored = get_from_redis(SETTINGS_KEY)
        self.assertFalse(stored['announcementBarActive'])
        self.assertEqual(stored['siteTitle'], DEFAULT_SITE_SETTINGS['siteTitle'])
        self.assertFalse(store.unsynced)

    def test_shipping_cost(self):
        store = SiteSettingsStore(self.service)
        store.load()
        self.assertEqual(store.shipping_cost_for(1000), 0)
        self.assertEqual(store.shipping_cost_for(999), 49)


@override_settings(CACHES=TEST_CACHES, PASSWORD_HASHERS=FAST_HASHERS, ADMIN_SESSION_TTL_HOURS=24)
class AdminAuthTests(TestCase):
    """Test the admin gate state machine and credential checks"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.local = LocalStorage()
        self.now = 1_700_000_000_000
        self.auth = AdminAuth(local_storage=self.local, clock=lambda: self.now)

    def store_session(self, age_ms):
        self.local.set_item(ADMIN_SESSION_KEY, json.dumps({
            'timestamp': self.now - age_ms,
            'username': 'admin',
        }))

    def test_first_load_creates_default_admin(self):
        self.assertEqual(self.auth.load(), AuthState.UNAUTHENTICATED)
        stored = json.loads(self.local.get_item(ADMIN_USER_KEY))
        self.assertEqual(stored['username'], 'admin')
        self.assertNotEqual(stored['passwordHash'], 'admin123')

    def test_login_with_default_credentials(self):
        self.auth.load()
        self.assertTrue(self.auth.login('admin', 'admin123'))
        self.assertTrue(self.auth.is_authenticated)
        session = json.loads(self.local.get_item(ADMIN_SESSION_KEY))
        self.assertEqual(session, {'timestamp': self.now, 'username': 'admin'})
        self.assertIn('lastLogin', json.loads(self.local.get_item(ADMIN_USER_KEY)))

    def test_login_rejects_wrong_password_or_username(self):
        self.auth.load()
        self.assertFalse(self.auth.login('admin', 'wrong'))
        self.assertFalse(self.auth.login('root', 'admin123'))
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.local.get_item(ADMIN_SESSION_KEY))

    def test_session_one_hour_old_is_valid(self):
        self.auth.load()
        self.store_session(1 * HOUR_MS)
        self.assertEqual(self.auth.load(), AuthState.AUTHENTICATED)

    def test_session_25_hours_old_is_expired(self):
        self.auth.load()
        self.store_session(25 * HOUR_MS)
        self.assertEqual(self.auth.load(), AuthState.UNAUTHENTICATED)
        self.assertIsNone(self.local.get_item(ADMIN_SESSION_KEY))

    def test_expiry_only_checked_on_load(self):
        self.auth.load()
        self.auth.login('admin', 'admin123')
        self.now += 48 * HOUR_MS
        self.assertTrue(self.auth.is_authenticated)
        self.assertEqual(self.auth.load(), AuthState.UNAUTHENTICATED)

    def test_malformed_session_is_discarded(self):
        self.auth.load()
        self.local.set_item(ADMIN_SESSION_KEY, '{broken')
        self.assertEqual(self.auth.load(), AuthState.UNAUTHENTICATED)

    def test_logout(self):
        self.auth.load()
        self.auth.login('admin', 'admin123')
        self.auth.logout()
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.local.get_item(ADMIN_SESSION_KEY))

    def test_change_password(self):
        self.auth.load()
        self.assertFalse(self.auth.change_password('wrong', 'new-secret'))
        self.assertTrue(self.auth.change_password('admin123', 'new-secret'))
        self.assertFalse(self.auth.login('admin', 'admin123'))
        self.assertTrue(self.auth.login('admin', 'new-secret'))

    def test_update_username(self):
        self.auth.load()
        self.assertFalse(self.auth.update_username('owner', 'wrong'))
        self.assertTrue(self.auth.update_username('owner', 'admin123'))
        self.assertEqual(self.auth.user['username'], 'owner')
        self.assertTrue(self.auth.login('owner', 'admin123'))

    def test_legacy_hash_accepted_and_upgraded(self):
        self.local.set_item(ADMIN_USER_KEY, json.dumps({
            'username': 'admin',
            'passwordHash': legacy_hash('old-password'),
            'createdAt': timezone.now().isoformat(),
        }))
        self.auth.load()
        self.assertTrue(self.auth.login('admin', 'old-password'))
        stored = json.loads(self.local.get_item(ADMIN_USER_KEY))
        self.assertNotEqual(stored['passwordHash'], legacy_hash('old-password'))
        self.assertTrue(self.auth.login('admin', 'old-password'))

    def test_legacy_hash_shape(self):
        self.assertEqual(legacy_hash(''), '0')
        self.assertEqual(legacy_hash('a'), '2p')
        self.assertEqual(legacy_hash('admin123'), legacy_hash('admin123'))
        self.assertNotEqual(legacy_hash('admin123'), legacy_hash('admin124'))

    def test_login_without_stored_user_fails(self):
        self.assertFalse(self.auth.login('admin', 'admin123'))


@override_settings(CACHES=TEST_CACHES)
class ManagementCommandTests(TestCase):
    """Test seed_defaults, clear_buckets and test_cache"""

    def setUp(self):
        TestDataFactory.clear_caches()

    def test_seed_defaults_fills_empty_buckets(self):
        call_command('seed_defaults', stdout=StringIO())
        self.assertEqual(len(get_from_redis('goldenglass_products')), 4)
        self.assertEqual(len(get_from_redis('goldenglass_pages')), 7)
        self.assertEqual(get_from_redis(SETTINGS_KEY), DEFAULT_SITE_SETTINGS)

    def test_seed_defaults_skips_existing_unless_forced(self):
        set_to_redis('goldenglass_products', [{'id': 'mine'}])
        call_command('seed_defaults', stdout=StringIO())
        self.assertEqual(get_from_redis('goldenglass_products'), [{'id': 'mine'}])

        call_command('seed_defaults', force=True, stdout=StringIO())
        self.assertEqual(len(get_from_redis('goldenglass_products')), 4)

    def test_clear_buckets(self):
        set_to_redis('goldenglass_products', [{'id': '1'}])
        set_to_redis('goldenglass_orders', [{'id': 'GG-1'}])
        call_command('clear_buckets', confirm=True, stdout=StringIO())
        self.assertIsNone(get_from_redis('goldenglass_products'))
        self.assertIsNone(get_from_redis('goldenglass_orders'))

    def test_clear_single_bucket(self):
        set_to_redis('goldenglass_products', [{'id': '1'}])
        set_to_redis('goldenglass_orders', [{'id': 'GG-1'}])
        call_command('clear_buckets', confirm=True, keys=['goldenglass_orders'], stdout=StringIO())
        self.assertIsNotNone(get_from_redis('goldenglass_products'))
        self.assertIsNone(get_from_redis('goldenglass_orders'))

    def test_test_cache_command(self):
        out = StringIO()
        call_command('test_cache', stdout=out)
        self.assertIn('ALL TESTS PASSED', out.getvalue())


class RunnerScriptTests(TestCase):
    """Test Doc/run_tests.py stays in step with the installed apps"""

    def load_runner(self):
        path = Path(settings.BASE_DIR) / 'Doc' / 'run_tests.py'
        spec = importlib.util.spec_from_file_location('run_tests', path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def test_labels_cover_every_backend_app(self):
        runner = self.load_runner()
        backend_apps = sorted(
            config.name for config in apps.get_app_configs() if config.name.startswith('backend.')
        )
        self.assertEqual(sorted(runner.TEST_LABELS), backend_apps)

    def test_coverage_flag_supported(self):
        source = (Path(settings.BASE_DIR) / 'Doc' / 'run_tests.py').read_text(encoding='utf-8')
        self.assertIn("'--coverage'", source)
        self.assertIn('coverage.Coverage', source)
