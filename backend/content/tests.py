"""
Test suite for site content
Tests: contact messages, banner ordering, CMS page merging and the blog
"""
from django.test import TestCase, override_settings

from backend.core.kv_store import get_from_redis, set_to_redis
from backend.core.test_utils import TEST_CACHES, TestDataFactory
from backend.content.banners import BannerStore, BANNERS_KEY
from backend.content.blog import BlogStore, BLOG_SETTINGS_KEY
from backend.content.messages import MessageStore
from backend.content.pages import PageStore, PAGES_KEY, DEFAULT_PAGES


def ids(items):
    return [item['id'] for item in items]


@override_settings(CACHES=TEST_CACHES)
class MessageStoreTests(TestCase):

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = MessageStore(TestDataFactory.create_data_service())
        self.store.load()

    def test_new_message_first_and_unread(self):
        message = self.store.add({'name': 'Zeynep', 'email': 'z@test.com', 'message': 'Merhaba', 'isRead': True})
        self.assertEqual(self.store.items[0]['id'], message['id'])
        self.assertFalse(message['isRead'])
        self.assertIn('date', message)
        self.assertEqual(self.store.unread_count, 2)

    def test_mark_as_read(self):
        self.store.mark_as_read('1')
        self.assertEqual(self.store.unread_count, 0)
        self.assertTrue(get_from_redis('goldenglass_messages')[0]['isRead'])


@override_settings(CACHES=TEST_CACHES)
class BannerStoreTests(TestCase):
    """Test banner sequence handling"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.store = BannerStore(TestDataFactory.create_data_service())
        self.store.load()
        self.store.add({'title': 'Kampanya', 'isActive': False})

    def test_new_banner_goes_last(self):
        self.assertEqual([b['order'] for b in self.store.get_ordered_banners()], [0, 1, 2])

    def test_reorder_banners(self):
        third = self.store.items[2]['id']
        self.assertTrue(self.store.reorder_banners([third, '1', '2']))
        self.assertEqual(ids(self.store.get_ordered_banners()), [third, '1', '2'])
        stored = get_from_redis(BANNERS_KEY)
        self.assertEqual([(b['id'], b['order']) for b in stored], [(third, 0), ('1', 1), ('2', 2)])

    def test_reorder_accepts_banner_dicts(self):
        reversed_banners = list(reversed(self.store.items))
        self.assertTrue(self.store.reorder_banners(reversed_banners))
        self.assertEqual(self.store.get_ordered_banners()[0]['id'], reversed_banners[0]['id'])

    def test_reorder_rejects_mismatched_ids(self):
        before = get_from_redis(BANNERS_KEY)
        self.assertFalse(self.store.reorder_banners(['1', '2']))
        self.assertFalse(self.store.reorder_banners(['1', '2', 'ghost']))
        self.assertEqual(get_from_redis(BANNERS_KEY), before)

    def test_move_banner(self):
        self.assertTrue(self.store.move_banner('2', 'up'))
        self.assertEqual(ids(self.store.get_ordered_banners())[:2], ['2', '1'])
        self.assertFalse(self.store.move_banner('2', 'up'))

    def test_move_banner_unknown_direction(self):
        before = get_from_redis(BANNERS_KEY)
        self.assertFalse(self.store.move_banner('1', 'sideways'))
        self.assertFalse(self.store.move_banner('1', None))
        self.assertEqual(get_from_redis(BANNERS_KEY), before)
        self.assertEqual(ids(self.store.get_ordered_banners())[:2], ['1', '2'])

    def test_active_banners(self):
        self.assertEqual(ids(self.store.get_active_banners()), ['1', '2'])


@override_settings(CACHES=TEST_CACHES)
class PageStoreTests(TestCase):
    """Test default page merging"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()

    def test_empty_bucket_gets_all_pages(self):
        store = PageStore(self.service)
        store.load()
        self.assertEqual(len(store.items), len(DEFAULT_PAGES))
        self.assertEqual(len(store.get_pages_by_group('legal')), 5)

    def test_missing_defaults_are_appended(self):
        set_to_redis(PAGES_KEY, [
            {'id': '1', 'slug': 'about-us', 'title': 'Edited', 'content': '<p>Ours</p>', 'group': 'corporate'},
            {'id': '99', 'slug': 'faq', 'title': 'SSS', 'content': '', 'group': 'corporate'},
        ])
        store = PageStore(self.service)
        store.load()
        self.assertEqual(store.get_page('about-us')['title'], 'Edited')
        self.assertIsNotNone(store.get_page('faq'))
        self.assertIsNotNone(store.get_page('kvkk'))
        self.assertEqual(len(get_from_redis(PAGES_KEY)), 8)

    def test_unpublished_page_hidden(self):
        store = PageStore(self.service)
        store.load()
        store.update('7', {'isPublished': False})
        self.assertIsNone(store.get_published_page('kvkk'))
        self.assertIsNotNone(store.get_published_page('contact'))
        self.assertIsNone(store.get_published_page('missing'))


@override_settings(CACHES=TEST_CACHES)
class BlogStoreTests(TestCase):
    """Test blog posts and blog settings"""

    def setUp(self):
        TestDataFactory.clear_caches()
        self.service = TestDataFactory.create_data_service()
        self.store = BlogStore(self.service)
        self.store.load()

    def test_defaults(self):
        self.assertTrue(self.store.blog_enabled)
        self.assertEqual(self.store.blog_title, 'Blog')
        self.assertIsNotNone(self.store.get_post_by_slug('cam-tablo-secerken-dikkat-edilmesi-gerekenler'))

    def test_new_post_first_with_zero_views(self):
        post = self.store.add({
            'title': 'Yeni', 'slug': 'yeni', 'isPublished': True,
            'publishedAt': '2025-02-01T10:00:00Z', 'views': 50,
        })
        self.assertEqual(self.store.items[0]['id'], post['id'])
        self.assertEqual(post['views'], 0)

    def test_published_posts_newest_first(self):
        self.store.add({'title': 'Draft', 'slug': 'draft', 'isPublished': False, 'publishedAt': '2025-06-01'})
        self.store.add({'title': 'Old', 'slug': 'old', 'isPublished': True, 'publishedAt': '2023-01-01'})
        self.store.add({'title': 'New', 'slug': 'new', 'isPublished': True, 'publishedAt': '2025-01-01'})
        slugs = [p['slug'] for p in self.store.get_published_posts()]
        self.assertEqual(slugs, ['new', 'cam-tablo-secerken-dikkat-edilmesi-gerekenler', 'old'])

    def test_blog_settings_persist(self):
        self.assertTrue(self.store.set_blog_enabled(False))
        self.assertTrue(self.store.set_blog_title('Günlük'))
        self.assertEqual(get_from_redis(BLOG_SETTINGS_KEY), {'enabled': False, 'title': 'Günlük'})

        reloaded = BlogStore(self.service)
        reloaded.load()
        self.assertFalse(reloaded.blog_enabled)
        self.assertEqual(reloaded.blog_title, 'Günlük')
