"""Blog posts and the blog's own on/off switch and title"""
from backend.core.entity_store import EntityStore
from backend.core.utils import parse_datetime_value

BLOG_POSTS_KEY = 'goldenglass_blog_posts'
BLOG_SETTINGS_KEY = 'goldenglass_blog_settings'

DEFAULT_BLOG_SETTINGS = {
    'enabled': True,
    'title': 'Blog',
}

DEFAULT_POSTS = [
    {
        'id': '1',
        'title': 'Cam Tablo Seçerken Dikkat Edilmesi Gerekenler',
        'slug': 'cam-tablo-secerken-dikkat-edilmesi-gerekenler',
        'excerpt': 'Evinize en uygun cam tabloyu seçerken bilmeniz gereken ipuçları ve öneriler.',
        'content': '<p>Cam tablolar, modern ev dekorasyonunun vazgeçilmez parçalarından biridir...</p>',
        'image': 'https://images.unsplash.com/photo-1513519245088-0e12902e35a6?w=800',
        'author': 'Golden Glass 777',
        'publishedAt': '2024-12-01T10:00:00+00:00',
        'isPublished': True,
        'category': 'Dekorasyon',
        'tags': ['cam tablo', 'dekorasyon'],
        'views': 0,
    },
]


def _published_key(post):
    parsed = parse_datetime_value(post.get('publishedAt'))
    return parsed.timestamp() if parsed else 0


class BlogStore(EntityStore):
    storage_key = BLOG_POSTS_KEY
    default_items = DEFAULT_POSTS
    prepend_new = True

    def __init__(self, data_service=None):
        super().__init__(data_service)
        self.blog_settings = dict(DEFAULT_BLOG_SETTINGS)

    def load(self):
        items = super().load()
        stored = self.data_service.fetch_data(BLOG_SETTINGS_KEY, None)
        if isinstance(stored, dict):
            self.blog_settings = {**DEFAULT_BLOG_SETTINGS, **stored}
        return items

    def build_record(self, data):
        record = dict(data)
        record['views'] = 0
        return record

    def get_post_by_slug(self, slug):
        return next((p for p in self.items if p.get('slug') == slug), None)

    def get_published_posts(self):
        """Published posts, newest first"""
        published = [p for p in self.items if p.get('isPublished')]
        return sorted(published, key=_published_key, reverse=True)

    @property
    def blog_enabled(self) -> bool:
        return bool(self.blog_settings.get('enabled', True))

    @property
    def blog_title(self) -> str:
        return self.blog_settings.get('title') or DEFAULT_BLOG_SETTINGS['title']

    def set_blog_enabled(self, enabled: bool) -> bool:
        return self._save_settings({'enabled': bool(enabled)})

    def set_blog_title(self, title: str) -> bool:
        return self._save_settings({'title': title})

    def _save_settings(self, changes) -> bool:
        self.blog_settings = {**self.blog_settings, **changes}
        return self.data_service.save_data(BLOG_SETTINGS_KEY, self.blog_settings)
