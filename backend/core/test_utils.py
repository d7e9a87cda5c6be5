"""
Test utilities and factories for creating test data
"""
from urllib.parse import urlparse
from django.core.cache import caches
from rest_framework.test import APIClient
import random
import requests
import string

from backend.core.data_service import DataService
from backend.core.local_storage import LocalStorage

TEST_DATA_API_URL = 'http://testserver/api/data'

# Both aliases in process memory so tests never need Redis or a writable disk
TEST_CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'test-kv',
        'TIMEOUT': None,
    },
    'local': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'test-local',
        'TIMEOUT': None,
    },
}


class ClientResponse:
    """The slice of requests.Response the facade relies on"""

    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._response.json()


class APIClientSession:
    """
    requests.Session stand-in routing facade calls to the Django test client.

    Lets the facade run end-to-end against /api/data without a live server.
    """

    def __init__(self, client=None):
        self.client = client or APIClient()
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(('GET', params))
        return ClientResponse(self.client.get(urlparse(url).path, params or {}))

    def post(self, url, json=None, timeout=None):
        self.calls.append(('POST', json))
        return ClientResponse(self.client.post(urlparse(url).path, json, format='json'))


class UnreachableSession:
    """Session whose every request fails as if the server were down"""

    def __init__(self):
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(('GET', params))
        raise requests.exceptions.ConnectionError('Connection refused')

    def post(self, url, json=None, timeout=None):
        self.calls.append(('POST', json))
        raise requests.exceptions.ConnectionError('Connection refused')


class StatusSession:
    """Session answering every request with a fixed status and body"""

    def __init__(self, status_code, body=None):
        self.status_code = status_code
        self.body = body if body is not None else {'error': 'Failed'}

    def _response(self):
        session = self

        class _Response:
            status_code = session.status_code
            ok = session.status_code < 400

            def json(self):
                return session.body

        return _Response()

    def get(self, url, params=None, timeout=None):
        return self._response()

    def post(self, url, json=None, timeout=None):
        return self._response()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def clear_caches():
        """Empty the bucket store and the local mirror"""
        caches['default'].clear()
        caches['local'].clear()

    @staticmethod
    def create_data_service(session=None):
        """Facade wired to the test client (or to the given session)"""
        return DataService(
            base_url=TEST_DATA_API_URL,
            timeout=1,
            session=session or APIClientSession(),
            local_storage=LocalStorage(),
        )

    @staticmethod
    def create_offline_data_service():
        """Facade whose remote endpoint is unreachable"""
        return TestDataFactory.create_data_service(session=UnreachableSession())

    @staticmethod
    def product_data(name=None, category='modern', price=1000, status='Active', **extra):
        """Product fields without an id"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        data = {
            'name': name,
            'sku': f'GL-{TestDataFactory.random_string(4).upper()}',
            'price': price,
            'stock': 10,
            'category': category,
            'description': f'Test product {name}',
            'images': [],
            'status': status,
        }
        data.update(extra)
        return data

    @staticmethod
    def coupon_data(code=None, discount_type='percentage', discount_value=10, min_order_amount=0,
                    max_uses=0, is_active=True, expires_at=None):
        """Coupon fields as entered in the admin panel"""
        if not code:
            code = f'CODE{TestDataFactory.random_string(4).upper()}'
        data = {
            'code': code,
            'discountType': discount_type,
            'discountValue': discount_value,
            'minOrderAmount': min_order_amount,
            'maxUses': max_uses,
            'isActive': is_active,
        }
        if expires_at:
            data['expiresAt'] = expires_at
        return data

    @staticmethod
    def review_data(product_id='1', rating=5, name=None):
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return {
            'productId': product_id,
            'customerName': name,
            'customerEmail': f'{name.lower()}@test.com',
            'rating': rating,
            'comment': 'Harika bir ürün',
        }

    @staticmethod
    def order_data(total=1500, coupon_code=None):
        data = {
            'customer': {
                'firstName': 'Ayşe',
                'lastName': 'Demir',
                'email': 'ayse@test.com',
                'phone': '5551112233',
                'address': 'Test Mah. No: 1',
                'city': 'İstanbul',
            },
            'items': [{'id': '1', 'name': 'Cosmic Dreams Glass Art', 'price': total, 'quantity': 1}],
            'total': total,
            'paymentMethod': 'Bank Transfer',
        }
        if coupon_code:
            data['couponCode'] = coupon_code
        return data
