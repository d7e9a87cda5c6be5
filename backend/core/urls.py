from django.urls import path
from .views import data_endpoint

urlpatterns = [
    # Generic bucket endpoint
    path('data', data_endpoint, name='data'),
]
