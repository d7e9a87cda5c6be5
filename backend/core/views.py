from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
import logging

from .kv_store import get_from_redis, set_to_redis

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def data_endpoint(request):
    """Read (GET ?key=) or overwrite (POST {key, data}) a named bucket"""
    if request.method == 'GET':
        return _get_bucket(request)
    return _save_bucket(request)


def _get_bucket(request):
    key = request.query_params.get('key')
    if not key:
        return Response({'error': 'Key is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        data = get_from_redis(key)
    except Exception as e:
        logger.error(f"Redis GET error for {key}: {str(e)}", exc_info=True)
        return Response({'error': 'Failed to fetch data'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Absent buckets answer with an empty list; "exists" tells the two apart
    if data is None:
        return Response({'data': [], 'exists': False})
    return Response({'data': data, 'exists': True})


def _save_bucket(request):
    try:
        body = request.data
    except ParseError:
        return Response({'error': 'Invalid JSON body'}, status=status.HTTP_400_BAD_REQUEST)

    if not isinstance(body, dict):
        return Response({'error': 'Request body must be an object'}, status=status.HTTP_400_BAD_REQUEST)

    key = body.get('key')
    if not key or not isinstance(key, str):
        return Response({'error': 'Key is required'}, status=status.HTTP_400_BAD_REQUEST)
    if 'data' not in body:
        return Response({'error': 'Data is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        set_to_redis(key, body['data'])
    except Exception as e:
        logger.error(f"Redis POST error for {key}: {str(e)}", exc_info=True)
        return Response({'error': 'Failed to save data'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({'success': True})
