from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from django.http import HttpResponseRedirect
import logging

from fitment.catalog.utils import parse_product_tags
from fitment.core.utils import create_audit_log
from .client import get_commerce_client, commerce_setting
from .exceptions import CommerceUnavailable, CommerceAuthError
from .models import ShopSession
from .oauth import normalize_shop_domain, begin_install, complete_install

logger = logging.getLogger(__name__)

COMMERCE_STATUS_HEADER = 'X-Commerce-Status'


def commerce_unavailable_list():
    """Empty product list flagged as an upstream outage rather than a true empty catalog"""
    return Response([], headers={COMMERCE_STATUS_HEADER: 'unavailable'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_list(request):
    """Live product list from the commerce platform (optional ?search=)"""
    try:
        products = get_commerce_client().list_products()
    except CommerceUnavailable as e:
        logger.warning(f"Product list unavailable: {e}")
        return commerce_unavailable_list()

    search = request.query_params.get('search', None)
    if search:
        products = [p for p in products if p.matches_search(search)]
    return Response([p.to_dict() for p in products], headers={COMMERCE_STATUS_HEADER: 'ok'})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def product_detail(request, product_id):
    """Retrieve a live product or replace its tags"""
    try:
        client = get_commerce_client()
    except CommerceUnavailable as e:
        if request.method == 'GET':
            return Response(
                {'message': 'Product not found in commerce store', 'needs_auth': True, 'product_id': product_id},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response({'message': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    if request.method == 'GET':
        try:
            product = client.get_product(product_id)
        except CommerceUnavailable as e:
            logger.warning(f"Product {product_id} fetch failed: {e}")
            product = None
        if product is None:
            return Response(
                {'message': 'Product not found in commerce store', 'needs_auth': False, 'product_id': product_id},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(product.to_dict())

    if 'tags' not in request.data:
        return Response({'message': 'tags is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        tags = parse_product_tags(request.data.get('tags'))
    except ValueError as e:
        return Response({'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    try:
        product = client.update_product_tags(product_id, tags)
    except CommerceUnavailable as e:
        return Response({'message': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    create_audit_log(
        request=request,
        action='update',
        model_name='CommerceProduct',
        object_id=product_id,
        object_name=product.title,
        changes={'tags': tags},
    )
    return Response(product.to_dict())


@api_view(['GET'])
@permission_classes([AllowAny])
def commerce_status(request):
    """Whether the app has a stored session for ?shop="""
    shop_param = request.query_params.get('shop', None)
    if not shop_param:
        return Response({'message': 'Shop parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
    shop = normalize_shop_domain(shop_param)
    if not shop:
        return Response({'message': 'Invalid shop domain'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'installed': ShopSession.objects.filter(shop=shop).exclude(access_token='').exists(),
        'shop': shop,
        'app_url': commerce_setting('SHOPIFY_APP_URL'),
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def shopify_install(request):
    """Start the OAuth install flow for ?shop="""
    shop = normalize_shop_domain(request.query_params.get('shop', None))
    if not shop:
        return Response({'message': 'Missing or invalid shop parameter'}, status=status.HTTP_400_BAD_REQUEST)
    if not commerce_setting('SHOPIFY_API_KEY'):
        return Response({'message': 'Commerce app credentials are not configured'},
                        status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return HttpResponseRedirect(begin_install(shop))


@api_view(['GET'])
@permission_classes([AllowAny])
def shopify_callback(request):
    """Finish the OAuth install flow and persist the shop session"""
    try:
        session = complete_install(request.query_params.dict())
    except CommerceAuthError as e:
        logger.warning(f"OAuth callback rejected: {e}")
        return Response({'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except CommerceUnavailable as e:
        return Response({'message': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    app_url = commerce_setting('SHOPIFY_APP_URL').rstrip('/')
    return HttpResponseRedirect(f"{app_url}/?shop={session.shop}&installed=true")
