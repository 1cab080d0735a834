from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
import logging

from fitment.catalog.models import PartSection
from fitment.commerce.exceptions import CommerceUnavailable
from fitment.commerce.views import COMMERCE_STATUS_HEADER
from fitment.motorcycles.models import Motorcycle
from .services import find_compatible_parts, fetch_products, load_category_config

logger = logging.getLogger(__name__)


def commerce_headers(result_available):
    return {COMMERCE_STATUS_HEADER: 'ok' if result_available else 'unavailable'}


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def motorcycle_compatible_parts(request, recid):
    """Compatible parts for a motorcycle (admin view)

    ?group=sections returns the parts grouped by display section.
    """
    motorcycle = get_object_or_404(Motorcycle, recid=recid)
    result = find_compatible_parts(motorcycle)

    if request.query_params.get('group') == 'sections':
        section_order = list(PartSection.objects.filter(is_active=True).values_list('section_key', flat=True))
        return Response(result.grouped(section_order), headers=commerce_headers(result.upstream_available))
    return Response([part.to_dict() for part in result.parts], headers=commerce_headers(result.upstream_available))


@api_view(['GET'])
@permission_classes([AllowAny])
def customer_compatible_parts(request, recid):
    """Storefront: compatible parts for one motorcycle"""
    motorcycle = get_object_or_404(Motorcycle, recid=recid)
    result = find_compatible_parts(motorcycle)

    compatibility = f"Compatible with {motorcycle}"
    parts = []
    for part in result.parts:
        data = part.to_dict()
        data['compatibility'] = compatibility
        parts.append(data)
    return Response(parts, headers=commerce_headers(result.upstream_available))


@api_view(['GET'])
@permission_classes([AllowAny])
def customer_motorcycle_parts(request):
    """Storefront: compatible parts for every motorcycle matching ?make=&model=&year="""
    make = request.query_params.get('make', None)
    model = request.query_params.get('model', None)
    year = request.query_params.get('year', None)
    if not make or not model or not year:
        return Response({'message': 'Missing required parameters: make, model, year'},
                        status=status.HTTP_400_BAD_REQUEST)
    try:
        year = int(year)
    except (TypeError, ValueError):
        return Response({'message': 'Invalid year parameter'}, status=status.HTTP_400_BAD_REQUEST)

    motorcycles = list(Motorcycle.objects.filter(
        bikemake__iexact=make,
        bikemodel__iexact=model,
        firstyear__lte=year,
        lastyear__gte=year,
    ))
    summary = {'make': make, 'model': model, 'year': year, 'matching_motorcycles': len(motorcycles)}
    if not motorcycles:
        return Response({'motorcycle': summary, 'parts': [], 'upstream_available': True})

    try:
        products = fetch_products()
    except CommerceUnavailable as e:
        logger.warning(f"Customer parts search for {make} {model} {year} unavailable: {e}")
        return Response({'motorcycle': summary, 'parts': [], 'upstream_available': False},
                        headers=commerce_headers(False))

    config = load_category_config()
    parts = []
    seen_product_ids = set()
    for motorcycle in motorcycles:
        result = find_compatible_parts(motorcycle, products=products, config=config)
        for part in result.parts:
            if part.product.id in seen_product_ids:
                continue
            seen_product_ids.add(part.product.id)
            parts.append(part.to_dict())

    return Response({'motorcycle': summary, 'parts': parts, 'upstream_available': True},
                    headers=commerce_headers(True))
