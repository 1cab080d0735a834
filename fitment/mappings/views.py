from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import transaction
from django.shortcuts import get_object_or_404
import logging

from fitment.commerce.exceptions import CommerceUnavailable
from fitment.commerce.views import COMMERCE_STATUS_HEADER
from fitment.compatibility.services import fetch_products
from fitment.core.utils import create_audit_log
from fitment.motorcycles.models import Motorcycle
from .healing import heal_mappings
from .models import PartMapping
from .serializers import PartMappingSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def mapping_list_create(request):
    """List part mappings (?motorcycle_recid= or ?product_id=) or create one"""
    if request.method == 'GET':
        queryset = PartMapping.objects.select_related('motorcycle')
        motorcycle_recid = request.query_params.get('motorcycle_recid', None)
        product_id = request.query_params.get('product_id', None)
        if motorcycle_recid:
            try:
                queryset = queryset.filter(motorcycle_id=int(motorcycle_recid))
            except ValueError:
                return Response({'message': 'motorcycle_recid must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        elif product_id:
            queryset = queryset.filter(product_id=product_id)
        serializer = PartMappingSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = PartMappingSerializer(data=request.data)
    if serializer.is_valid():
        mapping = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='PartMapping',
            object_id=mapping.id,
            object_name=str(mapping),
        )
        return Response(PartMappingSerializer(mapping).data, status=status.HTTP_201_CREATED)
    return Response({'message': 'Invalid mapping data', 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mapping_bulk_create(request):
    """Create many mappings at once; nothing is saved if any row is invalid"""
    mappings = request.data.get('mappings') if isinstance(request.data, dict) else None
    if not isinstance(mappings, list):
        return Response({'message': 'Mappings must be an array'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = PartMappingSerializer(data=mappings, many=True)
    if not serializer.is_valid():
        return Response({'message': 'Invalid mapping data', 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        created = serializer.save()
    logger.info(f"Created {len(created)} part mappings")
    create_audit_log(
        request=request,
        action='create',
        model_name='PartMapping',
        object_id='bulk',
        changes={'count': len(created)},
    )
    return Response(PartMappingSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def mapping_detail(request, pk):
    mapping = get_object_or_404(PartMapping, pk=pk)
    if request.method == 'GET':
        return Response(PartMappingSerializer(mapping).data)

    object_name = str(mapping)
    mapping.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='PartMapping',
        object_id=pk,
        object_name=object_name,
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def motorcycle_mapped_parts(request, recid):
    """Products explicitly mapped to a motorcycle, resolved against the live catalog"""
    motorcycle = get_object_or_404(Motorcycle, recid=recid)
    mappings = list(motorcycle.part_mappings.filter(compatible=True))

    try:
        products = fetch_products()
    except CommerceUnavailable as e:
        logger.warning(f"Mapped parts for motorcycle {recid} unavailable: {e}")
        return Response([], headers={COMMERCE_STATUS_HEADER: 'unavailable'})

    parts = []
    for mapping, product in heal_mappings(mappings, products, request=request):
        data = product.to_dict()
        data['mapping_id'] = str(mapping.id)
        data['mapping_status'] = mapping.status
        parts.append(data)
    return Response(parts, headers={COMMERCE_STATUS_HEADER: 'ok'})
