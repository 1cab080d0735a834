from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import IntegrityError
from django.db.models import Count, Max, Avg
from django.shortcuts import get_object_or_404
import logging

from fitment.core.utils import create_audit_log, get_client_ip
from .filters import MotorcycleFilter
from .models import Motorcycle, MotorcycleCategoryConfig, SearchAnalytics
from .serializers import (
    MotorcycleSerializer, PartAssignmentSerializer,
    MotorcycleCategoryConfigSerializer
)
from .utils import (
    RecidLockUnavailable, next_recid, search_motorcycles,
    get_distinct_makes, get_distinct_years
)

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    'Cache-Control': 'no-store, no-cache, must-revalidate, proxy-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0',
}


def lock_unavailable_response(error):
    return Response({'message': str(error), 'retryable': True}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


def record_search(request, search_query, results_count):
    """Track a search; analytics failures never fail the search itself"""
    try:
        SearchAnalytics.objects.create(
            search_query=search_query,
            results_count=results_count,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT') or None,
        )
    except Exception as e:
        logger.error(f"Failed to track search analytics for '{search_query}': {str(e)}")


# Motorcycle views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def motorcycle_list_create(request):
    """List, search and filter motorcycles or create a new motorcycle"""
    if request.method == 'GET':
        queryset = Motorcycle.objects.all()
        search = request.query_params.get('search', None)
        if search:
            queryset = search_motorcycles(queryset, search)
            motorcycles = list(queryset)
            record_search(request, search, len(motorcycles))
        else:
            motorcycles = MotorcycleFilter(request.query_params, queryset=queryset).qs

        serializer = MotorcycleSerializer(motorcycles, many=True)
        return Response(serializer.data, headers=NO_STORE_HEADERS)

    data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
    if not data.get('recid'):
        try:
            data['recid'] = next_recid()
        except RecidLockUnavailable as e:
            return lock_unavailable_response(e)
        logger.info(f"Allocated RECID {data['recid']} for new motorcycle")

    serializer = MotorcycleSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        motorcycle = serializer.save()
    except IntegrityError:
        return Response(
            {'message': f"Motorcycle with RECID {data['recid']} already exists"},
            status=status.HTTP_409_CONFLICT
        )
    create_audit_log(
        request=request,
        action='create',
        model_name='Motorcycle',
        object_id=motorcycle.recid,
        object_name=str(motorcycle),
        changes={'bikemake': motorcycle.bikemake, 'bikemodel': motorcycle.bikemodel},
    )
    return Response(MotorcycleSerializer(motorcycle).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def motorcycle_makes(request):
    """Distinct motorcycle makes, alphabetical"""
    return Response(get_distinct_makes(), headers=NO_STORE_HEADERS)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def motorcycle_years(request):
    """Every year covered by a motorcycle range, newest first"""
    return Response(get_distinct_years(), headers=NO_STORE_HEADERS)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def motorcycle_next_recid(request):
    try:
        return Response({'next_recid': next_recid()})
    except RecidLockUnavailable as e:
        return lock_unavailable_response(e)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def motorcycle_detail(request, recid):
    """Retrieve, update or delete a motorcycle

    PUT and PATCH both replace only the fields present in the payload.
    """
    motorcycle = get_object_or_404(Motorcycle, recid=recid)

    if request.method == 'GET':
        return Response(MotorcycleSerializer(motorcycle).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = MotorcycleSerializer(motorcycle, data=request.data, partial=True)
        if serializer.is_valid():
            changed = {
                field: value for field, value in serializer.validated_data.items()
                if getattr(motorcycle, field) != value
            }
            serializer.save()
            if changed:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Motorcycle',
                    object_id=motorcycle.recid,
                    object_name=str(motorcycle),
                    changes=changed,
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    object_name = str(motorcycle)
    motorcycle.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='Motorcycle',
        object_id=recid,
        object_name=object_name,
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def motorcycle_parts(request, recid):
    """Read every part assignment or assign one part to a category

    PATCH body: {"part_category": "oe_fcw", "product_variant": "JTF1501.14"}.
    Unknown categories are stored in custom_parts; an empty variant clears the slot.
    """
    motorcycle = get_object_or_404(Motorcycle, recid=recid)

    if request.method == 'GET':
        return Response({'recid': motorcycle.recid, 'parts': motorcycle.get_parts()})

    serializer = PartAssignmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    part_category = serializer.validated_data['part_category'].strip()
    product_variant = (serializer.validated_data.get('product_variant') or '').strip()
    previous = motorcycle.get_part_value(part_category)

    field = motorcycle.set_part_value(part_category, product_variant)
    motorcycle.save(update_fields=[field])

    create_audit_log(
        request=request,
        action='part_assign',
        model_name='Motorcycle',
        object_id=motorcycle.recid,
        object_name=str(motorcycle),
        changes={part_category: {'old': previous, 'new': product_variant or None}},
    )
    return Response(MotorcycleSerializer(motorcycle).data)


# Motorcycle category config views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def motorcycle_category_list_create(request):
    """List all bike categories or create a new one"""
    if request.method == 'GET':
        queryset = MotorcycleCategoryConfig.objects.all()
        if request.query_params.get('active') == 'true':
            queryset = queryset.filter(is_active=True)
        serializer = MotorcycleCategoryConfigSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = MotorcycleCategoryConfigSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def motorcycle_category_detail(request, pk):
    """Retrieve, update or delete a bike category"""
    config = get_object_or_404(MotorcycleCategoryConfig, pk=pk)

    if request.method == 'GET':
        return Response(MotorcycleCategoryConfigSerializer(config).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = MotorcycleCategoryConfigSerializer(
            config, data=request.data, partial=request.method == 'PATCH'
        )
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:
        config.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_searches(request):
    """Most frequent search queries"""
    queryset = SearchAnalytics.objects.all()

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    try:
        limit = int(request.query_params.get('limit', 25))
    except (TypeError, ValueError):
        limit = 25

    rows = (
        queryset.values('search_query')
        .annotate(
            search_count=Count('id'),
            avg_results=Avg('results_count'),
            last_searched=Max('created_at'),
        )
        .order_by('-search_count', '-last_searched')[:limit]
    )
    return Response([
        {
            'search_query': row['search_query'],
            'search_count': row['search_count'],
            'avg_results': round(row['avg_results'] or 0, 1),
            'last_searched': row['last_searched'],
        }
        for row in rows
    ])
