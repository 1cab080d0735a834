from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import IntegrityError, transaction
from django.http import HttpResponse
import logging

from fitment.core.cache_utils import suspend_cache_signals
from fitment.core.utils import create_audit_log
from fitment.mappings.serializers import PartMappingSerializer
from fitment.motorcycles.models import Motorcycle
from fitment.motorcycles.serializers import MotorcycleSerializer
from fitment.motorcycles.utils import RecidLockUnavailable, allocate_recids, invalidate_motorcycle_lookups
from .models import ImportHistory
from .serializers import ImportHistorySerializer
from .services import (
    IMPORT_TYPES, ImportResult, parse_int, run_csv_import, record_history,
    build_template, build_combined_export, configured_category_values
)

logger = logging.getLogger(__name__)


def rows_from_request(request, key):
    """Accept either a bare JSON array or {key: [...]}"""
    data = request.data
    if isinstance(data, list):
        return data
    if hasattr(data, 'get'):
        rows = data.get(key)
        if isinstance(rows, list):
            return rows
    return None


def _explicit_recid(row):
    try:
        return parse_int(row.get('recid'))
    except (TypeError, ValueError):
        return None


def csv_response(filename, content):
    response = HttpResponse(content, content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def import_history_list_create(request):
    """Import history, newest first, or record an import run"""
    if request.method == 'GET':
        history = ImportHistory.objects.all()
        serializer = ImportHistorySerializer(history, many=True)
        return Response(serializer.data)

    serializer = ImportHistorySerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def import_motorcycles(request):
    """Bulk create motorcycles from pre-parsed rows; all or nothing"""
    rows = rows_from_request(request, 'motorcycles')
    if rows is None:
        return Response({'message': 'Motorcycles must be an array'}, status=status.HTTP_400_BAD_REQUEST)
    if not all(isinstance(row, dict) for row in rows):
        return Response({'message': 'Each motorcycle must be an object'}, status=status.HTTP_400_BAD_REQUEST)

    rows = [dict(row) for row in rows]
    missing = [row for row in rows if not row.get('recid')]
    explicit = [recid for recid in (_explicit_recid(row) for row in rows) if recid is not None]
    if missing:
        try:
            floor = max(explicit) if explicit else None
            for row, recid in zip(missing, allocate_recids(len(missing), floor=floor)):
                row['recid'] = recid
        except RecidLockUnavailable as e:
            record_history('motorcycles', 'json-import', 0)
            return Response({'message': str(e), 'retryable': True}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    serializer = MotorcycleSerializer(data=rows, many=True)
    if not serializer.is_valid():
        record_history('motorcycles', 'json-import', 0)
        return Response({'message': 'Invalid motorcycle data', 'errors': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic(), suspend_cache_signals():
            motorcycles = serializer.save()
    except IntegrityError as e:
        logger.error(f"Motorcycle import failed: {str(e)}")
        record_history('motorcycles', 'json-import', 0)
        return Response({'message': 'Duplicate RECID in import'}, status=status.HTTP_409_CONFLICT)
    invalidate_motorcycle_lookups()

    record_history('motorcycles', 'json-import', len(motorcycles))
    create_audit_log(
        request=request,
        action='import',
        model_name='Motorcycle',
        object_id='bulk',
        changes={'count': len(motorcycles)},
    )
    return Response(MotorcycleSerializer(motorcycles, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def import_mappings(request):
    """Bulk create part mappings from pre-parsed rows; all or nothing"""
    rows = rows_from_request(request, 'mappings')
    if rows is None:
        return Response({'message': 'Mappings must be an array'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = PartMappingSerializer(data=rows, many=True)
    if not serializer.is_valid():
        record_history('mappings', 'json-import', 0)
        return Response({'message': 'Invalid mapping data', 'errors': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        mappings = serializer.save()
    record_history('mappings', 'json-import', len(mappings))
    create_audit_log(
        request=request,
        action='import',
        model_name='PartMapping',
        object_id='bulk',
        changes={'count': len(mappings)},
    )
    return Response(PartMappingSerializer(mappings, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def import_csv(request):
    """
    Upload a CSV file (field `file`) of type motorcycles, parts or combined.

    Returns the import summary with row-level errors; a history record is
    written whether or not any row was saved.
    """
    upload = request.FILES.get('file') or request.FILES.get('csvFile')
    if upload is None:
        return Response({'message': 'No file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    import_type = request.data.get('type', 'motorcycles') or 'motorcycles'
    if import_type not in IMPORT_TYPES:
        return Response({'message': f'Invalid import type: {import_type}'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        content = upload.read()
        result = run_csv_import(import_type, content, upload.name)
    except RecidLockUnavailable as e:
        record_history(import_type, upload.name, 0)
        return Response({'message': str(e), 'retryable': True}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except UnicodeDecodeError:
        record_history(import_type, upload.name, 0)
        result = ImportResult()
        result.add_error(1, 'file', 'CSV file must be UTF-8 encoded')
        return Response(result.to_dict(), status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"CSV import {import_type} '{upload.name}': "
                f"{result.success_count}/{result.total_rows} rows, {len(result.errors)} errors")
    if result.success_count:
        create_audit_log(
            request=request,
            action='import',
            model_name='Motorcycle',
            object_id=import_type,
            object_name=upload.name,
            changes={'count': result.success_count, 'errors': len(result.errors)},
        )
    return Response(result.to_dict())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def import_template(request):
    """CSV template for ?type=motorcycles|parts|combined"""
    template_type = request.query_params.get('type', 'motorcycles')
    if template_type not in IMPORT_TYPES:
        return Response({'message': f'Invalid template type: {template_type}'}, status=status.HTTP_400_BAD_REQUEST)

    category_values = configured_category_values() if template_type == 'combined' else None
    filename, content = build_template(template_type, category_values)
    return csv_response(filename, content)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_combined_data(request):
    """Every motorcycle with its configured part assignments as CSV"""
    motorcycles = Motorcycle.objects.order_by('recid')
    content = build_combined_export(motorcycles, configured_category_values())
    return csv_response('combined-data-export.csv', content)
