from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
import logging

from fitment.core.utils import create_audit_log
from .models import PartSection, PartCategoryTag
from .serializers import PartSectionSerializer, PartCategoryTagSerializer, ReorderItemSerializer

logger = logging.getLogger(__name__)


def _reorder_items(request):
    """Batch payload: a bare list or {"items": [...]}"""
    payload = request.data
    if isinstance(payload, dict):
        payload = payload.get('items', [])
    serializer = ReorderItemSerializer(data=payload, many=True)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


# Part section views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def part_section_list_create(request):
    """List all part sections or create a new section"""
    if request.method == 'GET':
        queryset = PartSection.objects.all()
        if request.query_params.get('active') == 'true':
            queryset = queryset.filter(is_active=True)
        serializer = PartSectionSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = PartSectionSerializer(data=request.data)
    if serializer.is_valid():
        section = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='PartSection',
            object_id=section.id,
            object_name=section.section_label,
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def part_section_detail(request, pk):
    """Retrieve, update or delete a part section

    Renaming a section key carries its categories along; deleting a section
    moves its categories to the unassigned bucket.
    """
    section = get_object_or_404(PartSection, pk=pk)

    if request.method == 'GET':
        return Response(PartSectionSerializer(section).data)

    if request.method in ('PUT', 'PATCH'):
        old_key = section.section_key
        serializer = PartSectionSerializer(section, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            with transaction.atomic():
                section = serializer.save()
                if section.section_key != old_key:
                    PartCategoryTag.objects.filter(assigned_section=old_key).update(
                        assigned_section=section.section_key
                    )
            return Response(PartSectionSerializer(section).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        moved = PartCategoryTag.objects.filter(assigned_section=section.section_key).update(assigned_section=None)
        section_label = section.section_label
        section.delete()
    logger.info(f"Deleted part section {section_label}; {moved} categories unassigned")
    create_audit_log(
        request=request,
        action='delete',
        model_name='PartSection',
        object_id=pk,
        object_name=section_label,
        changes={'unassigned_categories': moved},
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def part_section_reorder(request):
    """Apply a batch of [{id, sort_order}] section positions atomically"""
    items = _reorder_items(request)
    ids = [item['id'] for item in items]
    sections = PartSection.objects.in_bulk(ids)
    missing = sorted(set(ids) - set(sections))
    if missing:
        return Response({'message': f'Unknown section ids: {missing}'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        for item in items:
            section = sections[item['id']]
            section.sort_order = item['sort_order']
            section.save(update_fields=['sort_order', 'updated_at'])

    create_audit_log(
        request=request,
        action='reorder',
        model_name='PartSection',
        object_id='batch',
        changes={str(item['id']): item['sort_order'] for item in items},
    )
    serializer = PartSectionSerializer(PartSection.objects.all(), many=True)
    return Response(serializer.data)


# Part category tag views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def part_category_tag_list_create(request):
    """List all part categories or create a new category"""
    if request.method == 'GET':
        queryset = PartCategoryTag.objects.all()
        section = request.query_params.get('section', None)
        if section == 'others':
            queryset = queryset.filter(Q(assigned_section__isnull=True) | Q(assigned_section='others'))
        elif section:
            queryset = queryset.filter(assigned_section=section)
        serializer = PartCategoryTagSerializer(queryset.order_by('sort_order', 'category_value'), many=True)
        return Response(serializer.data)

    serializer = PartCategoryTagSerializer(data=request.data)
    if serializer.is_valid():
        tag = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='PartCategoryTag',
            object_id=tag.category_value,
            object_name=tag.category_label,
            changes={'product_tags': tag.product_tags, 'assigned_section': tag.assigned_section},
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def part_category_tag_detail(request, category_value):
    """Retrieve, update or delete a part category by its category value"""
    tag = get_object_or_404(PartCategoryTag, category_value=category_value)

    if request.method == 'GET':
        return Response(PartCategoryTagSerializer(tag).data)

    if request.method in ('PUT', 'PATCH'):
        # Both verbs update only the supplied fields
        serializer = PartCategoryTagSerializer(tag, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='PartCategoryTag',
                object_id=tag.category_value,
                object_name=tag.category_label,
                changes={key: value for key, value in serializer.validated_data.items()},
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    tag.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='PartCategoryTag',
        object_id=category_value,
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def part_category_tag_reorder(request):
    """Apply a batch of [{id, sort_order, assigned_section?}] category positions atomically"""
    items = _reorder_items(request)
    ids = [item['id'] for item in items]
    tags = PartCategoryTag.objects.in_bulk(ids)
    missing = sorted(set(ids) - set(tags))
    if missing:
        return Response({'message': f'Unknown category ids: {missing}'}, status=status.HTTP_400_BAD_REQUEST)

    section_keys = {item['assigned_section'] for item in items if item.get('assigned_section')}
    known_sections = set(PartSection.objects.filter(section_key__in=section_keys).values_list('section_key', flat=True))
    unknown_sections = sorted(section_keys - known_sections)
    if unknown_sections:
        return Response({'message': f'Unknown sections: {unknown_sections}'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        for item in items:
            tag = tags[item['id']]
            tag.sort_order = item['sort_order']
            update_fields = ['sort_order', 'updated_at']
            if 'assigned_section' in item:
                tag.assigned_section = item['assigned_section'] or None
                update_fields.append('assigned_section')
            tag.save(update_fields=update_fields)

    create_audit_log(
        request=request,
        action='reorder',
        model_name='PartCategoryTag',
        object_id='batch',
        changes={str(item['id']): item['sort_order'] for item in items},
    )
    serializer = PartCategoryTagSerializer(PartCategoryTag.objects.all(), many=True)
    return Response(serializer.data)
