from collections import Counter
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .models import Setting, AuditLog
from .serializers import UserSerializer, SettingSerializer, AuditLogSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class StaffTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Login for catalog staff; tokens carry username and staff flag"""
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            from rest_framework_simplejwt.exceptions import AuthenticationFailed
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['is_staff'] = user.is_staff
        return token


class StaffTokenObtainPairView(TokenObtainPairView):
    serializer_class = StaffTokenObtainPairSerializer


class StaffTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class StaffTokenRefreshView(TokenRefreshView):
    serializer_class = StaffTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user"""
    user_data = UserSerializer(request.user).data
    user_data['is_admin'] = request.user.is_superuser or request.user.is_staff
    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        serializer = SettingSerializer(Setting.objects.order_by('key'), many=True)
        return Response(serializer.data)

    if not request.user.is_staff:
        return Response({'message': 'Only administrators can create settings'}, status=status.HTTP_403_FORBIDDEN)
    serializer = SettingSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_detail(request, key):
    """Retrieve, upsert or delete a setting by key"""
    if request.method == 'PUT':
        setting = Setting.objects.filter(key=key).first()
        data = {**request.data, 'key': key}
        serializer = SettingSerializer(setting, data=data) if setting else SettingSerializer(data=data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_200_OK if setting else status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    setting = get_object_or_404(Setting, key=key)
    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)
    setting.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model_name', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__lte=date_to)

    try:
        limit = int(request.query_params.get('limit', 200))
    except (TypeError, ValueError):
        limit = 200

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:limit], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Dashboard statistics across motorcycles, mappings, categories and imports"""
    from fitment.motorcycles.models import Motorcycle
    from fitment.mappings.models import PartMapping
    from fitment.imports.models import ImportHistory
    from fitment.catalog.models import PartCategoryTag
    from fitment.commerce.client import get_commerce_client
    from fitment.commerce.exceptions import CommerceUnavailable

    motorcycles = list(Motorcycle.objects.all())
    category_tags = list(PartCategoryTag.objects.order_by('sort_order', 'category_value'))

    mapped_recids = set(
        PartMapping.objects.filter(compatible=True).values_list('motorcycle_id', flat=True)
    )
    with_parts = {m.recid for m in motorcycles if m.has_assigned_parts()} | mapped_recids
    total = len(motorcycles)
    coverage = round(len(with_parts) / total * 100) if total else 0

    category_breakdown = {}
    for tag in category_tags:
        category_breakdown[tag.category_label] = sum(
            1 for m in motorcycles if (m.get_part_value(tag.category_value) or '').strip()
        )

    makes = Counter(m.bikemake for m in motorcycles)
    popular_makes = [{'make': make, 'count': count} for make, count in makes.most_common(5)]

    current_year = timezone.now().year
    year_counts = Counter()
    for m in motorcycles:
        for year in range(m.firstyear, m.lastyear + 1):
            if year >= current_year - 10:
                year_counts[year] += 1
    recent_years = [
        {'year': year, 'count': year_counts[year]}
        for year in sorted(year_counts, reverse=True)[:5]
    ]

    try:
        commerce_products = len(get_commerce_client().list_products())
    except CommerceUnavailable as e:
        logger.warning(f"Dashboard stats without commerce products: {e}")
        commerce_products = None

    last_import = ImportHistory.objects.order_by('-created_at').first()

    return Response({
        'total_motorcycles': total,
        'mapped_parts': PartMapping.objects.count(),
        'commerce_products': commerce_products,
        'last_import': last_import.created_at if last_import else None,
        'coverage_percentage': coverage,
        'motorcycles_with_parts': len(with_parts),
        'unmapped_motorcycles': total - len(with_parts),
        'category_breakdown': category_breakdown,
        'popular_makes': popular_makes,
        'recent_years': recent_years,
        'missing_capacity': sum(1 for m in motorcycles if not m.capacity),
        'total_categories': len(category_tags),
    })
