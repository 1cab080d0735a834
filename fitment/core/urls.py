from django.urls import path
from .views import (
    StaffTokenObtainPairView, StaffTokenRefreshView, user_me,
    setting_list_create, setting_detail,
    audit_log_list, dashboard_stats
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', StaffTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', StaffTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<str:key>/', setting_detail, name='setting-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),

    # Dashboard statistics
    path('stats/', dashboard_stats, name='dashboard-stats'),
]
