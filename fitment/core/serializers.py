from rest_framework import serializers
from .models import User, Setting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'full_name', 'phone', 'is_staff', 'is_superuser', 'last_login', 'created_at']
        read_only_fields = ['username', 'is_staff', 'is_superuser', 'last_login', 'created_at']

    def get_full_name(self, obj):
        return obj.get_full_name() or obj.username


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['key', 'value', 'description', 'updated_at']
        read_only_fields = ['updated_at']

    def validate_key(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Setting key cannot be blank')
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
