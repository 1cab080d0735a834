from rest_framework import serializers
from .models import ImportHistory


class ImportHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ImportHistory
        fields = ['id', 'type', 'filename', 'records_count', 'status', 'created_at']
        read_only_fields = ['id', 'created_at']
