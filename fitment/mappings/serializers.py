from rest_framework import serializers
from fitment.motorcycles.models import Motorcycle
from .models import PartMapping


class PartMappingSerializer(serializers.ModelSerializer):
    motorcycle_recid = serializers.PrimaryKeyRelatedField(
        source='motorcycle', queryset=Motorcycle.objects.all()
    )
    motorcycle_name = serializers.CharField(source='motorcycle.__str__', read_only=True)

    class Meta:
        model = PartMapping
        fields = ['id', 'product_id', 'motorcycle_recid', 'motorcycle_name', 'compatible',
                  'expected_sku', 'product_title', 'last_synced', 'status']
        read_only_fields = ['id', 'last_synced']

    def validate_product_id(self, value):
        value = str(value).strip()
        if not value:
            raise serializers.ValidationError('Product id cannot be blank')
        return value
