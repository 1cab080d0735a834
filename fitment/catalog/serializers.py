from rest_framework import serializers
from .models import PartSection, PartCategoryTag
from .utils import parse_product_tags


class ProductTagsField(serializers.Field):
    """Tag list accepted as a list, a JSON string or a single raw tag"""

    def to_internal_value(self, data):
        try:
            return parse_product_tags(data)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def to_representation(self, value):
        return list(value or [])


class PartSectionSerializer(serializers.ModelSerializer):
    category_count = serializers.SerializerMethodField()

    class Meta:
        model = PartSection
        fields = ['id', 'section_key', 'section_label', 'sort_order', 'is_active',
                  'category_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_category_count(self, obj):
        return PartCategoryTag.objects.filter(assigned_section=obj.section_key).count()


class PartCategoryTagSerializer(serializers.ModelSerializer):
    product_tags = ProductTagsField(required=False)

    class Meta:
        model = PartCategoryTag
        fields = ['id', 'category_value', 'category_label', 'product_tags', 'display_mode',
                  'assigned_section', 'sort_order', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_category_value(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Category value cannot be blank')
        return value

    def validate_assigned_section(self, value):
        if value in (None, ''):
            return None
        if not PartSection.objects.filter(section_key=value).exists():
            raise serializers.ValidationError(f'Unknown section "{value}"')
        return value


class ReorderItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    sort_order = serializers.IntegerField()
    assigned_section = serializers.CharField(required=False, allow_null=True, allow_blank=True)
