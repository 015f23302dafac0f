import bleach
from rest_framework import serializers

from clinic.entities import ORDER_STATUS_CHOICES, STOCK_STATUS_CHOICES

# camelCase request keys -> manager field names
PRODUCT_KEYS = {
    'name': 'name',
    'category': 'category',
    'quantity': 'quantity',
    'minStock': 'min_stock',
    'unit': 'unit',
    'price': 'price',
    'supplier': 'supplier',
    'expiryDate': 'expiry_date',
}


class ProductSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    category = serializers.CharField(required=False, allow_blank=True, max_length=64)
    quantity = serializers.IntegerField(min_value=0)
    minStock = serializers.IntegerField(min_value=0)
    unit = serializers.CharField(required=False, allow_blank=True, max_length=32)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    supplier = serializers.CharField(required=False, allow_blank=True, max_length=128)
    expiryDate = serializers.DateField(required=False, allow_null=True)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), strip=True)
        if not v:
            raise serializers.ValidationError('name must not be empty')
        return v

    def to_manager_data(self) -> dict:
        return {PRODUCT_KEYS[k]: v for k, v in self.validated_data.items() if k in PRODUCT_KEYS}


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class StockSerializer(serializers.Serializer):
    """Stock count correction: the new on-hand quantity."""
    quantity = serializers.IntegerField(min_value=0)


class ProductListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STOCK_STATUS_CHOICES, required=False)
    q = serializers.CharField(required=False, allow_blank=True, max_length=64)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, required=False)


class OrderCreateSerializer(serializers.Serializer):
    productId = serializers.CharField(max_length=50)
    quantity = serializers.IntegerField(min_value=1)
    supplier = serializers.CharField(required=False, allow_blank=True, max_length=128)
    expectedDelivery = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES)


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUS_CHOICES, required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, required=False)
