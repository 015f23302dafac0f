"""
Pharmacy stock and restock order endpoints.

Staff can browse the catalog and the order book; administrators manage
products and move orders along.  Marking an order ``delivered`` restocks
the product it references in the same step.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..entities import ORDER_DELIVERED
from ..permissions import IsAdminOrStaffReadOnly, IsAdminRole, IsStaffRole
from ..serializers.pharmacy import (
    OrderCreateSerializer,
    OrderListQuerySerializer,
    OrderStatusSerializer,
    ProductListQuerySerializer,
    ProductSerializer,
    RestockSerializer,
    StockSerializer,
)
from ..services import get_pharmacy_manager
from ..services.paging import paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffReadOnly])
def product_collection(request):
    manager = get_pharmacy_manager()
    if request.method == 'GET':
        q = ProductListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        products = manager.list_products(status=q.validated_data.get('status'), query=q.validated_data.get('q'))
        items, meta = paginate(products, page=q.validated_data.get('page'), limit=q.validated_data.get('limit'))
        return Response({'ok': True, 'data': [p.to_dict() for p in items], **meta})

    s = ProductSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    product = manager.upsert_product(s.to_manager_data())
    return Response({'ok': True, 'data': product.to_dict()}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def product_low_stock(request):
    products = get_pharmacy_manager().low_stock()
    return Response({'ok': True, 'data': [p.to_dict() for p in products], 'total': len(products)})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaffReadOnly])
def product_detail(request, product_id: str):
    manager = get_pharmacy_manager()
    if request.method == 'GET':
        return Response({'ok': True, 'data': manager.get_product(product_id).to_dict()})
    if request.method == 'DELETE':
        manager.remove_product(product_id)
        return Response({'ok': True})

    # editing an existing product: only the fields sent are changed
    manager.get_product(product_id)
    s = ProductSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    product = manager.upsert_product({'id': product_id, **s.to_manager_data()})
    return Response({'ok': True, 'data': product.to_dict()})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_restock(request, product_id: str):
    s = RestockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    product = get_pharmacy_manager().restock(product_id, s.validated_data['quantity'])
    return Response({'ok': True, 'data': product.to_dict()})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def product_update_stock(request, product_id: str):
    """Stock count correction: set the on-hand quantity after an inventory check."""
    s = StockSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    product = get_pharmacy_manager().set_stock(product_id, s.validated_data['quantity'])
    return Response({'ok': True, 'data': product.to_dict()})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffReadOnly])
def order_collection(request):
    manager = get_pharmacy_manager()
    if request.method == 'GET':
        q = OrderListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        orders = manager.list_orders(status=q.validated_data.get('status'))
        items, meta = paginate(orders, page=q.validated_data.get('page'), limit=q.validated_data.get('limit'))
        return Response({'ok': True, 'data': [o.to_dict() for o in items], **meta})

    s = OrderCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    order = manager.place_order(
        data['productId'],
        data['quantity'],
        supplier=data.get('supplier'),
        notes=data.get('notes'),
        expected_delivery=data.get('expectedDelivery'),
    )
    return Response({'ok': True, 'data': order.to_dict()}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def order_pending(request):
    orders = get_pharmacy_manager().pending_orders()
    return Response({'ok': True, 'data': [o.to_dict() for o in orders], 'total': len(orders)})


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaffReadOnly])
def order_detail(request, order_id: str):
    """GET: one order.  DELETE: cancel it (orders are never erased)."""
    manager = get_pharmacy_manager()
    if request.method == 'GET':
        return Response({'ok': True, 'data': manager.get_order(order_id).to_dict()})
    order = manager.cancel_order(order_id)
    return Response({'ok': True, 'data': order.to_dict()})


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def order_update_status(request, order_id: str):
    s = OrderStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    manager = get_pharmacy_manager()
    order = manager.advance_order_status(order_id, s.validated_data['status'])
    data = {'ok': True, 'data': order.to_dict()}
    if order.status == ORDER_DELIVERED:
        data['product'] = manager.get_product(order.product_id).to_dict()
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def pharmacy_summary(request):
    return Response({'ok': True, 'data': get_pharmacy_manager().summary()})
