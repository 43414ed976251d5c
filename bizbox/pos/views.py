import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizbox.cart.models import Cart
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import apply_date_range, create_audit_log, tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete, HasDeleteRole, resolve_team_member
from .models import Sale
from .serializers import SaleSerializer, CompleteSaleSerializer, BulkDeleteSerializer
from . import services

logger = logging.getLogger(__name__)


def tenant_sales(request):
    return Sale.objects.filter(client_identifier=tenant_for(request))


def audit_sale(request, sale, action, changes=None):
    create_audit_log(
        request=request,
        action=action,
        model_name='Sale',
        object_id=str(sale.id),
        object_name=sale.sale_number,
        object_reference=sale.sale_number,
        changes=changes
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_list(request):
    """List sales; filter by date range and payment method"""
    sales = tenant_sales(request).select_related('team_member', 'created_by', 'cart').prefetch_related('items')
    payment_method = request.query_params.get('payment_method')
    if payment_method:
        sales = sales.filter(payment_method=payment_method)
    sales = apply_date_range(sales, request.query_params)
    serializer = SaleSerializer(sales, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def sale_complete(request):
    """Complete a sale from a POS cart (cart_id) or a list of items"""
    serializer = CompleteSaleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    cart_id = data.pop('cart_id', None)
    if cart_id:
        data['cart'] = get_object_or_404(Cart, pk=cart_id, client_identifier=tenant_for(request))

    try:
        sale = services.complete_sale(
            tenant_for(request), data, user=request.user, team_member=resolve_team_member(request)
        )
    except ServiceError as e:
        return e.to_response()

    audit_sale(request, sale, 'sale_complete', {
        'total_amount': str(sale.total_amount),
        'discount_amount': str(sale.discount_amount),
        'items': sale.items.count(),
    })
    return Response({
        'sale': SaleSerializer(sale).data,
        'receipt': services.build_receipt(sale, request.user.app_currency, request.user.get_full_name() or request.user.username),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, CanDelete])
def sale_detail(request, pk):
    """Retrieve a sale, or delete it and restore its stock"""
    sale = get_object_or_404(tenant_sales(request), pk=pk)

    if request.method == 'GET':
        return Response(SaleSerializer(sale).data)
    else:  # DELETE
        audit_sale(request, sale, 'sale_delete', {'total_amount': str(sale.total_amount)})
        services.delete_sale(sale, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_receipt(request, pk):
    sale = get_object_or_404(tenant_sales(request), pk=pk)
    return Response(services.build_receipt(
        sale, request.user.app_currency, request.user.get_full_name() or request.user.username
    ))


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasDeleteRole])
def sale_bulk_delete(request):
    """Delete several sales at once, restoring stock for each"""
    serializer = BulkDeleteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    sales = list(tenant_sales(request).filter(pk__in=serializer.validated_data['ids']))
    for sale in sales:
        audit_sale(request, sale, 'sale_delete', {'total_amount': str(sale.total_amount), 'bulk': True})
        services.delete_sale(sale, user=request.user)

    return Response({'deleted': len(sales)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_summary(request):
    """Sales count, revenue, discounts and best sellers for a date range"""
    sales = apply_date_range(tenant_sales(request), request.query_params)
    return Response(services.sales_summary(sales))
