import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Q
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import create_audit_log, tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .filters import ProductFilter
from .models import Category, Product, ProductVariant
from .serializers import (
    CategorySerializer, ProductSerializer, ProductListSerializer, ProductVariantSerializer,
    StockMovementSerializer, StockAdjustmentSerializer
)
from .stock import adjust_stock, available_quantity

logger = logging.getLogger(__name__)


def tenant_products(request):
    return Product.objects.filter(client_identifier=tenant_for(request))


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def category_list_create(request):
    """List all categories or create a new category"""
    if request.method == 'GET':
        categories = Category.objects.filter(client_identifier=tenant_for(request))
        serializer = CategorySerializer(categories, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = CategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def category_detail(request, pk):
    """Retrieve, update or delete a category"""
    category = get_object_or_404(Category, pk=pk, client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = CategorySerializer(category)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CategorySerializer(category, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def product_list_create(request):
    """List products (filtered with ProductFilter) or create a product"""
    if request.method == 'GET':
        queryset = tenant_products(request).select_related('category').order_by('name')
        product_filter = ProductFilter(request.query_params, queryset=queryset)
        if not product_filter.is_valid():
            return Response(product_filter.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ProductListSerializer(product_filter.qs, many=True)
        return Response(serializer.data)
    else:  # POST
        context = {'client_identifier': tenant_for(request)}
        serializer = ProductSerializer(data=request.data, context=context)
        if serializer.is_valid():
            product = serializer.save(client_identifier=tenant_for(request))
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                object_reference=product.sku,
                changes={'price': str(product.price), 'quantity': product.quantity}
            )
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(tenant_products(request), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        context = {'client_identifier': tenant_for(request)}
        old_price = product.price
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH', context=context)
        if serializer.is_valid():
            product = serializer.save()
            if product.price != old_price:
                create_audit_log(
                    request=request,
                    action='update',
                    model_name='Product',
                    object_id=str(product.id),
                    object_name=product.name,
                    object_reference=product.sku,
                    changes={'price': {'old': str(old_price), 'new': str(product.price)}}
                )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=str(product.id),
            object_name=product.name,
            object_reference=product.sku,
        )
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def product_variants(request, pk):
    """List or create variants of a product"""
    product = get_object_or_404(tenant_products(request), pk=pk)

    if request.method == 'GET':
        serializer = ProductVariantSerializer(product.variants.all(), many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ProductVariantSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(product=product)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def product_variant_detail(request, pk):
    """Retrieve, update or delete a product variant"""
    variant = get_object_or_404(
        ProductVariant.objects.select_related('product'),
        pk=pk, product__client_identifier=tenant_for(request)
    )

    if request.method == 'GET':
        serializer = ProductVariantSerializer(variant)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductVariantSerializer(variant, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        variant.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_lookup(request):
    """
    Find a product by scanned code.

    Variant barcodes/SKUs are checked first so a scan of a variant label adds
    that exact variant; product barcode/SKU is the fallback.
    """
    code = (request.query_params.get('code') or '').strip()
    if not code:
        return Response({'error': 'code is required'}, status=status.HTTP_400_BAD_REQUEST)

    variant = ProductVariant.objects.select_related('product').filter(
        Q(barcode=code) | Q(sku=code),
        product__client_identifier=tenant_for(request),
        product__is_active=True,
        is_active=True,
    ).first()
    if variant:
        product = variant.product
    else:
        product = tenant_products(request).filter(Q(barcode=code) | Q(sku=code), is_active=True).first()

    if not product:
        return Response(
            {'error': 'Product not found', 'detail': f'No product or variant matches "{code}"'},
            status=status.HTTP_404_NOT_FOUND
        )

    available = available_quantity(product, variant)
    return Response({
        'product': ProductListSerializer(product).data,
        'variant': ProductVariantSerializer(variant).data if variant else None,
        'price': str(variant.effective_price if variant else product.effective_price),
        'available_quantity': available,
        'in_stock': available is None or available > 0,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def product_adjust_stock(request, pk):
    """Add, subtract or set stock for a product or one of its variants"""
    product = get_object_or_404(tenant_products(request), pk=pk)
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    variant = None
    if data.get('variant'):
        variant = get_object_or_404(ProductVariant, pk=data['variant'], product=product)

    try:
        movement = adjust_stock(
            product, variant, data['adjustment_type'], data['quantity'],
            reason=data['reason'], user=request.user
        )
    except ServiceError as e:
        return e.to_response()

    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='Product',
        object_id=str(product.id),
        object_name=variant.display_name if variant else product.name,
        object_reference=product.sku,
        changes={
            'adjustment_type': data['adjustment_type'],
            'quantity': data['quantity'],
            'quantity_after': movement.quantity_after,
            'reason': data['reason'],
        }
    )
    return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_stock_history(request, pk):
    """Stock movements of a product, newest first"""
    product = get_object_or_404(tenant_products(request), pk=pk)
    movements = product.stock_movements.select_related('created_by')
    variant_id = request.query_params.get('variant')
    if variant_id:
        movements = movements.filter(variant_id=variant_id)
    serializer = StockMovementSerializer(movements, many=True)
    return Response(serializer.data)
