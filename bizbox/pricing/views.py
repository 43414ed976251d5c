from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import Discount
from .serializers import DiscountSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def discount_list_create(request):
    """List all discounts or create a new discount"""
    if request.method == 'GET':
        discounts = Discount.objects.filter(client_identifier=tenant_for(request)).prefetch_related(
            'applicable_products', 'applicable_categories'
        )
        is_active = request.query_params.get('is_active')
        if is_active in ('true', 'false'):
            discounts = discounts.filter(is_active=is_active == 'true')
        serializer = DiscountSerializer(discounts, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = DiscountSerializer(data=request.data, context={'client_identifier': tenant_for(request)})
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def discount_detail(request, pk):
    """Retrieve, update or delete a discount"""
    discount = get_object_or_404(Discount, pk=pk, client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = DiscountSerializer(discount)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DiscountSerializer(
            discount, data=request.data, partial=request.method == 'PATCH',
            context={'client_identifier': tenant_for(request)}
        )
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        discount.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def discount_active(request):
    """Discounts currently in effect"""
    serializer = DiscountSerializer(Discount.current(tenant_for(request)), many=True)
    return Response(serializer.data)
