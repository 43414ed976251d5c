from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAdminUser
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import SubdomainRedirect
from .serializers import SubdomainRedirectSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAdminUser])
def redirect_list_create(request):
    """List subdomain redirects or create one (staff only)"""
    if request.method == 'GET':
        redirects = SubdomainRedirect.objects.all()
        search = request.query_params.get('search')
        if search:
            redirects = redirects.filter(Q(subdomain__icontains=search) | Q(destination_url__icontains=search))
        serializer = SubdomainRedirectSerializer(redirects, many=True)
        return Response({
            'redirects': serializer.data,
            'status_options': [{'value': value, 'label': label} for value, label in SubdomainRedirect.STATUS_CHOICES],
        })
    else:  # POST
        serializer = SubdomainRedirectSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminUser])
def redirect_detail(request, pk):
    redirect = get_object_or_404(SubdomainRedirect, pk=pk)

    if request.method == 'GET':
        serializer = SubdomainRedirectSerializer(redirect)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SubdomainRedirectSerializer(redirect, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        redirect.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
