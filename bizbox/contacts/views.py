from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Q
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import Contact
from .serializers import ContactSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def contact_list_create(request):
    """List contacts (optionally searched) or create a contact"""
    if request.method == 'GET':
        contacts = Contact.objects.filter(client_identifier=tenant_for(request))
        search = request.query_params.get('search')
        if search:
            contacts = contacts.filter(
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(email__icontains=search) |
                Q(contact_number__icontains=search)
            )
        serializer = ContactSerializer(contacts, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ContactSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def contact_detail(request, pk):
    """Retrieve, update or delete a contact"""
    contact = get_object_or_404(Contact, pk=pk, client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = ContactSerializer(contact)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ContactSerializer(contact, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        contact.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
