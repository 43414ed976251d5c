import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizbox.contacts.models import Contact
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import apply_date_range, create_audit_log, tenant_for
from bizbox.teams.permissions import CanEdit, HasDeleteRole
from .serializers import (
    WalletSerializer, WalletTransactionSerializer, AmountSerializer, TransferSerializer, TopUpSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_contact(request, pk):
    return get_object_or_404(Contact, pk=pk, client_identifier=tenant_for(request))


def wallet_audit(request, action, contact, entry):
    create_audit_log(
        request=request,
        action=action,
        model_name='Wallet',
        object_id=str(entry.wallet_id),
        object_name=contact.full_name,
        object_reference=entry.reference,
        changes={'amount': str(entry.amount), 'balance_after': str(entry.balance_after)}
    )


def balance_response(wallet, entry, status_code=status.HTTP_200_OK):
    wallet.refresh_from_db()
    return Response({
        'wallet': WalletSerializer(wallet).data,
        'transaction': WalletTransactionSerializer(entry).data,
    }, status=status_code)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wallet_balance(request, pk):
    """Balance of a contact's wallet (created on first access)"""
    wallet = services.get_wallet(tenant_contact(request, pk))
    return Response(WalletSerializer(wallet).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def wallet_transactions(request, pk):
    """Wallet transactions, newest first; filter by type, status and date range"""
    wallet = services.get_wallet(tenant_contact(request, pk))
    transactions = wallet.transactions.select_related('created_by')
    transaction_type = request.query_params.get('transaction_type')
    if transaction_type:
        transactions = transactions.filter(transaction_type=transaction_type)
    transaction_status = request.query_params.get('status')
    if transaction_status:
        transactions = transactions.filter(status=transaction_status)
    transactions = apply_date_range(transactions, request.query_params, field='transaction_at')
    serializer = WalletTransactionSerializer(transactions, many=True)
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def wallet_add_funds(request, pk):
    contact = tenant_contact(request, pk)
    serializer = AmountSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        entry = services.credit(contact, user=request.user, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()

    wallet_audit(request, 'wallet_credit', contact, entry)
    return balance_response(entry.wallet, entry, status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def wallet_deduct_funds(request, pk):
    contact = tenant_contact(request, pk)
    serializer = AmountSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        entry = services.debit(contact, user=request.user, **serializer.validated_data)
    except ServiceError as e:
        return e.to_response()

    wallet_audit(request, 'wallet_debit', contact, entry)
    return balance_response(entry.wallet, entry, status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def wallet_transfer(request):
    """Transfer funds between two contacts of the business"""
    serializer = TransferSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    source = tenant_contact(request, data['from_contact'])
    target = tenant_contact(request, data['to_contact'])
    try:
        debit_entry, credit_entry = services.transfer(
            source, target, data['amount'], description=data['description'], user=request.user
        )
    except ServiceError as e:
        return e.to_response()

    create_audit_log(
        request=request,
        action='wallet_transfer',
        model_name='Wallet',
        object_id=str(debit_entry.wallet_id),
        object_name=f"{source.full_name} -> {target.full_name}",
        object_reference=debit_entry.reference,
        changes={'amount': str(debit_entry.amount), 'to_wallet': credit_entry.wallet_id}
    )
    return Response({
        'reference': debit_entry.reference,
        'debit': WalletTransactionSerializer(debit_entry).data,
        'credit': WalletTransactionSerializer(credit_entry).data,
    }, status=status.HTTP_201_CREATED)


def contact_by_number(request, contact_number):
    return Contact.objects.filter(
        client_identifier=tenant_for(request), contact_number=contact_number.strip()
    ).order_by('id').first()


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasDeleteRole])
def wallet_lookup(request):
    """Find a wallet by the owner's contact number (?contact_number=)"""
    contact_number = request.query_params.get('contact_number') or ''
    if not contact_number.strip():
        return Response({'error': 'contact_number is required'}, status=status.HTTP_400_BAD_REQUEST)
    contact = contact_by_number(request, contact_number)
    if contact is None:
        return Response({'error': 'No contact with that number'}, status=status.HTTP_404_NOT_FOUND)
    return Response(WalletSerializer(services.get_wallet(contact)).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasDeleteRole])
def wallet_top_up(request):
    """Credit a wallet found by contact number"""
    serializer = TopUpSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    contact = contact_by_number(request, data['contact_number'])
    if contact is None:
        return Response({'error': 'No contact with that number'}, status=status.HTTP_404_NOT_FOUND)

    try:
        entry = services.credit(
            contact, data['amount'], description=data['description'] or 'Top-up', user=request.user
        )
    except ServiceError as e:
        return e.to_response()

    wallet_audit(request, 'wallet_credit', contact, entry)
    return balance_response(entry.wallet, entry, status.HTTP_201_CREATED)
