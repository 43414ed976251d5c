"""
Wallet credits, debits and transfers.

Balances only change inside a transaction holding the wallet row lock, and
every change writes a WalletTransaction with the resulting balance.
"""
import logging
from decimal import Decimal

from django.db import transaction

from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import generate_reference, to_decimal
from .models import Wallet, WalletTransaction

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def get_wallet(contact):
    """The contact's wallet, created with a zero balance on first access"""
    wallet, created = Wallet.objects.get_or_create(
        contact=contact,
        defaults={'client_identifier': contact.client_identifier},
    )
    if created:
        logger.info(f"Wallet created for contact {contact.id} (tenant {contact.client_identifier})")
    return wallet


def validate_amount(amount):
    amount = to_decimal(amount)
    if amount is None or not amount.is_finite() or amount <= 0:
        raise ServiceError('Amount must be greater than zero')
    return amount.quantize(TWO_PLACES)


def new_reference():
    return generate_reference('WTX', WalletTransaction, 'reference')


def record(wallet, transaction_type, amount, reference, description='', user=None, status='completed'):
    return WalletTransaction.objects.create(
        wallet=wallet,
        transaction_type=transaction_type,
        status=status,
        amount=amount,
        reference=reference,
        description=description or '',
        balance_after=wallet.balance,
        created_by=user if user is not None and user.is_authenticated else None,
    )


def credit(contact, amount, description='', reference='', user=None):
    amount = validate_amount(amount)
    with transaction.atomic():
        wallet = Wallet.objects.select_for_update().get(pk=get_wallet(contact).pk)
        wallet.balance += amount
        wallet.save(update_fields=['balance', 'updated_at'])
        entry = record(wallet, 'credit', amount, reference or new_reference(), description, user)
    logger.info(f"Wallet {wallet.id} credited {amount}; balance {wallet.balance}")
    return entry


def debit(contact, amount, description='', reference='', user=None):
    """Take `amount` out of the wallet; a short balance is recorded as a failed debit"""
    amount = validate_amount(amount)
    reference = reference or new_reference()
    with transaction.atomic():
        wallet = Wallet.objects.select_for_update().get(pk=get_wallet(contact).pk)
        sufficient = amount <= wallet.balance
        if sufficient:
            wallet.balance -= amount
            wallet.save(update_fields=['balance', 'updated_at'])
            entry = record(wallet, 'debit', amount, reference, description, user)

    if not sufficient:
        record(wallet, 'debit', amount, reference, description, user, status='failed')
        logger.warning(f"Wallet {wallet.id} debit of {amount} refused; balance {wallet.balance}")
        raise ServiceError('Insufficient balance', balance=str(wallet.balance), amount=str(amount))

    logger.info(f"Wallet {wallet.id} debited {amount}; balance {wallet.balance}")
    return entry


def transfer(source, target, amount, description='', user=None):
    """
    Move `amount` from one contact's wallet to another's.

    Both wallets are locked in id order so two opposite transfers cannot
    deadlock. The debit and credit share one reference.
    """
    amount = validate_amount(amount)
    if source.pk == target.pk:
        raise ServiceError('Cannot transfer to the same contact')
    if source.client_identifier != target.client_identifier:
        raise ServiceError('Contacts belong to different businesses')

    source_id, target_id = get_wallet(source).pk, get_wallet(target).pk
    reference = generate_reference('TRF', WalletTransaction, 'reference')
    with transaction.atomic():
        locked = {wallet.pk: wallet for wallet in Wallet.objects.select_for_update().filter(
            pk__in=[source_id, target_id]
        ).order_by('pk')}
        source_wallet, target_wallet = locked[source_id], locked[target_id]

        if amount > source_wallet.balance:
            raise ServiceError('Insufficient balance', balance=str(source_wallet.balance), amount=str(amount))

        source_wallet.balance -= amount
        source_wallet.save(update_fields=['balance', 'updated_at'])
        target_wallet.balance += amount
        target_wallet.save(update_fields=['balance', 'updated_at'])

        text = description or f"Transfer to {target.full_name}"
        debit_entry = record(source_wallet, 'debit', amount, reference, text, user)
        credit_entry = record(
            target_wallet, 'credit', amount, reference, description or f"Transfer from {source.full_name}", user
        )

    logger.info(f"Wallet transfer {reference}: {source_wallet.id} -> {target_wallet.id} amount={amount}")
    return debit_entry, credit_entry
