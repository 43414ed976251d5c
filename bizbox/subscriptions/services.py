import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, ConflictError
from bizbox.core.utils import generate_reference
from .models import UserSubscription

logger = logging.getLogger(__name__)

UPGRADE_REASON = 'Upgraded to a new plan'


def current_subscription(user, now=None):
    now = now or timezone.now()
    return UserSubscription.objects.select_related('plan').filter(
        user=user, status='active', end_date__gt=now
    ).order_by('-end_date').first()


def start(subscription, now=None):
    """Activate a subscription, replacing the user's running one"""
    now = now or timezone.now()
    previous = UserSubscription.objects.select_for_update().filter(
        user=subscription.user, status='active'
    ).exclude(pk=subscription.pk)
    for running in previous:
        cancel(running, UPGRADE_REASON, now=now)

    subscription.status = 'active'
    subscription.start_date = now
    subscription.end_date = now + timedelta(days=subscription.plan.duration_in_days)
    subscription.amount_paid = subscription.plan.price
    subscription.save()
    logger.info(f"Subscription {subscription.identifier} active until {subscription.end_date:%Y-%m-%d}")
    return subscription


@transaction.atomic
def subscribe(user, plan, payment_method='cash', auto_renew=False):
    """
    Subscribe a user to a plan. Free plans start right away; paid plans wait
    as pending until staff record the payment.
    """
    if not plan.is_active:
        raise ServiceError('This plan is not available')
    if UserSubscription.objects.select_for_update().filter(user=user, status='pending').exists():
        raise ConflictError('You already have a subscription awaiting payment')

    subscription = UserSubscription(user=user, plan=plan, payment_method=payment_method, auto_renew=auto_renew)
    if plan.is_free:
        subscription.save()
        return start(subscription)

    subscription.payment_reference = generate_reference('CASH', UserSubscription, 'payment_reference')
    subscription.save()
    logger.info(f"Subscription {subscription.identifier} pending payment {subscription.payment_reference}")
    return subscription


@transaction.atomic
def mark_paid(subscription):
    if subscription.status != 'pending':
        raise ConflictError(f'Only pending subscriptions can be marked as paid (current: {subscription.status})')
    return start(subscription)


def cancel(subscription, reason='', now=None):
    if subscription.status not in ('pending', 'active'):
        raise ConflictError(f'Cannot cancel a {subscription.status} subscription')
    subscription.status = 'cancelled'
    subscription.cancellation_reason = reason or ''
    subscription.cancelled_at = now or timezone.now()
    subscription.save(update_fields=['status', 'cancellation_reason', 'cancelled_at', 'updated_at'])
    logger.info(f"Subscription {subscription.identifier} cancelled: {reason or 'no reason given'}")
    return subscription


def expire_subscriptions(now=None):
    """Mark active subscriptions past their end date as expired"""
    now = now or timezone.now()
    count = UserSubscription.objects.filter(status='active', end_date__lte=now).update(
        status='expired', updated_at=now
    )
    if count:
        logger.info(f"Expired {count} subscriptions")
    return count
