"""
Queue number issuing and the number lifecycle.

waiting -> called -> serving -> completed; waiting or called numbers can be
cancelled, and a called number can be completed without being served.
"""
import logging

from django.db import transaction
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, NotFoundError, ConflictError
from .models import QueueType, QueueNumber

logger = logging.getLogger(__name__)

NUMBER_TRANSITIONS = {
    'serving': ('called',),
    'completed': ('called', 'serving'),
    'cancelled': ('waiting', 'called'),
}

STATUS_TIMESTAMPS = {
    'called': 'called_at',
    'serving': 'serving_at',
    'completed': 'completed_at',
}

DISPLAY_WAITING_LIMIT = 5


@transaction.atomic
def issue_number(queue_type, customer_name='', customer_contact=''):
    """Next number of the queue; the counter is bumped under a row lock"""
    queue_type = QueueType.objects.select_for_update().get(pk=queue_type.pk)
    if not queue_type.is_active:
        raise ServiceError('Queue is inactive')

    queue_type.current_number += 1
    queue_type.save(update_fields=['current_number', 'updated_at'])
    number = QueueNumber.objects.create(
        queue_type=queue_type,
        queue_number=queue_type.format_number(queue_type.current_number),
        customer_name=customer_name or '',
        customer_contact=customer_contact or '',
    )
    logger.info(f"Queue number issued: {number.queue_number} ({queue_type.name})")
    return number


@transaction.atomic
def call_next(queue_type):
    """Call the oldest waiting number"""
    number = queue_type.queue_numbers.select_for_update().filter(status='waiting').order_by('created_at', 'id').first()
    if number is None:
        raise NotFoundError('No waiting queue numbers found')
    number.status = 'called'
    number.called_at = timezone.now()
    number.save(update_fields=['status', 'called_at', 'updated_at'])
    logger.info(f"Queue number called: {number.queue_number} ({queue_type.name})")
    return number


def change_status(number, new_status):
    if number.status not in NUMBER_TRANSITIONS.get(new_status, ()):
        raise ConflictError(
            f"Cannot change queue number from {number.status} to {new_status}",
            status=number.status,
        )
    number.status = new_status
    update_fields = ['status', 'updated_at']
    if new_status in STATUS_TIMESTAMPS:
        setattr(number, STATUS_TIMESTAMPS[new_status], timezone.now())
        update_fields.append(STATUS_TIMESTAMPS[new_status])
    number.save(update_fields=update_fields)
    return number


def reset_counter(queue_type):
    queue_type.current_number = 0
    queue_type.save(update_fields=['current_number', 'updated_at'])
    logger.info(f"Queue counter reset: {queue_type.name}")
    return queue_type


def display_board(queue_types):
    """Counts plus who is being served, who was called and who is next"""
    numbers = QueueNumber.objects.filter(
        queue_type__in=queue_types, created_at__date=timezone.localdate()
    ).select_related('queue_type')
    counts = {value: 0 for value, _ in QueueNumber.STATUS_CHOICES}
    for number in numbers:
        counts[number.status] += 1
    return {
        'counts': counts,
        'current_serving': [n for n in numbers if n.status == 'serving'],
        'called_numbers': [n for n in numbers if n.status == 'called'],
        'next_waiting': [n for n in numbers if n.status == 'waiting'][:DISPLAY_WAITING_LIMIT],
    }


def get_queue_number(client_identifier, pk):
    number = QueueNumber.objects.select_related('queue_type').filter(
        pk=pk, queue_type__client_identifier=client_identifier
    ).first()
    if number is None:
        raise NotFoundError('Queue number not found')
    return number
