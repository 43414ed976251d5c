"""Shared helpers: audit logging, tenancy, references, dates and money"""
import logging
import uuid
from datetime import timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date

from .models import AuditLog

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def tenant_for(request):
    """Tenant key of the authenticated account owner"""
    return request.user.identifier


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     client_identifier=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, cart_add, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., product name, order number)
        object_reference: Reference identifier (e.g., cart number, sale number)
        client_identifier: Tenant key (defaults to the acting user's identifier)
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user
        if audit_user is not None and not audit_user.is_authenticated:
            audit_user = None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        if client_identifier is None and audit_user is not None:
            client_identifier = audit_user.identifier

        return AuditLog.objects.create(
            user=audit_user,
            client_identifier=client_identifier or '',
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None
        )
    except Exception as e:
        # Don't fail the main operation if audit logging fails
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def generate_reference(prefix, model, field, length=8):
    """Unique `PREFIX-YYYYMMDD-XXXXXXXX` reference for `model.field`"""
    def candidate():
        return f"{prefix}-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:length].upper()}"

    reference = candidate()
    while model.objects.filter(**{field: reference}).exists():
        reference = candidate()
    return reference


def to_decimal(value, default=None):
    """Parse a money/amount value; returns `default` when it cannot be parsed"""
    if value is None or value == '':
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return default


def money_string(amount):
    """Two-place string for an amount; aggregates may come back unscaled (SQLite)"""
    return str(to_decimal(amount, Decimal('0.00')).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def format_currency(amount, currency=None):
    """Format an amount with the tenant's currency symbol and separators"""
    currency = {**settings.BIZBOX_DEFAULT_CURRENCY, **(currency or {})}
    amount = (to_decimal(amount, Decimal('0.00'))).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = '-' if amount < 0 else ''
    whole, fraction = f"{abs(amount):.2f}".split('.')
    grouped = f"{int(whole):,}".replace(',', currency['thousands_separator'])
    return f"{sign}{currency['symbol']}{grouped}{currency['decimal_separator']}{fraction}"


def apply_date_range(queryset, params, field='created_at'):
    """
    Filter a queryset by a named range (`date_range`) or explicit
    `date_from` / `date_to` (YYYY-MM-DD, inclusive).
    """
    today = timezone.localdate()
    date_range = params.get('date_range')
    start = end = None

    if date_range == 'today':
        start = end = today
    elif date_range == 'yesterday':
        start = end = today - timedelta(days=1)
    elif date_range == 'last_7_days':
        start, end = today - timedelta(days=6), today
    elif date_range == 'last_30_days':
        start, end = today - timedelta(days=29), today
    elif date_range == 'this_month':
        start, end = today.replace(day=1), today
    else:
        start = parse_date(params.get('date_from') or '')
        end = parse_date(params.get('date_to') or '')

    if start:
        queryset = queryset.filter(**{f'{field}__date__gte': start})
    if end:
        queryset = queryset.filter(**{f'{field}__date__lte': end})
    return queryset
