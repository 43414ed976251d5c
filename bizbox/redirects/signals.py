"""
Cache invalidation signals
Redirect lookups are cached per subdomain; drop the entry whenever a redirect changes
"""
import logging

from django.db import transaction
from django.db.models.signals import pre_save, post_save, post_delete
from django.dispatch import receiver

from .models import SubdomainRedirect
from .services import lookup_redirect

logger = logging.getLogger(__name__)


def invalidate_subdomain(subdomain):
    lookup_redirect.invalidate(subdomain)
    logger.debug(f"Invalidated redirect cache for {subdomain}")


@receiver(pre_save, sender=SubdomainRedirect)
def redirect_renamed(sender, instance, **kwargs):
    if not instance.pk:
        return
    previous = SubdomainRedirect.objects.filter(pk=instance.pk).values_list('subdomain', flat=True).first()
    if previous and previous != instance.subdomain:
        transaction.on_commit(lambda: invalidate_subdomain(previous))


@receiver([post_save, post_delete], sender=SubdomainRedirect)
def redirect_changed(sender, instance, **kwargs):
    subdomain = instance.subdomain
    transaction.on_commit(lambda: invalidate_subdomain(subdomain))
