"""
Cache invalidation signals
Public restaurant pages are cached; drop them when a restaurant or its menu changes
"""
import logging

from django.db import transaction
from django.db.models.signals import pre_save, post_save, post_delete
from django.dispatch import receiver

from .models import Restaurant, MenuCategory, MenuItem
from .services import public_restaurant_list, public_restaurant_menu

logger = logging.getLogger(__name__)


def invalidate_public_restaurant(restaurant):
    public_restaurant_menu.invalidate(restaurant.slug)
    public_restaurant_list.invalidate(None)
    public_restaurant_list.invalidate(restaurant.client_identifier)
    logger.debug(f"Invalidated public menu cache for {restaurant.slug}")


@receiver(pre_save, sender=Restaurant)
def restaurant_renamed(sender, instance, **kwargs):
    if not instance.pk:
        return
    previous = Restaurant.objects.filter(pk=instance.pk).values_list('slug', flat=True).first()
    if previous and previous != instance.slug:
        transaction.on_commit(lambda: public_restaurant_menu.invalidate(previous))


@receiver([post_save, post_delete], sender=Restaurant)
def restaurant_changed(sender, instance, **kwargs):
    transaction.on_commit(lambda: invalidate_public_restaurant(instance))


@receiver([post_save, post_delete], sender=MenuCategory)
@receiver([post_save, post_delete], sender=MenuItem)
def menu_changed(sender, instance, **kwargs):
    restaurant = Restaurant.objects.filter(pk=instance.restaurant_id).first()
    if restaurant is not None:
        transaction.on_commit(lambda: invalidate_public_restaurant(restaurant))
