import logging

from django.utils import timezone
from django.utils.text import slugify

from .models import Post

logger = logging.getLogger(__name__)


def unique_slug(client_identifier, title, exclude_pk=None):
    """Slug from the title, suffixed -2, -3... until free within the tenant"""
    base = slugify(title)[:240] or 'post'
    queryset = Post.objects.filter(client_identifier=client_identifier)
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    slug, counter = base, 2
    while queryset.filter(slug=slug).exists():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def save_post(serializer, client_identifier):
    """Save a post, filling the slug and the first publication time"""
    data = serializer.validated_data
    instance = serializer.instance
    extra = {}
    if not data.get('slug', getattr(instance, 'slug', '')):
        title = data.get('title', getattr(instance, 'title', ''))
        extra['slug'] = unique_slug(client_identifier, title, exclude_pk=getattr(instance, 'pk', None))
    status = data.get('status', getattr(instance, 'status', 'draft'))
    if status == 'published' and getattr(instance, 'published_at', None) is None:
        extra['published_at'] = timezone.now()
    if instance is None:
        extra['client_identifier'] = client_identifier
    return serializer.save(**extra)


def set_status(post, status):
    post.status = status
    if status == 'published' and post.published_at is None:
        post.published_at = timezone.now()
    post.save(update_fields=['status', 'published_at', 'updated_at'])
    logger.info(f"Post {post.id} set to {status}")
    return post
