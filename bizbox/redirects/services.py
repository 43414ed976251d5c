"""
Subdomain redirect resolution

A request for `<sub>.<BIZBOX_BASE_DOMAIN>` is redirected when an active
SubdomainRedirect exists for `<sub>`. Lookups are cached per subdomain.
"""
import logging

from django.conf import settings

from bizbox.core.cache_utils import cached_query, REDIRECT_LOOKUP_CACHE_TTL
from .models import SubdomainRedirect

logger = logging.getLogger(__name__)


def subdomain_from_host(host, base_domain=None):
    """
    Extract the single-label subdomain of the base domain from a host.
    Returns None for the apex itself, other domains and nested subdomains.
    """
    base_domain = (base_domain or settings.BIZBOX_BASE_DOMAIN).lower()
    host = (host or '').strip().lower().rstrip('.')
    if host.startswith('['):
        return None
    host = host.split(':', 1)[0]

    suffix = f".{base_domain}"
    if not host.endswith(suffix):
        return None
    subdomain = host[:-len(suffix)]
    if not subdomain or '.' in subdomain:
        return None
    return subdomain


@cached_query(cache_ttl=REDIRECT_LOOKUP_CACHE_TTL, key_prefix="subdomain_redirect")
def lookup_redirect(subdomain):
    """Active redirect for a subdomain as a dict; empty dict when there is none"""
    redirect = SubdomainRedirect.objects.filter(subdomain=subdomain, is_active=True).first()
    if redirect is None:
        return {}
    return {'destination_url': redirect.destination_url, 'http_status': redirect.http_status}


def resolve(host, scheme='https'):
    """
    Resolve a host to (destination_url, http_status), or None.

    Relative destinations are made absolute against the base domain so the
    redirect never lands back on the same subdomain.
    """
    subdomain = subdomain_from_host(host)
    if subdomain is None:
        return None

    target = lookup_redirect(subdomain)
    if not target:
        return None

    destination = target['destination_url']
    if destination.startswith('/'):
        destination = f"{scheme}://{settings.BIZBOX_BASE_DOMAIN}{destination}"
    return destination, target['http_status']
