import logging

from django.http import HttpResponseRedirect

from .services import resolve

logger = logging.getLogger(__name__)


class SubdomainRedirectMiddleware:
    """Answer requests for configured subdomains with their redirect"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        target = resolve(request.get_host(), scheme=request.scheme)
        if target is not None:
            destination, http_status = target
            logger.debug(f"Subdomain redirect {request.get_host()} -> {destination} ({http_status})")
            response = HttpResponseRedirect(destination)
            response.status_code = http_status
            return response
        return self.get_response(request)
