from django.core.validators import RegexValidator
from django.db import models

RESERVED_SUBDOMAINS = ('www', 'api', 'admin', 'mail')

subdomain_validator = RegexValidator(
    r'^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$',
    'Use lowercase letters, digits and hyphens; no leading or trailing hyphen.'
)


class SubdomainRedirect(models.Model):
    """Branded subdomain of the base domain that redirects elsewhere"""
    STATUS_CHOICES = [
        (301, '301 Moved Permanently'),
        (302, '302 Found'),
        (307, '307 Temporary Redirect'),
        (308, '308 Permanent Redirect'),
    ]

    subdomain = models.CharField(max_length=63, unique=True, validators=[subdomain_validator])
    destination_url = models.CharField(max_length=500, help_text="Absolute URL or a path on the main domain")
    http_status = models.PositiveSmallIntegerField(choices=STATUS_CHOICES, default=302)
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.subdomain} -> {self.destination_url}"

    def save(self, *args, **kwargs):
        self.subdomain = self.subdomain.strip().lower()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'subdomain_redirects'
        ordering = ['subdomain']
