from django.db import models
from bizbox.core.models import generate_identifier


ROLE_CHOICES = [
    ('admin', 'Admin'),
    ('manager', 'Manager'),
    ('supervisor', 'Supervisor'),
    ('doctor', 'Doctor'),
    ('nurse', 'Nurse'),
    ('assistant', 'Assistant'),
    ('user', 'User'),
    ('viewer', 'Viewer'),
]

APP_CHOICES = [
    ('pos-retail', 'POS Retail'),
    ('pos-restaurant', 'POS Restaurant'),
    ('inventory', 'Inventory'),
    ('products', 'Products'),
    ('product-orders', 'Product Orders'),
    ('contacts', 'Contacts'),
    ('wallets', 'Wallets'),
    ('food-delivery', 'Food Delivery'),
    ('queue', 'Queue Management'),
    ('jobs', 'Job Boards'),
    ('courses', 'Courses'),
    ('genealogy', 'Genealogy'),
    ('content-creator', 'Content Creator'),
    ('redirects', 'Subdomain Redirects'),
    ('loan', 'Loan'),
    ('payroll', 'Payroll'),
    ('travel', 'Travel'),
    ('clinic', 'Clinic'),
    ('rental-property', 'Rental Property'),
    ('rental-item', 'Rental Item'),
    ('transportation', 'Transportation'),
    ('warehousing', 'Warehousing'),
    ('events', 'Events'),
    ('email', 'Email'),
    ('sms', 'SMS'),
    ('pages', 'Pages'),
]


class TeamMember(models.Model):
    """Staff account acting inside an owner's tenant"""
    identifier = models.CharField(max_length=64, unique=True, default=generate_identifier, editable=False)
    client_identifier = models.CharField(max_length=64, db_index=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    email = models.EmailField()
    contact_number = models.CharField(max_length=20, blank=True)
    password = models.CharField(max_length=128)
    roles = models.JSONField(default=list, blank=True)
    allowed_apps = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    timezone = models.CharField(max_length=64, default='Asia/Manila')
    language = models.CharField(max_length=10, default='en')
    last_password_change = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def has_any_role(self, roles):
        return bool(set(self.roles or []) & set(roles))

    class Meta:
        db_table = 'team_members'
        ordering = ['first_name', 'last_name']
        unique_together = [['client_identifier', 'email']]
