from django.db import models


class QueueType(models.Model):
    """A line customers take numbers for (e.g. Cashier, Pharmacy)"""
    client_identifier = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    prefix = models.CharField(max_length=5, default='A')
    current_number = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def format_number(self, number):
        return f"{self.prefix}{number:03d}"

    class Meta:
        db_table = 'queue_types'
        ordering = ['name']


class QueueNumber(models.Model):
    STATUS_CHOICES = [
        ('waiting', 'Waiting'),
        ('called', 'Called'),
        ('serving', 'Serving'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    queue_type = models.ForeignKey(QueueType, on_delete=models.CASCADE, related_name='queue_numbers')
    queue_number = models.CharField(max_length=20)
    customer_name = models.CharField(max_length=200, blank=True)
    customer_contact = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='waiting', db_index=True)
    notes = models.TextField(blank=True)
    called_at = models.DateTimeField(null=True, blank=True)
    serving_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.queue_number

    class Meta:
        db_table = 'queue_numbers'
        ordering = ['created_at', 'id']
