from django.db import models


class FamilyMember(models.Model):
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]

    client_identifier = models.CharField(max_length=64, db_index=True)
    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255)
    birth_date = models.DateField(null=True, blank=True)
    death_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    photo_url = models.URLField(max_length=1000, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_living(self):
        return self.death_date is None

    class Meta:
        db_table = 'family_members'
        ordering = ['last_name', 'first_name']


class FamilyRelationship(models.Model):
    """
    Directed edge: `from_member` is the `relationship_type` of `to_member`.
    Every edge is stored together with its reciprocal.
    """
    RELATIONSHIP_CHOICES = [
        ('parent', 'Parent'),
        ('child', 'Child'),
        ('spouse', 'Spouse'),
        ('sibling', 'Sibling'),
    ]

    from_member = models.ForeignKey(FamilyMember, on_delete=models.CASCADE, related_name='relationships')
    to_member = models.ForeignKey(FamilyMember, on_delete=models.CASCADE, related_name='related_from')
    relationship_type = models.CharField(max_length=10, choices=RELATIONSHIP_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.from_member} is {self.relationship_type} of {self.to_member}"

    class Meta:
        db_table = 'family_relationships'
        ordering = ['id']
        unique_together = [['from_member', 'to_member', 'relationship_type']]


class EditRequest(models.Model):
    """Change to a member proposed by a visitor of the public tree"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
    ]

    client_identifier = models.CharField(max_length=64, db_index=True)
    member = models.ForeignKey(FamilyMember, on_delete=models.CASCADE, related_name='edit_requests')
    first_name = models.CharField(max_length=255)
    last_name = models.CharField(max_length=255)
    birth_date = models.DateField(null=True, blank=True)
    death_date = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=FamilyMember.GENDER_CHOICES)
    photo_url = models.URLField(max_length=1000, blank=True)
    notes = models.TextField(blank=True)
    requester_name = models.CharField(max_length=255, blank=True)
    requester_email = models.EmailField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Edit request for {self.member} ({self.status})"

    class Meta:
        db_table = 'family_edit_requests'
        ordering = ['-created_at']
