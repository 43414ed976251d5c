import logging

from django.db import transaction
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, ConflictError
from .models import Applicant, JobApplication

logger = logging.getLogger(__name__)

APPLICANT_FIELDS = ('name', 'phone', 'address', 'linkedin_url', 'portfolio_url', 'work_experience', 'education',
                    'skills', 'summary')


def publish_job(job):
    if job.status == 'published':
        raise ConflictError('Job is already published')
    job.status = 'published'
    job.published_at = timezone.now()
    job.save(update_fields=['status', 'published_at', 'updated_at'])
    logger.info(f"Job published: {job.title} (board {job.board_id})")
    return job


def close_job(job):
    if job.status != 'published':
        raise ConflictError('Only published jobs can be closed')
    job.status = 'closed'
    job.save(update_fields=['status', 'updated_at'])
    logger.info(f"Job closed: {job.title} (board {job.board_id})")
    return job


def deadline_passed(job, today=None):
    if job.application_deadline is None:
        return False
    return job.application_deadline < (today or timezone.localdate())


@transaction.atomic
def apply(job, data):
    """
    Apply to a published job. The applicant is matched by e-mail within the
    job's business and their details refreshed; applying twice is rejected.
    """
    if job.status != 'published' or not job.board.is_active:
        raise ServiceError('This job is not accepting applications')
    if deadline_passed(job):
        raise ServiceError('The application deadline has passed')

    client_identifier = job.board.client_identifier
    email = data['email'].strip().lower()
    defaults = {field: data[field] for field in APPLICANT_FIELDS if data.get(field) not in (None, '')}
    applicant, created = Applicant.objects.select_for_update().get_or_create(
        client_identifier=client_identifier, email=email, defaults=defaults
    )
    if not created and defaults:
        for field, value in defaults.items():
            setattr(applicant, field, value)
        applicant.save()

    if JobApplication.objects.filter(job=job, applicant=applicant).exists():
        raise ServiceError('You have already applied for this job')

    application = JobApplication.objects.create(
        job=job, applicant=applicant, cover_letter=data.get('cover_letter', '')
    )
    logger.info(f"Application received: {email} for job {job.id}")
    return application
