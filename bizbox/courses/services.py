"""
Course enrollment and lesson progress

Progress is the share of the course's lessons completed, rounded to two
places. Completing the last lesson completes the enrollment and, when the
course offers one, issues the certificate.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from bizbox.core.exceptions import ServiceError, ConflictError
from .models import Enrollment, LessonProgress

logger = logging.getLogger(__name__)


def next_lesson_order(course):
    current = course.lessons.aggregate(highest=Max('order'))['highest']
    return 0 if current is None else current + 1


def calculate_progress(completed, total):
    if not total:
        return Decimal('0.00')
    return (Decimal(completed) * 100 / Decimal(total)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def enroll(course, contact):
    if course.status != 'published':
        raise ServiceError('Course is not open for enrollment')

    enrollment = Enrollment.objects.filter(course=course, contact=contact).first()
    if enrollment is not None:
        if enrollment.status != 'cancelled':
            raise ServiceError('Contact is already enrolled in this course')
        enrollment.status = 'active'
        enrollment.save(update_fields=['status'])
        return enrollment

    enrollment = Enrollment.objects.create(course=course, contact=contact)
    logger.info(f"Enrollment created: contact {contact.id} in course {course.id}")
    return enrollment


def ensure_active(enrollment):
    if enrollment.status == 'cancelled':
        raise ConflictError('Enrollment is cancelled')


def refresh_progress(enrollment, allow_completion=False):
    """Recount completed lessons; optionally complete the enrollment"""
    total = enrollment.course.lessons.count()
    completed = enrollment.lesson_progress.filter(
        status='completed', lesson__course=enrollment.course
    ).count()
    enrollment.lessons_completed = completed
    enrollment.progress_percentage = calculate_progress(completed, total)
    update_fields = ['lessons_completed', 'progress_percentage']

    if allow_completion and total and completed >= total and enrollment.status == 'active':
        now = timezone.now()
        enrollment.status = 'completed'
        enrollment.completed_at = now
        update_fields += ['status', 'completed_at']
        if enrollment.course.certificate_enabled and enrollment.certificate_issued_at is None:
            enrollment.certificate_issued_at = now
            update_fields.append('certificate_issued_at')
        logger.info(f"Enrollment {enrollment.id} completed")

    enrollment.save(update_fields=update_fields)
    return enrollment


def refresh_course_progress(course):
    for enrollment in course.enrollments.select_related('course'):
        refresh_progress(enrollment)


@transaction.atomic
def start_lesson(enrollment, lesson):
    """not_started -> in_progress; a completed lesson is left as it is"""
    ensure_active(enrollment)
    progress, _ = LessonProgress.objects.select_for_update().get_or_create(enrollment=enrollment, lesson=lesson)
    if progress.status == 'not_started':
        progress.status = 'in_progress'
        progress.started_at = timezone.now()
        progress.save(update_fields=['status', 'started_at'])
    return progress


@transaction.atomic
def complete_lesson(enrollment, lesson):
    ensure_active(enrollment)
    progress, _ = LessonProgress.objects.select_for_update().get_or_create(enrollment=enrollment, lesson=lesson)
    if progress.status != 'completed':
        now = timezone.now()
        progress.status = 'completed'
        progress.started_at = progress.started_at or now
        progress.completed_at = now
        progress.save(update_fields=['status', 'started_at', 'completed_at'])
    refresh_progress(enrollment, allow_completion=True)
    return progress


def lesson_statuses(enrollment):
    """Every lesson of the course with this enrollment's status for it"""
    progress = {p.lesson_id: p for p in enrollment.lesson_progress.all()}
    lessons = []
    for lesson in enrollment.course.lessons.all():
        entry = progress.get(lesson.id)
        lessons.append({
            'lesson': lesson,
            'status': entry.status if entry else 'not_started',
            'started_at': entry.started_at if entry else None,
            'completed_at': entry.completed_at if entry else None,
        })
    return lessons
