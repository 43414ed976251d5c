from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizbox.contacts.models import Contact
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import Course, Lesson, Enrollment
from .serializers import (
    CourseSerializer, CourseDetailSerializer, LessonSerializer, EnrollmentSerializer, EnrollSerializer,
    LessonStatusSerializer
)
from . import services


def tenant_course(request, pk):
    return get_object_or_404(Course, pk=pk, client_identifier=tenant_for(request))


def tenant_enrollment(request, pk):
    return get_object_or_404(
        Enrollment.objects.select_related('course', 'contact'),
        pk=pk, course__client_identifier=tenant_for(request)
    )


def progress_response(enrollment):
    data = EnrollmentSerializer(enrollment).data
    data['lessons'] = LessonStatusSerializer(services.lesson_statuses(enrollment), many=True).data
    return Response(data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def course_list_create(request):
    if request.method == 'GET':
        courses = Course.objects.filter(client_identifier=tenant_for(request))
        course_status = request.query_params.get('status')
        if course_status:
            courses = courses.filter(status=course_status)
        serializer = CourseSerializer(courses, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = CourseSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def course_detail(request, pk):
    course = tenant_course(request, pk)

    if request.method == 'GET':
        serializer = CourseDetailSerializer(course)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CourseSerializer(course, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        course.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def lesson_list_create(request, pk):
    """Lessons of a course in order; new lessons go last unless an order is given"""
    course = tenant_course(request, pk)

    if request.method == 'GET':
        serializer = LessonSerializer(course.lessons.all(), many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = LessonSerializer(data=request.data)
        if serializer.is_valid():
            order = serializer.validated_data.get('order')
            serializer.save(course=course, order=services.next_lesson_order(course) if order is None else order)
            services.refresh_course_progress(course)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def lesson_detail(request, pk):
    lesson = get_object_or_404(Lesson.objects.select_related('course'), pk=pk,
                               course__client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = LessonSerializer(lesson)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = LessonSerializer(lesson, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        course = lesson.course
        lesson.delete()
        services.refresh_course_progress(course)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def enrollment_list_create(request, pk):
    """Enrollments of a course, or enroll a contact"""
    course = tenant_course(request, pk)

    if request.method == 'GET':
        enrollments = course.enrollments.select_related('course', 'contact')
        enrollment_status = request.query_params.get('status')
        if enrollment_status:
            enrollments = enrollments.filter(status=enrollment_status)
        serializer = EnrollmentSerializer(enrollments, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = EnrollSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        contact = get_object_or_404(Contact, pk=serializer.validated_data['contact_id'],
                                    client_identifier=tenant_for(request))
        try:
            enrollment = services.enroll(course, contact)
        except ServiceError as e:
            return e.to_response()
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, CanDelete])
def enrollment_detail(request, pk):
    """Enrollment with per-lesson progress; DELETE cancels the enrollment"""
    enrollment = tenant_enrollment(request, pk)

    if request.method == 'GET':
        return progress_response(enrollment)
    else:  # DELETE
        enrollment.status = 'cancelled'
        enrollment.save(update_fields=['status'])
        return Response(status=status.HTTP_204_NO_CONTENT)


def lesson_action(request, pk, lesson_id, action):
    enrollment = tenant_enrollment(request, pk)
    lesson = get_object_or_404(enrollment.course.lessons, pk=lesson_id)
    try:
        action(enrollment, lesson)
    except ServiceError as e:
        return e.to_response()
    enrollment.refresh_from_db()
    return progress_response(enrollment)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def enrollment_start_lesson(request, pk, lesson_id):
    return lesson_action(request, pk, lesson_id, services.start_lesson)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def enrollment_complete_lesson(request, pk, lesson_id):
    return lesson_action(request, pk, lesson_id, services.complete_lesson)
