import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.core.exceptions import ServiceError
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete
from .models import JobBoard, Job, JobApplication
from .serializers import (
    JobBoardSerializer, JobSerializer, JobApplicationSerializer, ApplySerializer,
    PublicJobBoardSerializer, PublicJobSerializer
)
from . import services

logger = logging.getLogger(__name__)


def tenant_jobs(request):
    return Job.objects.filter(board__client_identifier=tenant_for(request)).select_related('board')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def job_board_list_create(request):
    if request.method == 'GET':
        boards = JobBoard.objects.filter(client_identifier=tenant_for(request))
        serializer = JobBoardSerializer(boards, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = JobBoardSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(client_identifier=tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def job_board_detail(request, pk):
    board = get_object_or_404(JobBoard, pk=pk, client_identifier=tenant_for(request))

    if request.method == 'GET':
        serializer = JobBoardSerializer(board)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = JobBoardSerializer(board, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        board.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def job_list_create(request, pk):
    """Jobs of a board; filter by status, search by title or location"""
    board = get_object_or_404(JobBoard, pk=pk, client_identifier=tenant_for(request))

    if request.method == 'GET':
        jobs = board.jobs.all()
        job_status = request.query_params.get('status')
        if job_status:
            jobs = jobs.filter(status=job_status)
        search = request.query_params.get('search')
        if search:
            jobs = jobs.filter(Q(title__icontains=search) | Q(location__icontains=search))
        serializer = JobSerializer(jobs, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = JobSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(board=board)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def job_detail(request, pk):
    job = get_object_or_404(tenant_jobs(request), pk=pk)

    if request.method == 'GET':
        serializer = JobSerializer(job)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = JobSerializer(job, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        job.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def job_publish(request, pk):
    job = get_object_or_404(tenant_jobs(request), pk=pk)
    try:
        services.publish_job(job)
    except ServiceError as e:
        return e.to_response()
    return Response(JobSerializer(job).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEdit])
def job_close(request, pk):
    job = get_object_or_404(tenant_jobs(request), pk=pk)
    try:
        services.close_job(job)
    except ServiceError as e:
        return e.to_response()
    return Response(JobSerializer(job).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def job_applications(request, pk):
    """Applications received for a job; filter by status"""
    job = get_object_or_404(tenant_jobs(request), pk=pk)
    applications = job.applications.select_related('applicant', 'job')
    application_status = request.query_params.get('status')
    if application_status:
        applications = applications.filter(status=application_status)
    serializer = JobApplicationSerializer(applications, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, CanEdit])
def job_application_detail(request, pk):
    """Retrieve an application or update its status and notes"""
    application = get_object_or_404(
        JobApplication.objects.select_related('applicant', 'job'),
        pk=pk, job__board__client_identifier=tenant_for(request)
    )

    if request.method == 'GET':
        serializer = JobApplicationSerializer(application)
        return Response(serializer.data)
    else:  # PATCH
        serializer = JobApplicationSerializer(application, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Application {application.id} set to {application.status}")
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_job_board(request, slug):
    """Public job board with its published jobs"""
    board = JobBoard.objects.filter(slug=slug, is_active=True).first()
    if board is None:
        return Response({'error': 'Job board not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PublicJobBoardSerializer(board).data)


def public_job(pk):
    return Job.objects.select_related('board').filter(pk=pk, status='published', board__is_active=True).first()


@api_view(['GET'])
@permission_classes([AllowAny])
def public_job_detail(request, pk):
    job = public_job(pk)
    if job is None:
        return Response({'error': 'Job not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PublicJobSerializer(job).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def public_job_apply(request, pk):
    """Apply to a published job without an account"""
    job = public_job(pk)
    if job is None:
        return Response({'error': 'Job not found'}, status=status.HTTP_404_NOT_FOUND)

    serializer = ApplySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        application = services.apply(job, serializer.validated_data)
    except ServiceError as e:
        return e.to_response()
    return Response({
        'message': 'Application submitted successfully',
        'application_id': application.id,
        'status': application.status,
    }, status=status.HTTP_201_CREATED)
