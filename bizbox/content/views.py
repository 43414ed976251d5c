from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Q
from django.shortcuts import get_object_or_404
from bizbox.core.utils import tenant_for
from bizbox.teams.permissions import CanEdit, CanDelete, HasDeleteRole
from .models import Post
from .serializers import PostSerializer, StatusSerializer, BulkDeleteSerializer, PublicPostSerializer
from . import services


def tenant_posts(request):
    return Post.objects.filter(client_identifier=tenant_for(request))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEdit])
def post_list_create(request):
    """Posts; filter by status, search by title or author"""
    if request.method == 'GET':
        posts = tenant_posts(request)
        post_status = request.query_params.get('status')
        if post_status:
            posts = posts.filter(status=post_status)
        search = request.query_params.get('search')
        if search:
            posts = posts.filter(Q(title__icontains=search) | Q(author__icontains=search))
        return Response(PostSerializer(posts, many=True).data)
    else:  # POST
        serializer = PostSerializer(data=request.data, context={'client_identifier': tenant_for(request)})
        if serializer.is_valid():
            services.save_post(serializer, tenant_for(request))
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEdit, CanDelete])
def post_detail(request, pk):
    post = get_object_or_404(tenant_posts(request), pk=pk)

    if request.method == 'GET':
        return Response(PostSerializer(post).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = PostSerializer(post, data=request.data, partial=request.method == 'PATCH',
                                    context={'client_identifier': tenant_for(request)})
        if serializer.is_valid():
            services.save_post(serializer, tenant_for(request))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        post.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, CanEdit])
def post_status(request, pk):
    post = get_object_or_404(tenant_posts(request), pk=pk)
    serializer = StatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    services.set_status(post, serializer.validated_data['status'])
    return Response(PostSerializer(post).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasDeleteRole])
def post_bulk_delete(request):
    serializer = BulkDeleteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    deleted, _ = tenant_posts(request).filter(pk__in=serializer.validated_data['ids']).delete()
    return Response({'deleted': deleted})


def published_posts(client_identifier):
    return Post.objects.filter(client_identifier=client_identifier, status='published').order_by('-published_at')


@api_view(['GET'])
@permission_classes([AllowAny])
def public_post_list(request, client_identifier):
    return Response(PublicPostSerializer(published_posts(client_identifier), many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_post_detail(request, client_identifier, slug):
    post = published_posts(client_identifier).filter(slug=slug).first()
    if post is None:
        return Response({'error': 'Post not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(PublicPostSerializer(post).data)
