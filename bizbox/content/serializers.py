from rest_framework import serializers
from .models import Post


class PostSerializer(serializers.ModelSerializer):
    slug = serializers.SlugField(max_length=255, required=False, allow_blank=True)

    class Meta:
        model = Post
        fields = ['id', 'title', 'slug', 'content', 'excerpt', 'status', 'featured_image', 'author',
                  'published_at', 'created_at', 'updated_at']
        read_only_fields = ['published_at', 'created_at', 'updated_at']

    def validate_slug(self, value):
        if not value:
            return value
        queryset = Post.objects.filter(client_identifier=self.context.get('client_identifier'), slug=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A post with this slug already exists.')
        return value


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Post.STATUS_CHOICES)


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class PublicPostSerializer(serializers.ModelSerializer):
    class Meta:
        model = Post
        fields = ['id', 'title', 'slug', 'content', 'excerpt', 'featured_image', 'author', 'published_at']
