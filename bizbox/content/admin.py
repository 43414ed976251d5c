from django.contrib import admin
from .models import Post


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'author', 'status', 'published_at', 'client_identifier']
    list_filter = ['status']
    search_fields = ['title', 'author', 'slug']
    prepopulated_fields = {'slug': ('title',)}
