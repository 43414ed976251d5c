from django.contrib import admin
from .models import JobBoard, Job, Applicant, JobApplication


@admin.register(JobBoard)
class JobBoardAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'client_identifier', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['title', 'board', 'employment_type', 'status', 'application_deadline', 'published_at']
    list_filter = ['status', 'employment_type']
    search_fields = ['title', 'location']


@admin.register(Applicant)
class ApplicantAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'client_identifier', 'created_at']
    search_fields = ['name', 'email', 'phone']


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ['applicant', 'job', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['applicant__name', 'applicant__email', 'job__title']
