from django.contrib import admin
from .models import Course, Lesson, Enrollment, LessonProgress


class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 0
    fields = ['order', 'title', 'duration_minutes']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'price', 'certificate_enabled', 'client_identifier', 'created_at']
    list_filter = ['status', 'certificate_enabled']
    search_fields = ['title']
    inlines = [LessonInline]


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['contact', 'course', 'status', 'progress_percentage', 'lessons_completed', 'enrolled_at']
    list_filter = ['status']
    search_fields = ['contact__first_name', 'contact__last_name', 'course__title']


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = ['enrollment', 'lesson', 'status', 'started_at', 'completed_at']
    list_filter = ['status']
