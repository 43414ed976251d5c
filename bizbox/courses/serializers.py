from decimal import Decimal
from rest_framework import serializers
from .models import Course, Lesson, Enrollment


class LessonSerializer(serializers.ModelSerializer):
    order = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = Lesson
        fields = ['id', 'course', 'title', 'content', 'video_url', 'duration_minutes', 'order', 'created_at',
                  'updated_at']
        read_only_fields = ['course', 'created_at', 'updated_at']


class CourseSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    lesson_count = serializers.SerializerMethodField()
    enrollment_count = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = ['id', 'title', 'description', 'status', 'price', 'certificate_enabled', 'lesson_count',
                  'enrollment_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_lesson_count(self, obj):
        return obj.lessons.count()

    def get_enrollment_count(self, obj):
        return obj.enrollments.exclude(status='cancelled').count()


class CourseDetailSerializer(CourseSerializer):
    lessons = LessonSerializer(many=True, read_only=True)

    class Meta(CourseSerializer.Meta):
        fields = CourseSerializer.Meta.fields + ['lessons']


class EnrollmentSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source='course.title', read_only=True)
    contact_name = serializers.CharField(source='contact.full_name', read_only=True)

    class Meta:
        model = Enrollment
        fields = ['id', 'course', 'course_title', 'contact', 'contact_name', 'status', 'progress_percentage',
                  'lessons_completed', 'enrolled_at', 'completed_at', 'certificate_issued_at']
        read_only_fields = fields


class EnrollSerializer(serializers.Serializer):
    contact_id = serializers.IntegerField()


class LessonStatusSerializer(serializers.Serializer):
    lesson = LessonSerializer(read_only=True)
    status = serializers.CharField(read_only=True)
    started_at = serializers.DateTimeField(read_only=True, allow_null=True)
    completed_at = serializers.DateTimeField(read_only=True, allow_null=True)
