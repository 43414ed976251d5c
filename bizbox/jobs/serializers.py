from rest_framework import serializers
from .models import JobBoard, Job, Applicant, JobApplication


class JobBoardSerializer(serializers.ModelSerializer):
    job_count = serializers.SerializerMethodField()

    class Meta:
        model = JobBoard
        fields = ['id', 'name', 'slug', 'description', 'is_active', 'job_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_job_count(self, obj):
        return obj.jobs.count()


class JobSerializer(serializers.ModelSerializer):
    board_name = serializers.CharField(source='board.name', read_only=True)
    application_count = serializers.SerializerMethodField()

    class Meta:
        model = Job
        fields = ['id', 'board', 'board_name', 'title', 'description', 'requirements', 'location',
                  'employment_type', 'salary_min', 'salary_max', 'status', 'application_deadline',
                  'published_at', 'application_count', 'created_at', 'updated_at']
        read_only_fields = ['board', 'status', 'published_at', 'created_at', 'updated_at']

    def get_application_count(self, obj):
        return obj.applications.count()

    def validate(self, attrs):
        salary_min = attrs.get('salary_min', getattr(self.instance, 'salary_min', None))
        salary_max = attrs.get('salary_max', getattr(self.instance, 'salary_max', None))
        if salary_min is not None and salary_max is not None and salary_max < salary_min:
            raise serializers.ValidationError({'salary_max': ['Maximum salary cannot be below the minimum.']})
        return attrs


class ApplicantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Applicant
        fields = ['id', 'name', 'email', 'phone', 'address', 'linkedin_url', 'portfolio_url', 'work_experience',
                  'education', 'skills', 'summary', 'created_at']
        read_only_fields = fields


class JobApplicationSerializer(serializers.ModelSerializer):
    applicant = ApplicantSerializer(read_only=True)
    job_title = serializers.CharField(source='job.title', read_only=True)

    class Meta:
        model = JobApplication
        fields = ['id', 'job', 'job_title', 'applicant', 'cover_letter', 'status', 'notes', 'created_at',
                  'updated_at']
        read_only_fields = ['job', 'cover_letter', 'created_at', 'updated_at']


class ApplySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    linkedin_url = serializers.URLField(required=False, allow_blank=True)
    portfolio_url = serializers.URLField(required=False, allow_blank=True)
    work_experience = serializers.CharField(required=False, allow_blank=True)
    education = serializers.CharField(required=False, allow_blank=True)
    skills = serializers.CharField(required=False, allow_blank=True)
    summary = serializers.CharField(required=False, allow_blank=True)
    cover_letter = serializers.CharField(required=False, allow_blank=True, default='')


class PublicJobSerializer(serializers.ModelSerializer):
    board_name = serializers.CharField(source='board.name', read_only=True)
    board_slug = serializers.CharField(source='board.slug', read_only=True)

    class Meta:
        model = Job
        fields = ['id', 'board_name', 'board_slug', 'title', 'description', 'requirements', 'location',
                  'employment_type', 'salary_min', 'salary_max', 'application_deadline', 'published_at']


class PublicJobBoardSerializer(serializers.ModelSerializer):
    jobs = serializers.SerializerMethodField()

    class Meta:
        model = JobBoard
        fields = ['id', 'name', 'slug', 'description', 'jobs']

    def get_jobs(self, obj):
        jobs = obj.jobs.filter(status='published').order_by('-published_at')
        return PublicJobSerializer(jobs, many=True).data
