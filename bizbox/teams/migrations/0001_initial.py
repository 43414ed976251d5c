import bizbox.core.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TeamMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('identifier', models.CharField(default=bizbox.core.models.generate_identifier, editable=False, max_length=64, unique=True)),
                ('client_identifier', models.CharField(db_index=True, max_length=64)),
                ('first_name', models.CharField(max_length=150)),
                ('last_name', models.CharField(max_length=150)),
                ('email', models.EmailField(max_length=254)),
                ('contact_number', models.CharField(blank=True, max_length=20)),
                ('password', models.CharField(max_length=128)),
                ('roles', models.JSONField(blank=True, default=list)),
                ('allowed_apps', models.JSONField(blank=True, default=list)),
                ('is_active', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True)),
                ('timezone', models.CharField(default='Asia/Manila', max_length=64)),
                ('language', models.CharField(default='en', max_length=10)),
                ('last_password_change', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'team_members',
                'ordering': ['first_name', 'last_name'],
                'unique_together': {('client_identifier', 'email')},
            },
        ),
    ]
