import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='SubdomainRedirect',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subdomain', models.CharField(max_length=63, unique=True, validators=[django.core.validators.RegexValidator('^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$', 'Use lowercase letters, digits and hyphens; no leading or trailing hyphen.')])),
                ('destination_url', models.CharField(help_text='Absolute URL or a path on the main domain', max_length=500)),
                ('http_status', models.PositiveSmallIntegerField(choices=[(301, '301 Moved Permanently'), (302, '302 Found'), (307, '307 Temporary Redirect'), (308, '308 Permanent Redirect')], default=302)),
                ('is_active', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'subdomain_redirects',
                'ordering': ['subdomain'],
            },
        ),
    ]
