from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Job',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('client_id', models.CharField(max_length=100)),
                ('worker_id', models.CharField(blank=True, max_length=100, null=True)),
                ('region', models.CharField(max_length=100)),
                ('status', models.CharField(
                    choices=[
                        ('draft', 'Draft'),
                        ('posted', 'Posted'),
                        ('in_review', 'In Review'),
                        ('assigned', 'Assigned'),
                        ('in_progress', 'In Progress'),
                        ('submitted', 'Submitted'),
                        ('revision_requested', 'Revision Requested'),
                        ('completed', 'Completed'),
                        ('cancelled', 'Cancelled'),
                        ('disputed', 'Disputed'),
                    ],
                    default='draft',
                    max_length=20,
                )),
                ('messages', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'jobs',
                'indexes': [
                    models.Index(fields=['client_id', 'status'], name='jobs_client_status_idx'),
                    models.Index(fields=['worker_id', 'status'], name='jobs_worker_status_idx'),
                    models.Index(fields=['region', 'status'], name='jobs_region_status_idx'),
                ],
            },
        ),
    ]
