from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('user_id', models.CharField(max_length=100, primary_key=True, serialize=False, unique=True)),
                ('user_name', models.CharField(max_length=100)),
                ('email', models.EmailField(blank=True, max_length=255, null=True)),
                ('role', models.CharField(
                    choices=[
                        ('super_admin', 'Super Admin'),
                        ('admin_hr', 'HR Admin'),
                        ('admin_outsource', 'Outsource Admin'),
                        ('area_manager', 'Area Manager'),
                        ('worker', 'Worker'),
                        ('client', 'Client'),
                    ],
                    default='client',
                    max_length=20,
                )),
                ('region', models.CharField(blank=True, max_length=100, null=True)),
                ('avatar_url', models.URLField(blank=True, max_length=500, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'users',
                'indexes': [
                    models.Index(fields=['user_name'], name='users_user_na_3b8c2e_idx'),
                    models.Index(fields=['role'], name='users_role_5f1a9d_idx'),
                    models.Index(fields=['region'], name='users_region_8e2c41_idx'),
                ],
            },
        ),
    ]
