from django.db import models


class User(models.Model):
    """
    Participant directory entry.

    Accounts are owned by the authentication service; messaging only reads
    the id, display name, role and region from here.
    """

    ROLE_CHOICES = [
        ("super_admin", "Super Admin"),
        ("admin_hr", "HR Admin"),
        ("admin_outsource", "Outsource Admin"),
        ("area_manager", "Area Manager"),
        ("worker", "Worker"),
        ("client", "Client"),
    ]

    user_id = models.CharField(max_length=100, unique=True, primary_key=True)
    user_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=255, null=True, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="client")
    region = models.CharField(max_length=100, null=True, blank=True)
    avatar_url = models.URLField(max_length=500, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['user_name'], name='users_user_na_3b8c2e_idx'),
            models.Index(fields=['role'], name='users_role_5f1a9d_idx'),
            models.Index(fields=['region'], name='users_region_8e2c41_idx'),
        ]

    def __str__(self):
        return f"{self.user_name} ({self.user_id})"

    @property
    def display_name(self):
        return self.user_name or self.email or self.user_id
