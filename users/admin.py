from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        "user_id",
        "user_name",
        "role",
        "region",
        "is_active",
        "created_at",
    )
    list_filter = ("role", "is_active")
    search_fields = ("user_id", "user_name", "email")
