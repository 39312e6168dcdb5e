from django.contrib import admin
from .models import Job


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'client_id', 'worker_id', 'region', 'status', 'message_count']
    list_filter = ['status', 'region']
    search_fields = ['title', 'client_id', 'worker_id']
    readonly_fields = ['messages', 'created_at', 'updated_at']

    @admin.display(description='Messages')
    def message_count(self, obj):
        return len(obj.messages or [])
