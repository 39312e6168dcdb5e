from django.db import models


class Job(models.Model):
    """
    The slice of a marketplace job that job chat needs.

    Job chat messages are embedded in ``messages`` as an ordered list of
    ``{id, sender_id, content, sent_at, attachments}`` dicts.
    """

    STATUS_CHOICES = [
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
    ]

    title = models.CharField(max_length=255)
    client_id = models.CharField(max_length=100)
    worker_id = models.CharField(max_length=100, null=True, blank=True)
    region = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    messages = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'jobs'
        indexes = [
            models.Index(fields=['client_id', 'status'], name='jobs_client_status_idx'),
            models.Index(fields=['worker_id', 'status'], name='jobs_worker_status_idx'),
            models.Index(fields=['region', 'status'], name='jobs_region_status_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.pk})"
