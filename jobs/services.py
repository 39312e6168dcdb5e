import logging

from django.conf import settings

from utils.attachments import normalize_attachments
from utils.formatting import clamp_limit, parse_before, sanitize_content
from utils.message_log import MessageDraft
from workchat.exceptions import NotFoundError, ValidationError

from .logs import JobMessageLog
from .models import Job

logger = logging.getLogger(__name__)

AREA_MANAGER_ROLE = 'area_manager'


class JobChatService:
    """
    Chat attached to a single job.

    A caller sees a job's chat when they are its client, its worker, or an
    area manager of its region. Anyone else gets ``NotFoundError``, whether
    or not the job exists.
    """

    def __init__(self, message_log=None, max_attachments=None):
        self.message_log = message_log or JobMessageLog()
        self.max_attachments = max_attachments or getattr(settings, 'JOB_CHAT_MAX_ATTACHMENTS', 5)
        self.page_size = getattr(settings, 'CHAT_MESSAGE_PAGE_SIZE', 50)
        self.page_max = getattr(settings, 'CHAT_MESSAGE_PAGE_MAX', 200)

    def get_job(self, job_id, caller) -> Job:
        for lookup in self._access_lookups(caller):
            job = Job.objects.filter(pk=job_id, **lookup).first()
            if job is not None:
                return job
        logger.info("Job %s not visible to %s", job_id, caller.user_id)
        raise NotFoundError("Job not found.")

    def get_job_messages(self, job_id, caller, before=None, limit=None):
        """
        Job chat in ascending order.

        Without ``limit`` the whole thread is returned; with it, the newest
        ``limit`` messages older than ``before``.
        """
        job = self.get_job(job_id, caller)
        if limit is not None:
            limit = clamp_limit(limit, self.page_size, self.page_max)
        return self.message_log.list(job.pk, before=parse_before(before), limit=limit)

    def send_job_message(self, job_id, caller, content=None, attachments=None):
        job = self.get_job(job_id, caller)
        content = sanitize_content(content)
        attachments = normalize_attachments(attachments, limit=self.max_attachments)
        if not content and not attachments:
            raise ValidationError("Message content or attachments required.")

        message = self.message_log.append(
            job.pk,
            MessageDraft(
                sender_id=caller.user_id,
                sender_name=caller.display_name,
                content=content,
                attachments=attachments,
            ),
        )
        logger.info("Job message %s sent to job %s by %s", message.id, job.pk, caller.user_id)
        return message

    def _access_lookups(self, caller):
        lookups = [
            {'client_id': caller.user_id},
            {'worker_id': caller.user_id},
        ]
        if caller.role == AREA_MANAGER_ROLE and caller.region:
            lookups.append({'region': caller.region})
        return lookups


def get_job_chat_service():
    return JobChatService()
