from django.urls import path
from . import views

app_name = 'jobs'

urlpatterns = [
    path('<int:job_id>/messages/', views.JobMessagesView.as_view(), name='job-messages'),
]
