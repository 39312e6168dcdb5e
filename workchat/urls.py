"""
URL configuration for the workchat project.

    /ping/            health check
    /conversations/   staff messaging (threads, messages, contacts)
    /jobs/            job scoped chat
"""
from django.contrib import admin
from django.urls import include, path

from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping/', views.PingView.as_view(), name='ping'),
    path('conversations/', include('conversations.urls')),
    path('jobs/', include('jobs.urls')),
]
