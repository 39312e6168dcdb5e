from django.urls import path
from . import views

app_name = 'conversations'

urlpatterns = [
    path('', views.ConversationListView.as_view(), name='conversation-list'),
    path('contacts/', views.ContactListView.as_view(), name='contact-list'),
    path('<str:conversation_id>/messages/', views.ConversationMessagesView.as_view(), name='conversation-messages'),
    path('<str:conversation_id>/archive/', views.ConversationArchiveView.as_view(), name='conversation-archive'),
    path('<str:conversation_id>/read/', views.ConversationReadView.as_view(), name='conversation-read'),
]
