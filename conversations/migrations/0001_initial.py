import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Conversation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('conversation_id', models.CharField(max_length=100, unique=True)),
                ('participant_identity', models.CharField(max_length=2000, unique=True)),
                ('participants', models.JSONField(default=list)),
                ('title', models.CharField(blank=True, default='', max_length=255)),
                ('created_by', models.CharField(max_length=100)),
                ('last_message_content', models.TextField(blank=True, default='')),
                ('last_message_sender_id', models.CharField(blank=True, max_length=100, null=True)),
                ('last_message_sender_name', models.CharField(blank=True, max_length=255, null=True)),
                ('last_message_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'conversations_conversation',
                'indexes': [
                    models.Index(fields=['-last_message_at', '-updated_at'], name='conv_last_message_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ConversationParticipant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.CharField(max_length=100)),
                ('role', models.CharField(max_length=20)),
                ('archived', models.BooleanField(default=False)),
                ('last_read_at', models.DateTimeField(blank=True, null=True)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('conversation', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='memberships',
                    to='conversations.conversation',
                )),
            ],
            options={
                'db_table': 'conversations_participant',
                'indexes': [
                    models.Index(fields=['user_id', 'archived'], name='conv_participant_user_idx'),
                ],
                'unique_together': {('conversation', 'user_id')},
            },
        ),
        migrations.CreateModel(
            name='ConversationMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sender_id', models.CharField(max_length=100)),
                ('sender_name', models.CharField(blank=True, default='', max_length=255)),
                ('content', models.TextField(blank=True)),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('read_by', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('conversation', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='messages',
                    to='conversations.conversation',
                )),
            ],
            options={
                'db_table': 'conversations_conversationmessage',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['conversation', 'created_at', 'id'], name='conv_message_order_idx'),
                ],
            },
        ),
    ]
