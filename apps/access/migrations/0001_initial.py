import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AccessSettings',
            fields=[
                ('id', models.CharField(default='default', editable=False, max_length=20, primary_key=True, serialize=False)),
                ('discount_pin_hash', models.CharField(blank=True, max_length=64)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'camp_access_settings',
                'verbose_name_plural': 'access settings',
            },
        ),
        migrations.CreateModel(
            name='NfcAccessTag',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('label', models.CharField(blank=True, max_length=100)),
                ('code_hash', models.CharField(max_length=64, unique=True)),
                ('role', models.CharField(choices=[('admin', 'Admin'), ('coach', 'Coach'), ('camp', 'Camp staff'), ('leader', 'Camp leader')], max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('last_used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'camp_nfc_access_tags',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='AuthorizationToken',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('token', models.CharField(editable=False, max_length=64, unique=True)),
                ('method', models.CharField(choices=[('pin', 'PIN'), ('nfc', 'NFC tag')], max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField()),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('issued_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='camp_authorizations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'camp_authorization_tokens',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['expires_at'], name='auth_tokens_expires_idx')],
            },
        ),
    ]
