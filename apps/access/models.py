from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class AccessRole(models.TextChoices):
    ADMIN = 'admin', 'Admin'
    COACH = 'coach', 'Coach'
    CAMP = 'camp', 'Camp staff'
    LEADER = 'leader', 'Camp leader'


class AuthorizationMethod(models.TextChoices):
    PIN = 'pin', 'PIN'
    NFC = 'nfc', 'NFC tag'


class AccessSettings(models.Model):
    """Singleton row holding the hashed discount PIN."""

    id = models.CharField(max_length=20, primary_key=True, default='default', editable=False)
    discount_pin_hash = models.CharField(max_length=64, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'camp_access_settings'
        verbose_name_plural = 'access settings'

    def __str__(self):
        return 'Camp access settings'

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(id='default')
        return obj


class NfcAccessTag(models.Model):
    """Staff NFC tag; only the SHA-256 hash of the tag code is stored."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    label = models.CharField(max_length=100, blank=True)
    code_hash = models.CharField(max_length=64, unique=True)
    role = models.CharField(max_length=20, choices=AccessRole.choices)
    is_active = models.BooleanField(default=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'camp_nfc_access_tags'
        ordering = ['-created_at']

    def __str__(self):
        return self.label or f"{self.get_role_display()} tag"


class AuthorizationToken(models.Model):
    """Short-lived, single-use proof that a PIN or NFC check succeeded."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    token = models.CharField(max_length=64, unique=True, editable=False)
    method = models.CharField(max_length=10, choices=AuthorizationMethod.choices)
    issued_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='camp_authorizations'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'camp_authorization_tokens'
        indexes = [
            models.Index(fields=['expires_at'], name='auth_tokens_expires_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_method_display()} authorization {self.token[:6]}..."

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @property
    def is_used(self):
        return self.used_at is not None
