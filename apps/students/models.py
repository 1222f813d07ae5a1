from django.db import models
import uuid


class Student(models.Model):
    """Camp participant who can hold and spend camp points."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)

    # Wristband / card code scanned at the register
    nfc_code = models.CharField(max_length=64, unique=True, null=True, blank=True)

    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'students'
        indexes = [
            models.Index(fields=['name'], name='students_name_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name
