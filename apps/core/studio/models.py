import secrets

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


def generate_api_key():
    return f"nas_live_sk_{secrets.token_hex(12)}"


def _default_studio_name():
    return settings.STUDIO_NAME


def _default_admin_whatsapp():
    return settings.STUDIO_ADMIN_WHATSAPP


class StudioSettings(models.Model):
    """Single row of runtime preferences for the studio."""

    SINGLETON_ID = 1

    studio_name = models.CharField(max_length=150, default=_default_studio_name)
    admin_whatsapp = models.CharField(max_length=20, default=_default_admin_whatsapp)
    lead_api_key = models.CharField(max_length=64, default=generate_api_key)
    webhook_url = models.URLField(blank=True)

    email_notifications = models.BooleanField(default=True)
    whatsapp_alerts = models.BooleanField(default=True)
    auto_follow_up = models.BooleanField(default=False)
    birthday_reminders = models.BooleanField(default=True)
    fee_reminders = models.BooleanField(default=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'studio settings'
        verbose_name_plural = 'studio settings'

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('Studio settings cannot be deleted.')

    def __str__(self):
        return f"Settings for {self.studio_name}"
