from django.conf import settings
from django.db import models
from django.utils import timezone


class Notice(models.Model):
    AUDIENCE_ALL = 'all'
    AUDIENCE_PARENTS = 'parents'
    AUDIENCE_ADMIN = 'admin'
    AUDIENCE_CHOICES = (
        (AUDIENCE_ALL, 'Everyone'),
        (AUDIENCE_PARENTS, 'Parents'),
        (AUDIENCE_ADMIN, 'Admin Only'),
    )
    PARENT_VISIBLE_AUDIENCES = (AUDIENCE_ALL, AUDIENCE_PARENTS)

    title = models.CharField(max_length=150)
    body = models.TextField(blank=True)
    date = models.DateField(default=timezone.localdate)
    audience = models.CharField(max_length=20, choices=AUDIENCE_CHOICES, default=AUDIENCE_ALL)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_notices'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-id']

    def __str__(self):
        return f"{self.title} ({self.audience})"
