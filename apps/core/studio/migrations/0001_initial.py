import apps.core.studio.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='StudioSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('studio_name', models.CharField(default=apps.core.studio.models._default_studio_name, max_length=150)),
                ('admin_whatsapp', models.CharField(default=apps.core.studio.models._default_admin_whatsapp, max_length=20)),
                ('lead_api_key', models.CharField(default=apps.core.studio.models.generate_api_key, max_length=64)),
                ('webhook_url', models.URLField(blank=True)),
                ('email_notifications', models.BooleanField(default=True)),
                ('whatsapp_alerts', models.BooleanField(default=True)),
                ('auto_follow_up', models.BooleanField(default=False)),
                ('birthday_reminders', models.BooleanField(default=True)),
                ('fee_reminders', models.BooleanField(default=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'studio settings',
                'verbose_name_plural': 'studio settings',
            },
        ),
    ]
