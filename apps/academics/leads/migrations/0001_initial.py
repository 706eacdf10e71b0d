from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('course', models.CharField(choices=[('Basic', 'Basic'), ('Advanced', 'Advanced'), ('Professional', 'Professional')], default='Basic', max_length=20)),
                ('status', models.CharField(choices=[('new', 'New'), ('contacted', 'Contacted'), ('demo', 'Demo'), ('converted', 'Converted'), ('not-interested', 'Not Interested')], default='new', max_length=20)),
                ('source', models.CharField(default='Website', max_length=60)),
                ('follow_up_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['phone', 'created_at'], name='leads_phone_created_idx'),
                    models.Index(fields=['status'], name='leads_status_idx'),
                ],
            },
        ),
    ]
