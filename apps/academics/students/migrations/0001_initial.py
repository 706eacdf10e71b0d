import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('roll_number', models.CharField(blank=True, editable=False, max_length=20, unique=True)),
                ('name', models.CharField(max_length=120)),
                ('dob', models.DateField(blank=True, null=True)),
                ('photo', models.ImageField(blank=True, null=True, upload_to='students/photos/')),
                ('course', models.CharField(choices=[('Basic', 'Basic'), ('Advanced', 'Advanced'), ('Professional', 'Professional')], default='Basic', max_length=20)),
                ('batch', models.CharField(choices=[('Professional (10:00 AM - 11:30 AM)', 'Professional (10:00 AM - 11:30 AM)'), ('Advance + Basic (11:30 AM - 1:00 PM)', 'Advance + Basic (11:30 AM - 1:00 PM)'), ('Basic 1 (1:00 PM - 2:30 PM)', 'Basic 1 (1:00 PM - 2:30 PM)'), ('Basic 2 (2:30 PM - 4:00 PM)', 'Basic 2 (2:30 PM - 4:00 PM)')], default='Professional (10:00 AM - 11:30 AM)', max_length=60)),
                ('enrollment_date', models.DateField(default=django.utils.timezone.localdate)),
                ('validity_start', models.DateField(blank=True, default=django.utils.timezone.localdate, null=True)),
                ('validity_end', models.DateField(blank=True, null=True)),
                ('total_sessions', models.PositiveIntegerField(default=48)),
                ('base_fee', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('discount_percent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('fee_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('payment_plan', models.CharField(choices=[('Monthly', 'Monthly'), ('Quarterly', 'Quarterly'), ('Full Payment', 'Full Payment')], default='Monthly', max_length=20)),
                ('status', models.CharField(choices=[('active', 'Active'), ('inactive', 'Inactive')], default='active', max_length=20)),
                ('whatsapp', models.CharField(max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('father_name', models.CharField(blank=True, max_length=120)),
                ('father_contact', models.CharField(blank=True, max_length=20)),
                ('mother_name', models.CharField(blank=True, max_length=120)),
                ('mother_contact', models.CharField(blank=True, max_length=20)),
                ('guardian_name', models.CharField(blank=True, max_length=120)),
                ('emergency_contact', models.CharField(blank=True, max_length=20)),
                ('address', models.TextField(blank=True)),
                ('school_name', models.CharField(blank=True, max_length=150)),
                ('source', models.CharField(blank=True, max_length=60)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['status', 'batch'], name='students_status_batch_idx')],
            },
        ),
        migrations.CreateModel(
            name='StudentParentLink',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent_user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='student_links', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='parent_links', to='students.student')),
            ],
            options={
                'constraints': [models.UniqueConstraint(fields=('parent_user', 'student'), name='unique_parent_student_link')],
            },
        ),
    ]
