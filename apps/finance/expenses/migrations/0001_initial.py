import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('Art Supplies', 'Art Supplies'), ('Utilities', 'Utilities'), ('Rent', 'Rent'), ('Marketing', 'Marketing'), ('Maintenance', 'Maintenance'), ('Salaries', 'Salaries'), ('Equipment', 'Equipment'), ('Other', 'Other')], default='Other', max_length=40)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('date', models.DateField(default=django.utils.timezone.localdate)),
                ('method', models.CharField(choices=[('UPI', 'UPI'), ('Cash', 'Cash'), ('Bank Transfer', 'Bank Transfer'), ('Card', 'Card'), ('Cheque', 'Cheque')], default='UPI', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-date', '-id'],
                'indexes': [models.Index(fields=['category', 'date'], name='expenses_category_date_idx')],
            },
        ),
    ]
