from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Complaint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('report_number', models.CharField(editable=False, help_text='Human-facing sequential identifier, e.g. A00001', max_length=20, unique=True)),
                ('model_no', models.CharField(blank=True, max_length=100)),
                ('warranty_status', models.CharField(choices=[('Under Warranty', 'Under Warranty'), ('Over Warranty', 'Over Warranty')], max_length=20)),
                ('details', models.TextField()),
                ('warranty_file', models.CharField(blank=True, max_length=500)),
                ('receipt_file', models.CharField(blank=True, max_length=500)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in_process', 'In Process'), ('closed', 'Closed'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=20)),
                ('assigned_to', models.ForeignKey(blank=True, help_text='Technician currently working on the complaint', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='assigned_complaints', to=settings.AUTH_USER_MODEL)),
                ('brand', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to='catalog.brand')),
                ('category', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to='catalog.category')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='complaint_created_set', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(help_text='Customer who submitted the complaint', on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to=settings.AUTH_USER_MODEL)),
                ('state', models.ForeignKey(help_text='Customer location', on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to='catalog.state')),
                ('subcategory', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='complaints', to='catalog.subcategory')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last updated this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='complaint_updated_set', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['status', 'assigned_to'], name='complaint_status_assignee_idx'),
                    models.Index(fields=['customer', 'status'], name='complaint_customer_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ForwardRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('complaint', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='forward_history', to='complaints.complaint')),
                ('forwarded_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.PROTECT, related_name='forwards_made', to=settings.AUTH_USER_MODEL)),
                ('new_assignee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('previous_assignee', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'forward_history',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Remark',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('author_role', models.CharField(max_length=20)),
                ('transport_note', models.TextField(blank=True)),
                ('checking_note', models.TextField(blank=True)),
                ('remark', models.TextField(blank=True)),
                ('status', models.CharField(blank=True, choices=[('pending', 'Pending'), ('in_process', 'In Process'), ('closed', 'Closed'), ('cancelled', 'Cancelled')], max_length=20)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='remarks', to=settings.AUTH_USER_MODEL)),
                ('complaint', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='remarks', to='complaints.complaint')),
            ],
            options={
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
