from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ConsentRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('granted_to_type', models.CharField(choices=[('lawfirm', 'Law Firm'), ('medical_provider', 'Medical Provider')], max_length=20)),
                ('granted_to_id', models.BigIntegerField()),
                ('consent_type', models.CharField(choices=[('FULL_ACCESS', 'Full Access'), ('MEDICAL_RECORDS_ONLY', 'Medical Records Only'), ('BILLING_ONLY', 'Billing Only'), ('LITIGATION_ONLY', 'Litigation Only'), ('CUSTOM', 'Custom Scope')], default='FULL_ACCESS', max_length=50)),
                ('status', models.CharField(choices=[('active', 'Active'), ('revoked', 'Revoked'), ('expired', 'Expired')], default='active', max_length=10)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('consent_method', models.CharField(default='electronic', max_length=30)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('signature_data', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('revoked_at', models.DateTimeField(blank=True, null=True)),
                ('revoked_reason', models.TextField(blank=True, null=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='consent_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['patient', 'granted_to_type', 'granted_to_id', 'status'], name='consent_con_patient_5c1e2a_idx'),
                    models.Index(fields=['granted_to_type', 'granted_to_id', 'status'], name='consent_con_granted_8d4b7f_idx'),
                    models.Index(fields=['status', 'expires_at'], name='consent_con_status_3a9e61_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ConsentScope',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data_type', models.CharField(max_length=50)),
                ('can_view', models.BooleanField(default=True)),
                ('can_edit', models.BooleanField(default=False)),
                ('consent', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='scopes', to='consent.consentrecord')),
            ],
            options={
                'unique_together': {('consent', 'data_type')},
            },
        ),
    ]
