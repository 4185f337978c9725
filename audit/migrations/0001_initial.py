from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLogEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_id', models.BigIntegerField()),
                ('actor_type', models.CharField(max_length=20)),
                ('action', models.CharField(max_length=50)),
                ('entity_type', models.CharField(blank=True, max_length=50, null=True)),
                ('entity_id', models.CharField(blank=True, max_length=100, null=True)),
                ('target_user_id', models.BigIntegerField(blank=True, null=True)),
                ('status', models.CharField(choices=[('SUCCESS', 'Success'), ('FAILURE', 'Failure'), ('DENIED', 'Denied')], default='SUCCESS', max_length=10)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
            ],
            options={
                'verbose_name_plural': 'audit log entries',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['target_user_id', 'timestamp'], name='audit_audit_target__7f3c1d_idx'),
                    models.Index(fields=['action', 'timestamp'], name='audit_audit_action_2b8e94_idx'),
                    models.Index(fields=['actor_id', 'actor_type'], name='audit_audit_actor_i_e61a05_idx'),
                ],
            },
        ),
    ]
