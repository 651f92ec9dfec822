"""
Migration inicial para o domínio de Calendário.

Cria as tabelas:
- calendar_integrations
- external_calendar_events
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='IntegracaoCalendarioModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('usuario_id', models.CharField(db_index=True, max_length=100)),
                ('provedor', models.CharField(
                    choices=[('GOOGLE', 'Google Calendar'), ('OUTLOOK', 'Outlook')],
                    max_length=20,
                )),
                ('calendario_id', models.CharField(default='primary', max_length=255)),
                ('access_token', models.TextField()),
                ('refresh_token', models.TextField(blank=True, null=True)),
                ('ativa', models.BooleanField(default=True)),
                ('sincronizacao_habilitada', models.BooleanField(default=True)),
                ('frequencia', models.CharField(
                    choices=[
                        ('hourly', 'A cada hora'),
                        ('daily', 'Diária'),
                        ('weekly', 'Semanal'),
                        ('manual', 'Manual'),
                    ],
                    default='daily',
                    max_length=10,
                )),
                ('ultima_sincronizacao', models.DateTimeField(blank=True, null=True)),
                ('status_sincronizacao', models.CharField(
                    blank=True,
                    choices=[('PENDING', 'Pendente'), ('SYNCED', 'Sincronizado'), ('FAILED', 'Falhou')],
                    max_length=10,
                    null=True,
                )),
                ('erro_sincronizacao', models.TextField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('atualizado_em', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Integração de Calendário',
                'verbose_name_plural': 'Integrações de Calendário',
                'db_table': 'calendar_integrations',
                'ordering': ['criado_em'],
            },
        ),
        migrations.CreateModel(
            name='ExternalCalendarEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('external_id', models.CharField(max_length=255)),
                ('title', models.CharField(blank=True, default='', max_length=500)),
                ('description', models.TextField(blank=True, default='')),
                ('start_at', models.DateTimeField(blank=True, null=True)),
                ('end_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('all_day', models.BooleanField(default=False)),
                ('location', models.CharField(blank=True, default='', max_length=500)),
                ('status', models.CharField(default='confirmed', max_length=20)),
                ('updated_at', models.DateTimeField(blank=True, null=True)),
                ('synced_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('integration', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='eventos',
                    to='calendario.integracaocalendariomodel',
                )),
            ],
            options={
                'verbose_name': 'Evento Externo',
                'verbose_name_plural': 'Eventos Externos',
                'db_table': 'external_calendar_events',
                'ordering': ['start_at'],
                'constraints': [models.UniqueConstraint(fields=('integration', 'external_id'),
                                                        name='evento_externo_unico')],
            },
        ),
    ]
