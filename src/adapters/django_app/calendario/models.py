"""
Django Models para o domínio de Calendário.

Tabelas:
- calendar_integrations: conexão do usuário com Google/Outlook
- external_calendar_events: cópia local dos eventos lidos dos provedores
"""

from django.db import models
from django.utils import timezone


class ProvedorChoices(models.TextChoices):
    GOOGLE = 'GOOGLE', 'Google Calendar'
    OUTLOOK = 'OUTLOOK', 'Outlook'


class FrequenciaChoices(models.TextChoices):
    HOURLY = 'hourly', 'A cada hora'
    DAILY = 'daily', 'Diária'
    WEEKLY = 'weekly', 'Semanal'
    MANUAL = 'manual', 'Manual'


class StatusSincronizacaoChoices(models.TextChoices):
    PENDING = 'PENDING', 'Pendente'
    SYNCED = 'SYNCED', 'Sincronizado'
    FAILED = 'FAILED', 'Falhou'


class IntegracaoCalendarioModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    usuario_id = models.CharField(max_length=100, db_index=True)
    provedor = models.CharField(max_length=20, choices=ProvedorChoices.choices)
    calendario_id = models.CharField(max_length=255, default='primary')
    access_token = models.TextField()
    refresh_token = models.TextField(null=True, blank=True)
    ativa = models.BooleanField(default=True)
    sincronizacao_habilitada = models.BooleanField(default=True)
    frequencia = models.CharField(
        max_length=10,
        choices=FrequenciaChoices.choices,
        default=FrequenciaChoices.DAILY,
    )
    ultima_sincronizacao = models.DateTimeField(null=True, blank=True)
    status_sincronizacao = models.CharField(
        max_length=10,
        choices=StatusSincronizacaoChoices.choices,
        null=True,
        blank=True,
    )
    erro_sincronizacao = models.TextField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'calendar_integrations'
        verbose_name = 'Integração de Calendário'
        verbose_name_plural = 'Integrações de Calendário'
        ordering = ['criado_em']

    def __str__(self):
        return f"{self.provedor} ({self.usuario_id})"


class ExternalCalendarEvent(models.Model):
    integration = models.ForeignKey(
        IntegracaoCalendarioModel,
        on_delete=models.CASCADE,
        related_name='eventos',
    )
    external_id = models.CharField(max_length=255)
    title = models.CharField(max_length=500, blank=True, default='')
    description = models.TextField(blank=True, default='')
    start_at = models.DateTimeField(null=True, blank=True)
    end_at = models.DateTimeField(null=True, blank=True, db_index=True)
    all_day = models.BooleanField(default=False)
    location = models.CharField(max_length=500, blank=True, default='')
    status = models.CharField(max_length=20, default='confirmed')
    updated_at = models.DateTimeField(null=True, blank=True)
    synced_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'external_calendar_events'
        verbose_name = 'Evento Externo'
        verbose_name_plural = 'Eventos Externos'
        ordering = ['start_at']
        constraints = [
            models.UniqueConstraint(
                fields=['integration', 'external_id'],
                name='evento_externo_unico',
            ),
        ]

    def __str__(self):
        return self.title or self.external_id
