"""
Django Model de notificações in-app.
"""

from django.db import models
from django.utils import timezone


class PrioridadeChoices(models.TextChoices):
    LOW = 'LOW', 'Baixa'
    MEDIUM = 'MEDIUM', 'Média'
    HIGH = 'HIGH', 'Alta'
    URGENT = 'URGENT', 'Urgente'


class NotificacaoModel(models.Model):
    usuario_id = models.CharField(max_length=100, db_index=True)
    tipo = models.CharField(max_length=50, help_text="Ex: sync_success, payment_overdue")
    titulo = models.CharField(max_length=200)
    mensagem = models.TextField()
    dados = models.JSONField(default=dict, blank=True)
    prioridade = models.CharField(
        max_length=10,
        choices=PrioridadeChoices.choices,
        default=PrioridadeChoices.MEDIUM,
    )
    lida = models.BooleanField(default=False)
    lida_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notificação'
        verbose_name_plural = 'Notificações'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['usuario_id', 'lida'], name='notificacao_usuario_lida_idx'),
        ]

    def __str__(self):
        return f"[{self.tipo}] {self.titulo}"

    def to_dict(self):
        return {
            'id': self.pk,
            'type': self.tipo,
            'title': self.titulo,
            'message': self.mensagem,
            'data': self.dados,
            'priority': self.prioridade,
            'is_read': self.lida,
            'read_at': self.lida_em.isoformat() if self.lida_em else None,
            'created_at': self.criado_em.isoformat(),
        }
