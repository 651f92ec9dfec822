"""
Django Models para o domínio de Gamificação.

Tabelas:
- user_points: saldo e nível por usuário
- point_transactions: extrato de pontos
- user_achievements: marcos desbloqueados (um por código e usuário)
"""

from django.db import models
from django.utils import timezone


class TipoTransacaoChoices(models.TextChoices):
    EARNED = 'EARNED', 'Ganho'
    BONUS = 'BONUS', 'Bônus'
    SPENT = 'SPENT', 'Gasto'


class CategoriaConquistaChoices(models.TextChoices):
    POINTS_MILESTONE = 'POINTS_MILESTONE', 'Marco de pontos'
    LEVEL_MILESTONE = 'LEVEL_MILESTONE', 'Marco de nível'


class PontosUsuarioModel(models.Model):
    usuario_id = models.CharField(max_length=100, primary_key=True)
    total_pontos = models.PositiveIntegerField(default=0, db_index=True)
    nivel = models.PositiveIntegerField(default=1)
    progresso = models.PositiveIntegerField(default=0)
    pontos_proximo_nivel = models.PositiveIntegerField(default=100)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'user_points'
        verbose_name = 'Pontuação'
        verbose_name_plural = 'Pontuações'
        ordering = ['-total_pontos']

    def __str__(self):
        return f"{self.usuario_id}: {self.total_pontos} pts (nível {self.nivel})"


class TransacaoPontosModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    usuario_id = models.CharField(max_length=100, db_index=True)
    tipo = models.CharField(max_length=10, choices=TipoTransacaoChoices.choices)
    pontos = models.IntegerField()
    motivo = models.CharField(max_length=255)
    descricao = models.TextField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'point_transactions'
        verbose_name = 'Transação de Pontos'
        verbose_name_plural = 'Transações de Pontos'
        ordering = ['-criado_em']


class ConquistaUsuarioModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    usuario_id = models.CharField(max_length=100, db_index=True)
    codigo = models.CharField(max_length=50)
    nome = models.CharField(max_length=200)
    categoria = models.CharField(max_length=20, choices=CategoriaConquistaChoices.choices)
    raridade = models.CharField(max_length=20)
    bonus = models.PositiveIntegerField(default=0)
    desbloqueada_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'user_achievements'
        verbose_name = 'Conquista'
        verbose_name_plural = 'Conquistas'
        ordering = ['desbloqueada_em']
        constraints = [
            models.UniqueConstraint(fields=['usuario_id', 'codigo'], name='conquista_unica_por_usuario'),
        ]

    def __str__(self):
        return f"{self.nome} ({self.usuario_id})"
