"""
Django Models para o domínio de Atendimentos.

Models são ADAPTERS: persistem as entidades de
src/core/atendimentos/entities.py e não contêm regra de negócio.
A conversão Entity <-> Model fica nos Mappers.

Tabelas:
- TerapiaModel: catálogo de terapias
- ProcessoTerapeuticoModel: processo com itens de orçamento e sessões
- SessaoAvulsaModel: sessão cobrada individualmente
- PedidoTerapeuticoModel / ParcelaModel: financeiro
"""

from django.db import models
from django.utils import timezone

VALOR = dict(max_digits=12, decimal_places=2)


class StatusProcessoChoices(models.TextChoices):
    IN_ANALYSIS = 'IN_ANALYSIS', 'Em análise'
    IN_TREATMENT = 'IN_TREATMENT', 'Em tratamento'
    NOT_APPROVED = 'NOT_APPROVED', 'Não aprovado'
    CANCELED = 'CANCELED', 'Cancelado'
    FINISHED = 'FINISHED', 'Finalizado'


class StatusSessaoChoices(models.TextChoices):
    PENDING = 'PENDING', 'Pendente'
    COMPLETED = 'COMPLETED', 'Realizada'
    CANCELED = 'CANCELED', 'Cancelada'


class ModoSessaoChoices(models.TextChoices):
    IN_PERSON = 'IN_PERSON', 'Presencial'
    DISTANCE = 'DISTANCE', 'A distância'
    ONLINE = 'ONLINE', 'Online'


class FormaPagamentoChoices(models.TextChoices):
    PIX = 'PIX', 'Pix'
    CARD_MERCADO_PAGO = 'CARD_MERCADO_PAGO', 'Cartão (Mercado Pago)'
    NUBANK = 'NUBANK', 'Nubank'


class ModoVencimentoChoices(models.TextChoices):
    AUTOMATIC_MONTHLY = 'AUTOMATIC_MONTHLY', 'Mensal automático'
    MANUAL = 'MANUAL', 'Manual'


class StatusPedidoChoices(models.TextChoices):
    OPEN = 'OPEN', 'Em aberto'
    PARTIALLY_PAID = 'PARTIALLY_PAID', 'Parcialmente pago'
    PAID = 'PAID', 'Pago'
    CANCELED = 'CANCELED', 'Cancelado'


class StatusParcelaChoices(models.TextChoices):
    OPEN = 'OPEN', 'Em aberto'
    PAID = 'PAID', 'Paga'
    CANCELED = 'CANCELED', 'Cancelada'


class TerapiaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False,
                          help_text="UUID da terapia")
    nome = models.CharField(max_length=200, db_index=True)
    descricao = models.TextField(blank=True, default='')
    valor = models.DecimalField(**VALOR, help_text="Valor por unidade do orçamento")
    valor_por_sessao = models.BooleanField(
        default=False,
        help_text="Se verdadeiro, o valor é cobrado por sessão"
    )
    sessoes_padrao = models.PositiveIntegerField(default=1)
    valor_sessao_avulsa = models.DecimalField(**VALOR, null=True, blank=True)
    ativa = models.BooleanField(default=True, db_index=True)
    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'terapias'
        verbose_name = 'Terapia'
        verbose_name_plural = 'Terapias'
        ordering = ['nome']

    def __str__(self):
        return self.nome


class ProcessoTerapeuticoModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False,
                          help_text="UUID do processo")
    paciente_id = models.CharField(max_length=100, db_index=True,
                                   help_text="ID do usuário paciente")
    criado_por_id = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=StatusProcessoChoices.choices,
        default=StatusProcessoChoices.IN_ANALYSIS,
        db_index=True,
    )
    observacoes = models.TextField(blank=True, default='')
    iniciado_em = models.DateTimeField(null=True, blank=True)
    finalizado_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now, db_index=True)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'processos_terapeuticos'
        verbose_name = 'Processo Terapêutico'
        verbose_name_plural = 'Processos Terapêuticos'
        ordering = ['-criado_em']
        indexes = [
            models.Index(fields=['paciente_id', 'status'], name='processos_t_pacient_3c1f0a_idx'),
        ]

    def __str__(self):
        return f"[{self.id[:8]}] {self.status}"


class ItemOrcamentoModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    processo = models.ForeignKey(
        ProcessoTerapeuticoModel,
        on_delete=models.CASCADE,
        related_name='itens',
    )
    terapia_id = models.CharField(max_length=36, db_index=True)
    terapia_nome = models.CharField(max_length=200, help_text="Nome da terapia no momento do orçamento")
    valor_unitario = models.DecimalField(**VALOR)
    sessoes_por_unidade = models.PositiveIntegerField(default=1)
    quantidade = models.PositiveIntegerField(default=1)
    desconto = models.DecimalField(**VALOR, default=0)
    ordem = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'itens_orcamento'
        verbose_name = 'Item de Orçamento'
        verbose_name_plural = 'Itens de Orçamento'
        ordering = ['ordem']


class SessaoTerapeuticaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    processo = models.ForeignKey(
        ProcessoTerapeuticoModel,
        on_delete=models.CASCADE,
        related_name='sessoes',
    )
    item_orcamento_id = models.CharField(max_length=36)
    terapia_id = models.CharField(max_length=36)
    numero_sessao = models.PositiveIntegerField()
    indice_ordem = models.PositiveIntegerField()
    status = models.CharField(
        max_length=20,
        choices=StatusSessaoChoices.choices,
        default=StatusSessaoChoices.PENDING,
    )
    modo = models.CharField(max_length=20, choices=ModoSessaoChoices.choices,
                            null=True, blank=True)
    terapeuta_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    data_sessao = models.DateTimeField(null=True, blank=True)
    comentarios = models.TextField(blank=True, default='')
    concluida_em = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'sessoes_terapeuticas'
        verbose_name = 'Sessão Terapêutica'
        verbose_name_plural = 'Sessões Terapêuticas'
        ordering = ['indice_ordem']


class SessaoAvulsaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    paciente_id = models.CharField(max_length=100, db_index=True)
    terapia_id = models.CharField(max_length=36)
    terapia_nome = models.CharField(max_length=200)
    terapia_valor = models.DecimalField(**VALOR)
    terapeuta_id = models.CharField(max_length=100, null=True, blank=True)
    data_sessao = models.DateTimeField(db_index=True)
    modo = models.CharField(max_length=20, choices=ModoSessaoChoices.choices,
                            null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=StatusSessaoChoices.choices,
        default=StatusSessaoChoices.COMPLETED,
    )
    comentarios = models.TextField(null=True, blank=True)
    dados_sessao = models.TextField(null=True, blank=True)
    valor_cobrado = models.DecimalField(**VALOR)
    criado_por_id = models.CharField(max_length=100, null=True, blank=True)
    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'sessoes_avulsas'
        verbose_name = 'Sessão Avulsa'
        verbose_name_plural = 'Sessões Avulsas'
        ordering = ['-data_sessao']


class PedidoTerapeuticoModel(models.Model):
    """
    Pedido financeiro.

    Pertence a exatamente um processo OU a uma sessão avulsa.
    """

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    paciente_id = models.CharField(max_length=100, db_index=True)
    processo = models.OneToOneField(
        ProcessoTerapeuticoModel,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='pedido',
    )
    sessao_avulsa = models.OneToOneField(
        SessaoAvulsaModel,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='pedido',
    )
    status = models.CharField(
        max_length=20,
        choices=StatusPedidoChoices.choices,
        default=StatusPedidoChoices.OPEN,
        db_index=True,
    )
    forma_pagamento = models.CharField(max_length=30, choices=FormaPagamentoChoices.choices)
    modo_vencimento = models.CharField(max_length=30, choices=ModoVencimentoChoices.choices)
    quantidade_parcelas = models.PositiveIntegerField(default=1)
    primeiro_vencimento = models.DateField(null=True, blank=True)
    valor_total = models.DecimalField(**VALOR)
    criado_em = models.DateTimeField(default=timezone.now)
    atualizado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'pedidos_terapeuticos'
        verbose_name = 'Pedido Terapêutico'
        verbose_name_plural = 'Pedidos Terapêuticos'
        ordering = ['criado_em']

    def __str__(self):
        return f"Pedido {self.id[:8]} ({self.status})"


class ParcelaModel(models.Model):
    id = models.CharField(max_length=36, primary_key=True, editable=False)
    pedido = models.ForeignKey(
        PedidoTerapeuticoModel,
        on_delete=models.CASCADE,
        related_name='parcelas',
    )
    numero = models.PositiveIntegerField()
    valor = models.DecimalField(**VALOR)
    valor_pago = models.DecimalField(**VALOR, default=0)
    vencimento = models.DateField(null=True, blank=True, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=StatusParcelaChoices.choices,
        default=StatusParcelaChoices.OPEN,
        db_index=True,
    )
    pago_em = models.DateTimeField(null=True, blank=True)
    forma_pagamento = models.CharField(max_length=30, choices=FormaPagamentoChoices.choices,
                                       null=True, blank=True)

    class Meta:
        db_table = 'parcelas'
        verbose_name = 'Parcela'
        verbose_name_plural = 'Parcelas'
        ordering = ['numero']
        constraints = [
            models.UniqueConstraint(fields=['pedido', 'numero'], name='parcela_numero_unico'),
        ]
        indexes = [
            models.Index(fields=['status', 'vencimento'], name='parcelas_status_8d2e41_idx'),
        ]

    def __str__(self):
        return f"Parcela {self.numero} de {self.pedido_id[:8]}"
