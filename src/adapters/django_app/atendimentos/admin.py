"""
Django Admin para o domínio de Atendimentos.

Consulta de terapias, processos, sessões avulsas e financeiro.
Alterações de status e pagamentos devem passar pela API, que aplica
as regras do domínio; por isso os registros financeiros são somente
leitura aqui.
"""

from django.contrib import admin

from .models import (
    ItemOrcamentoModel,
    ParcelaModel,
    PedidoTerapeuticoModel,
    ProcessoTerapeuticoModel,
    SessaoAvulsaModel,
    SessaoTerapeuticaModel,
    TerapiaModel,
)


@admin.register(TerapiaModel)
class TerapiaAdmin(admin.ModelAdmin):
    list_display = ['nome', 'valor', 'valor_por_sessao', 'sessoes_padrao', 'ativa']
    list_filter = ['ativa', 'valor_por_sessao']
    search_fields = ['nome', 'descricao']
    readonly_fields = ['id', 'criado_em', 'atualizado_em']


class ItemOrcamentoInline(admin.TabularInline):
    model = ItemOrcamentoModel
    extra = 0
    can_delete = False
    readonly_fields = [
        'terapia_nome', 'valor_unitario', 'sessoes_por_unidade',
        'quantidade', 'desconto', 'ordem',
    ]
    exclude = ['id', 'terapia_id']


class SessaoTerapeuticaInline(admin.TabularInline):
    model = SessaoTerapeuticaModel
    extra = 0
    can_delete = False
    fields = ['indice_ordem', 'numero_sessao', 'status', 'modo', 'terapeuta_id', 'data_sessao']
    readonly_fields = ['indice_ordem', 'numero_sessao']


@admin.register(ProcessoTerapeuticoModel)
class ProcessoTerapeuticoAdmin(admin.ModelAdmin):
    list_display = ['id_curto', 'paciente_id', 'status', 'iniciado_em', 'criado_em']
    list_filter = ['status', 'criado_em']
    search_fields = ['id', 'paciente_id', 'observacoes']
    readonly_fields = ['id', 'status', 'iniciado_em', 'finalizado_em', 'criado_em', 'atualizado_em']
    inlines = [ItemOrcamentoInline, SessaoTerapeuticaInline]
    date_hierarchy = 'criado_em'

    def id_curto(self, obj):
        """Exibe ID curto (primeiros 8 caracteres)."""
        return obj.id[:8] + '...'
    id_curto.short_description = 'ID'


@admin.register(SessaoAvulsaModel)
class SessaoAvulsaAdmin(admin.ModelAdmin):
    list_display = ['terapia_nome', 'paciente_id', 'terapeuta_id', 'data_sessao', 'status', 'valor_cobrado']
    list_filter = ['status', 'modo']
    search_fields = ['paciente_id', 'terapia_nome']
    readonly_fields = ['id', 'valor_cobrado', 'criado_em', 'atualizado_em']


class ParcelaInline(admin.TabularInline):
    model = ParcelaModel
    extra = 0
    can_delete = False
    readonly_fields = ['numero', 'valor', 'valor_pago', 'vencimento', 'status', 'pago_em', 'forma_pagamento']
    exclude = ['id']


@admin.register(PedidoTerapeuticoModel)
class PedidoTerapeuticoAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'paciente_id', 'forma_pagamento', 'quantidade_parcelas', 'valor_total', 'status']
    list_filter = ['status', 'forma_pagamento', 'modo_vencimento']
    search_fields = ['id', 'paciente_id']
    readonly_fields = [
        'id', 'paciente_id', 'processo', 'sessao_avulsa', 'status', 'forma_pagamento',
        'modo_vencimento', 'quantidade_parcelas', 'primeiro_vencimento', 'valor_total',
        'criado_em', 'atualizado_em',
    ]
    inlines = [ParcelaInline]

    def has_add_permission(self, request):
        return False
