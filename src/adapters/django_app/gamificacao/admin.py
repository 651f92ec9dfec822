"""
Django Admin para Gamificação (somente consulta).

Pontos devem ser concedidos pela API para manter extrato, nível e
conquistas consistentes.
"""

from django.contrib import admin

from .models import ConquistaUsuarioModel, PontosUsuarioModel, TransacaoPontosModel


class SomenteLeituraAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(PontosUsuarioModel)
class PontosUsuarioAdmin(SomenteLeituraAdmin):
    list_display = ['usuario_id', 'total_pontos', 'nivel', 'progresso', 'pontos_proximo_nivel']
    search_fields = ['usuario_id']


@admin.register(TransacaoPontosModel)
class TransacaoPontosAdmin(SomenteLeituraAdmin):
    list_display = ['usuario_id', 'tipo', 'pontos', 'motivo', 'criado_em']
    list_filter = ['tipo']
    search_fields = ['usuario_id', 'motivo']
    date_hierarchy = 'criado_em'


@admin.register(ConquistaUsuarioModel)
class ConquistaUsuarioAdmin(SomenteLeituraAdmin):
    list_display = ['usuario_id', 'nome', 'categoria', 'raridade', 'bonus', 'desbloqueada_em']
    list_filter = ['categoria', 'raridade']
    search_fields = ['usuario_id', 'codigo']
