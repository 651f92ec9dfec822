"""
Django Admin para integrações de calendário.
"""

from django.contrib import admin

from .models import ExternalCalendarEvent, IntegracaoCalendarioModel


@admin.register(IntegracaoCalendarioModel)
class IntegracaoCalendarioAdmin(admin.ModelAdmin):
    list_display = [
        'usuario_id', 'provedor', 'calendario_id', 'ativa', 'frequencia',
        'ultima_sincronizacao', 'status_sincronizacao',
    ]
    list_filter = ['provedor', 'ativa', 'status_sincronizacao', 'frequencia']
    search_fields = ['usuario_id', 'calendario_id']
    # Tokens não aparecem no admin
    exclude = ['access_token', 'refresh_token']
    readonly_fields = ['id', 'ultima_sincronizacao', 'erro_sincronizacao', 'criado_em', 'atualizado_em']


@admin.register(ExternalCalendarEvent)
class ExternalCalendarEventAdmin(admin.ModelAdmin):
    list_display = ['title', 'integration', 'start_at', 'end_at', 'all_day', 'status']
    list_filter = ['status', 'all_day']
    search_fields = ['title', 'external_id']
    date_hierarchy = 'start_at'
