from django.contrib import admin

from .models import NotificacaoModel


@admin.register(NotificacaoModel)
class NotificacaoAdmin(admin.ModelAdmin):
    list_display = ['titulo', 'usuario_id', 'tipo', 'prioridade', 'lida', 'criado_em']
    list_filter = ['tipo', 'prioridade', 'lida']
    search_fields = ['usuario_id', 'titulo', 'mensagem']
    date_hierarchy = 'criado_em'
