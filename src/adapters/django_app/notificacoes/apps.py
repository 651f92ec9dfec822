"""
Configuração do Django App para Notificações.
"""

from django.apps import AppConfig


class NotificacoesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.notificacoes'
    label = 'notificacoes'
    verbose_name = 'Notificações'
