"""
Configuração do Django App para Gamificação.
"""

from django.apps import AppConfig


class GamificacaoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.gamificacao'
    label = 'gamificacao'
    verbose_name = 'Gamificação'
