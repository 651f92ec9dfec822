"""
Configuração do Django App para Atendimentos.
"""

from django.apps import AppConfig


class AtendimentosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.atendimentos'
    label = 'atendimentos'
    verbose_name = 'Atendimentos Terapêuticos'
