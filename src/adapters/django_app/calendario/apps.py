"""
Configuração do Django App para Calendário.
"""

from django.apps import AppConfig


class CalendarioConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.calendario'
    label = 'calendario'
    verbose_name = 'Integrações de Calendário'
