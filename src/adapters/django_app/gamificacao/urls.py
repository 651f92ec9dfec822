"""
URL patterns para Gamificação.

Endpoints API JSON (prefixo /api/gamificacao/):
- POST pontos/
- GET estatisticas/
- GET ranking/
"""

from django.urls import path
from . import api_views

app_name = 'gamificacao'

urlpatterns = [
    path('pontos/', api_views.ConcederPontosAPIView.as_view(), name='pontos'),
    path('estatisticas/', api_views.EstatisticasAPIView.as_view(), name='estatisticas'),
    path('ranking/', api_views.RankingAPIView.as_view(), name='ranking'),
]
