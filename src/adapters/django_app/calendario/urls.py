"""
URL patterns para integrações de calendário.

Endpoints API JSON (prefixo /api/calendario/):
- GET/POST integracoes/
- PATCH/DELETE integracoes/<id>/
- POST integracoes/<id>/sincronizar/
- GET sincronizacao/status/
"""

from django.urls import path
from . import api_views

app_name = 'calendario'

urlpatterns = [
    path('integracoes/', api_views.IntegracaoAPIListView.as_view(), name='integracoes'),
    path('integracoes/<str:pk>/', api_views.IntegracaoAPIDetailView.as_view(), name='integracao_detail'),
    path('integracoes/<str:pk>/sincronizar/', api_views.SincronizarAPIView.as_view(), name='sincronizar'),
    path('sincronizacao/status/', api_views.SyncStatusAPIView.as_view(), name='sync_status'),
]
