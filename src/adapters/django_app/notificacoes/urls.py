"""
URL patterns de notificações (prefixo /api/notificacoes/).
"""

from django.urls import path
from . import api_views

app_name = 'notificacoes'

urlpatterns = [
    path('', api_views.NotificacaoAPIListView.as_view(), name='list'),
    # Antes de <pk> para não conflitar
    path('marcar-todas-lidas/', api_views.MarcarTodasLidasAPIView.as_view(), name='marcar_todas'),
    path('<str:pk>/lida/', api_views.MarcarLidaAPIView.as_view(), name='marcar_lida'),
]
