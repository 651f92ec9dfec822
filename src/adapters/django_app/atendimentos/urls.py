"""
URL patterns para o domínio de Atendimentos.

Endpoints API JSON (prefixo /api/atendimentos/):
- GET/POST terapias/
- GET/PATCH terapias/<id>/
- GET/POST processos/
- GET/PATCH processos/<id>/
- POST processos/<id>/itens/
- DELETE processos/<id>/itens/<item_id>/
- PATCH processos/<id>/sessoes/<sessao_id>/
- GET/POST sessoes-avulsas/
- GET/PATCH/DELETE sessoes-avulsas/<id>/
- GET financeiro/parcelas/
- POST financeiro/parcelas/<id>/pagamento/
- POST financeiro/parcelas/<id>/estorno/
- POST financeiro/parcelas/<id>/cancelamento/
"""

from django.urls import path
from . import api_views

app_name = 'atendimentos'

urlpatterns = [
    # =========================================================================
    # Terapias
    # =========================================================================
    path('terapias/', api_views.TerapiaAPIListView.as_view(), name='terapias'),
    path('terapias/<str:pk>/', api_views.TerapiaAPIDetailView.as_view(), name='terapia_detail'),

    # =========================================================================
    # Processos
    # =========================================================================
    path('processos/', api_views.ProcessoAPIListView.as_view(), name='processos'),
    path('processos/<str:pk>/', api_views.ProcessoAPIDetailView.as_view(), name='processo_detail'),
    path('processos/<str:pk>/itens/', api_views.ItemOrcamentoAPIView.as_view(), name='processo_itens'),
    path(
        'processos/<str:pk>/itens/<str:item_id>/',
        api_views.ItemOrcamentoDetailAPIView.as_view(),
        name='processo_item_detail',
    ),
    path(
        'processos/<str:pk>/sessoes/<str:sessao_id>/',
        api_views.SessaoProcessoAPIView.as_view(),
        name='processo_sessao_detail',
    ),

    # =========================================================================
    # Sessões avulsas
    # =========================================================================
    path('sessoes-avulsas/', api_views.SessaoAvulsaAPIListView.as_view(), name='sessoes_avulsas'),
    path(
        'sessoes-avulsas/<str:pk>/',
        api_views.SessaoAvulsaAPIDetailView.as_view(),
        name='sessao_avulsa_detail',
    ),

    # =========================================================================
    # Financeiro
    # =========================================================================
    path('financeiro/parcelas/', api_views.ParcelasAPIListView.as_view(), name='parcelas'),
    path(
        'financeiro/parcelas/<str:pk>/pagamento/',
        api_views.RegistrarPagamentoAPIView.as_view(),
        name='parcela_pagamento',
    ),
    path(
        'financeiro/parcelas/<str:pk>/estorno/',
        api_views.EstornarPagamentoAPIView.as_view(),
        name='parcela_estorno',
    ),
    path(
        'financeiro/parcelas/<str:pk>/cancelamento/',
        api_views.CancelarParcelaAPIView.as_view(),
        name='parcela_cancelamento',
    ),
]
