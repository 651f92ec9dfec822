"""
URL Configuration da plataforma Hekate.

Estrutura:
- /admin/ - Django Admin
- /api/atendimentos/ - Terapias, processos, sessões avulsas e financeiro
- /api/calendario/ - Integrações e sincronização de calendários
- /api/gamificacao/ - Pontos, estatísticas e ranking
- /api/notificacoes/ - Notificações do usuário
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    # Django Admin
    path('admin/', admin.site.urls),

    # APIs
    path('api/atendimentos/', include('src.adapters.django_app.atendimentos.urls')),
    path('api/calendario/', include('src.adapters.django_app.calendario.urls')),
    path('api/gamificacao/', include('src.adapters.django_app.gamificacao.urls')),
    path('api/notificacoes/', include('src.adapters.django_app.notificacoes.urls')),

    # Health check
    path('health/', health, name='health'),
]
