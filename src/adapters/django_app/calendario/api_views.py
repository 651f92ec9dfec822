"""
API Views JSON para integrações de calendário.

Endpoints (prefixo /api/calendario/):
- GET    integracoes/                  - Integrações do usuário
- POST   integracoes/                  - Conectar calendário
- PATCH  integracoes/<id>/             - Atualizar integração
- DELETE integracoes/<id>/             - Remover integração
- POST   integracoes/<id>/sincronizar/ - Sincronização manual
- GET    sincronizacao/status/         - Estado da fila (next_job só para admin)

Integrações de outros usuários respondem 404.
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.core.calendario.dtos import AtualizarIntegracaoInputDTO, CriarIntegracaoInputDTO

from ..shared.api import BaseAPIView, get_user_id, is_admin, json_response, require_login
from .forms import IntegracaoCreateForm, IntegracaoUpdateForm

logger = logging.getLogger(__name__)


def _status_da_fila(request: HttpRequest, sync_service) -> dict:
    """Estado da fila; o próximo job (usuário e integração) só para admin."""
    status = sync_service.get_sync_queue_status()
    if not is_admin(request.user):
        status.pop("next_job", None)
    return status


class IntegracaoAPIListView(BaseAPIView):
    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            integracoes = self.get_service('listar_integracoes_service').execute(
                get_user_id(request)
            )
            return json_response(success=True, data=integracoes)
        except Exception as e:
            return self.handle_exception(e)

    @require_login
    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "provider": "GOOGLE|OUTLOOK (obrigatório)",
            "access_token": "string (obrigatório)",
            "refresh_token": "string",
            "calendar_id": "string (default primary)",
            "sync_frequency": "hourly|daily|weekly|manual (default daily)",
            "sync_enabled": bool
        }
        """
        try:
            dados = self.validate(IntegracaoCreateForm, self.parse_body(request))
            sync_enabled = dados.get('sync_enabled')

            integracao = self.get_service('criar_integracao_service').execute(
                CriarIntegracaoInputDTO(
                    usuario_id=get_user_id(request),
                    provedor=dados['provider'],
                    access_token=dados['access_token'],
                    calendario_id=dados.get('calendar_id') or 'primary',
                    refresh_token=dados.get('refresh_token') or None,
                    frequencia=dados.get('sync_frequency') or 'daily',
                    sincronizacao_habilitada=True if sync_enabled is None else sync_enabled,
                )
            )
            return json_response(success=True, data=integracao, status=201)
        except Exception as e:
            return self.handle_exception(e)


class IntegracaoAPIDetailView(BaseAPIView):
    @require_login
    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            campos = self.validate(IntegracaoUpdateForm, self.parse_body(request), partial=True)

            integracao = self.get_service('atualizar_integracao_service').execute(
                AtualizarIntegracaoInputDTO(
                    usuario_id=get_user_id(request),
                    integracao_id=pk,
                    access_token=campos.get('access_token') or None,
                    refresh_token=campos.get('refresh_token') or None,
                    calendario_id=campos.get('calendar_id') or None,
                    frequencia=campos.get('sync_frequency') or None,
                    sincronizacao_habilitada=campos.get('sync_enabled'),
                    ativa=campos.get('is_active'),
                )
            )
            return json_response(success=True, data=integracao)
        except Exception as e:
            return self.handle_exception(e)

    @require_login
    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('excluir_integracao_service').execute(get_user_id(request), pk)
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)


class SincronizarAPIView(BaseAPIView):
    """POST /api/calendario/integracoes/<id>/sincronizar/"""

    @require_login
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            sync_service = self.get_service('calendar_sync_service')
            job = sync_service.trigger_manual_sync(get_user_id(request), pk)

            logger.info(f"API: Sincronização manual solicitada: {job.id}")
            return json_response(
                success=True,
                data=job.to_dict(),
                meta=_status_da_fila(request, sync_service),
            )
        except Exception as e:
            return self.handle_exception(e)


class SyncStatusAPIView(BaseAPIView):
    """GET /api/calendario/sincronizacao/status/"""

    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            status = _status_da_fila(request, self.get_service('calendar_sync_service'))
            return json_response(success=True, data=status)
        except Exception as e:
            return self.handle_exception(e)
