"""
API Views JSON de notificações.

Endpoints (prefixo /api/notificacoes/):
- GET  ''                   - Notificações do usuário (?unread=true, ?limit=50)
- POST <id>/lida/           - Marcar como lida
- POST marcar-todas-lidas/  - Marcar todas como lidas
"""

from django.http import HttpRequest, JsonResponse

from src.core.shared.exceptions import EntityNotFoundError

from ..shared.api import BaseAPIView, get_user_id, json_response, require_login


class NotificacaoAPIListView(BaseAPIView):
    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            notificador = self.get_service('notificador')
            usuario_id = get_user_id(request)
            limite = min(max(int(request.GET.get('limit', 50)), 1), 200)

            notificacoes = notificador.listar(
                usuario_id,
                somente_nao_lidas=request.GET.get('unread', '').lower() in ('1', 'true'),
                limite=limite,
            )
            return json_response(
                success=True,
                data=[n.to_dict() for n in notificacoes],
                meta={'unread': notificador.contar_nao_lidas(usuario_id)},
            )
        except Exception as e:
            return self.handle_exception(e)


class MarcarLidaAPIView(BaseAPIView):
    @require_login
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            if not self.get_service('notificador').marcar_como_lida(get_user_id(request), pk):
                raise EntityNotFoundError(
                    "Notificação não encontrada", entity_type="Notificacao", entity_id=pk
                )
            return json_response(success=True, data={'id': pk, 'is_read': True})
        except Exception as e:
            return self.handle_exception(e)


class MarcarTodasLidasAPIView(BaseAPIView):
    @require_login
    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            total = self.get_service('notificador').marcar_todas_como_lidas(get_user_id(request))
            return json_response(success=True, data={'updated': total})
        except Exception as e:
            return self.handle_exception(e)
