"""
API Views JSON para Gamificação.

Endpoints (prefixo /api/gamificacao/):
- POST pontos/        - Conceder pontos (administrador)
- GET  estatisticas/  - Pontos, nível, extrato e conquistas do usuário
- GET  ranking/       - Maiores pontuações (?limit=10)
"""

import logging

from django.http import HttpRequest, JsonResponse

from ..shared.api import (
    BaseAPIView,
    get_user_id,
    is_admin,
    json_response,
    require_admin,
    require_login,
)
from .forms import ConcederPontosForm

logger = logging.getLogger(__name__)


class ConcederPontosAPIView(BaseAPIView):
    """
    POST /api/gamificacao/pontos/

    Body JSON:
    {
        "user_id": "string (obrigatório)",
        "points": int > 0 (obrigatório),
        "reason": "string (obrigatório)",
        "description": "string",
        "metadata": {}
    }
    """

    @require_admin
    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            dados = self.validate(ConcederPontosForm, self.parse_body(request))

            resultado = self.get_service('conceder_pontos_service').execute(
                usuario_id=dados['user_id'],
                pontos=dados['points'],
                motivo=dados['reason'],
                descricao=dados.get('description') or '',
                metadata=dados.get('metadata') or {},
            )

            logger.info(
                f"API: {dados['points']} pontos concedidos a {dados['user_id']} "
                f"por {get_user_id(request)}"
            )
            return json_response(success=True, data=resultado)
        except Exception as e:
            return self.handle_exception(e)


class EstatisticasAPIView(BaseAPIView):
    """
    GET /api/gamificacao/estatisticas/

    Administradores podem consultar outro usuário com ?user_id=.
    """

    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            usuario_id = get_user_id(request)
            if is_admin(request.user) and request.GET.get('user_id'):
                usuario_id = request.GET['user_id']

            estatisticas = self.get_service('estatisticas_usuario_service').execute(usuario_id)
            return json_response(success=True, data=estatisticas)
        except Exception as e:
            return self.handle_exception(e)


class RankingAPIView(BaseAPIView):
    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            limite = int(request.GET.get('limit', 10))
            ranking = self.get_service('ranking_service').execute(limite)
            return json_response(success=True, data=ranking, meta={'total': len(ranking)})
        except Exception as e:
            return self.handle_exception(e)
