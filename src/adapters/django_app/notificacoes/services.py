"""
Persistência de notificações.

DjangoNotificador implementa o port Notificador usado pela
sincronização de calendários e pelas tasks Celery.
"""

from typing import Any, Dict, List, Optional
import logging

from django.utils import timezone

from .models import NotificacaoModel, PrioridadeChoices

logger = logging.getLogger(__name__)

PRIORIDADE_POR_TIPO = {
    'sync_error': PrioridadeChoices.HIGH,
    'payment_overdue': PrioridadeChoices.HIGH,
    'sync_success': PrioridadeChoices.LOW,
}


class DjangoNotificador:
    def notificar(
        self,
        usuario_id: str,
        tipo: str,
        titulo: str,
        mensagem: str,
        dados: Optional[Dict[str, Any]] = None,
    ) -> NotificacaoModel:
        notificacao = NotificacaoModel.objects.create(
            usuario_id=str(usuario_id),
            tipo=tipo,
            titulo=titulo,
            mensagem=mensagem,
            dados=dados or {},
            prioridade=PRIORIDADE_POR_TIPO.get(tipo, PrioridadeChoices.MEDIUM),
        )
        logger.info(f"Notificação {tipo} criada para usuário {usuario_id}")
        return notificacao

    def listar(self, usuario_id: str, somente_nao_lidas: bool = False,
               limite: int = 50) -> List[NotificacaoModel]:
        queryset = NotificacaoModel.objects.filter(usuario_id=str(usuario_id))
        if somente_nao_lidas:
            queryset = queryset.filter(lida=False)
        return list(queryset[:limite])

    def contar_nao_lidas(self, usuario_id: str) -> int:
        return NotificacaoModel.objects.filter(usuario_id=str(usuario_id), lida=False).count()

    def marcar_como_lida(self, usuario_id: str, notificacao_id) -> bool:
        """Retorna False se a notificação não existe ou é de outro usuário."""
        try:
            atualizadas = NotificacaoModel.objects.filter(
                pk=notificacao_id, usuario_id=str(usuario_id),
            ).update(lida=True, lida_em=timezone.now())
        except (TypeError, ValueError):
            return False
        return atualizadas > 0

    def marcar_todas_como_lidas(self, usuario_id: str) -> int:
        return NotificacaoModel.objects.filter(
            usuario_id=str(usuario_id), lida=False,
        ).update(lida=True, lida_em=timezone.now())
