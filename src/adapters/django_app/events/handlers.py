"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers são executados de forma assíncrona via Celery quando
Domain Events são publicados.

- Gamificação: pontos ao paciente quando um pedido é quitado
- Notificação: avisos ao usuário (conquistas, parcelas vencidas)
- Calendário: sincronização periódica das integrações

Padrão:
    @shared_task(bind=True, ...)
    def handle_<evento>(self, event_data: dict) -> None:
        # event_data é o dicionário de DomainEvent.to_dict()
"""

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Any, Dict

from celery import shared_task
from django.conf import settings

from src.core.shared.clock import agora

logger = logging.getLogger(__name__)


def _payload(event_data: Dict[str, Any]) -> Dict[str, Any]:
    return event_data.get("data") or {}


# =============================================================================
# Event Handlers - Atendimentos
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_pedido_quitado(self, event_data: Dict[str, Any]) -> None:
    """
    Handler para PedidoQuitadoEvent.

    Concede ao paciente os pontos da ação ORDER_PAID.
    """
    from src.config.container import get_container

    pedido_id = event_data.get("aggregate_id")
    paciente_id = _payload(event_data).get("paciente_id")
    logger.info(f"[HANDLER] PedidoQuitado: {pedido_id} | Paciente: {paciente_id}")

    if not paciente_id:
        logger.warning(f"[HANDLER] PedidoQuitado {pedido_id} sem paciente")
        return

    try:
        get_container().pontuar_acao_service().execute(
            paciente_id,
            "ORDER_PAID",
            metadata={"order_id": pedido_id},
        )
    except Exception as e:
        logger.error(f"Erro no handler PedidoQuitado: {e}", exc_info=True)
        raise self.retry(exc=e)


@shared_task(bind=True, acks_late=True)
def handle_pagamento_registrado(self, event_data: Dict[str, Any]) -> None:
    dados = _payload(event_data)
    logger.info(
        f"[HANDLER] PagamentoRegistrado: pedido {event_data.get('aggregate_id')} | "
        f"parcela {dados.get('parcela_id')} | valor {dados.get('valor')} | "
        f"status {dados.get('status_pedido')}"
    )


# =============================================================================
# Event Handlers - Gamificação
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_conquista_desbloqueada(self, event_data: Dict[str, Any]) -> None:
    """Notifica o usuário sobre a conquista desbloqueada."""
    dados = _payload(event_data)
    usuario_id = event_data.get("aggregate_id")
    nome = dados.get("nome", "")
    bonus = dados.get("bonus", 0)

    logger.info(f"[HANDLER] ConquistaDesbloqueada: {usuario_id} | {nome}")

    mensagem = f"Você desbloqueou a conquista {nome}"
    if bonus:
        mensagem += f" e ganhou {bonus} pontos de bônus"
    notify_user.delay(
        user_id=usuario_id,
        tipo="achievement_unlocked",
        titulo="Conquista Desbloqueada!",
        mensagem=mensagem,
        dados={"achievement": dados.get("codigo"), "bonusPoints": bonus},
    )


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, event_data: Dict[str, Any]) -> None:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Tipo do evento (ex: 'PedidoQuitadoEvent')
        event_data: Dados do evento serializado
    """
    handlers = {
        "PedidoQuitadoEvent": handle_pedido_quitado,
        "PagamentoRegistradoEvent": handle_pagamento_registrado,
        "ConquistaDesbloqueadaEvent": handle_conquista_desbloqueada,
    }

    handler = handlers.get(event_type)

    if handler:
        logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
        handler.delay(event_data)
    else:
        logger.debug(f"[DISPATCHER] Nenhum handler para {event_type}")


# =============================================================================
# Notification Tasks
# =============================================================================

@shared_task(bind=True, max_retries=3, default_retry_delay=120)
def notify_user(
    self,
    user_id: str,
    tipo: str,
    titulo: str,
    mensagem: str,
    dados: Dict[str, Any] = None,
) -> None:
    """Grava notificação para o usuário."""
    from src.config.container import get_container

    logger.info(f"[NOTIFICATION] {tipo} para {user_id}: {mensagem}")
    get_container().notificador().notificar(user_id, tipo, titulo, mensagem, dados)


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def sincronizar_calendarios(self) -> Dict[str, int]:
    """
    Agenda e processa sincronizações automáticas de calendário.

    Executada pelo Celery Beat a cada CALENDAR_SYNC_INTERVAL_SECONDS.
    """
    from src.config.container import get_container

    sync_service = get_container().calendar_sync_service()
    agendados = sync_service.schedule_automatic_syncs()
    processados = sync_service.process_sync_queue()

    logger.info(
        f"[SCHEDULED] Calendários: {agendados} agendado(s), {processados} processado(s)"
    )
    return {"scheduled": agendados, "processed": processados}


@shared_task(bind=True)
def verificar_parcelas_vencidas(self) -> int:
    """
    Relatório diário de parcelas vencidas.

    Notifica cada paciente com parcelas em atraso.

    Returns:
        Número de parcelas vencidas encontradas
    """
    from src.config.container import get_container
    from src.core.atendimentos.dtos import ListarParcelasQueryDTO, money
    from src.core.atendimentos.financeiro import money_sum

    logger.info("[SCHEDULED] Verificando parcelas vencidas...")

    resultado = get_container().listar_parcelas_service().execute(
        ListarParcelasQueryDTO(somente_vencidas=True, status="OPEN")
    )

    por_paciente = defaultdict(list)
    for item in resultado.parcelas:
        por_paciente[item.paciente_id].append(item)

    for paciente_id, itens in por_paciente.items():
        saldo = money_sum(item.parcela.valor - item.parcela.valor_pago for item in itens)
        notify_user.delay(
            user_id=paciente_id,
            tipo="payment_overdue",
            titulo="Parcelas em Atraso",
            mensagem=f"Você possui {len(itens)} parcela(s) vencida(s) totalizando R$ {money(saldo)}",
            dados={"installments": [item.parcela.id for item in itens]},
        )

    logger.info(
        f"[SCHEDULED] {resultado.quantidade_vencidas} parcela(s) vencida(s), "
        f"total {money(resultado.total_vencido)}"
    )
    return resultado.quantidade_vencidas


@shared_task(bind=True)
def limpar_eventos_antigos(self, days: int = None) -> int:
    """
    Remove eventos externos de calendário encerrados há mais de `days` dias.

    Executada semanalmente pelo Celery Beat.
    """
    from src.adapters.django_app.calendario.models import ExternalCalendarEvent

    days = days or getattr(settings, "CALENDAR_EVENT_RETENTION_DAYS", 90)
    cutoff = agora() - timedelta(days=days)

    deleted, _ = ExternalCalendarEvent.objects.filter(end_at__lt=cutoff).delete()
    logger.info(f"[SCHEDULED] {deleted} evento(s) de calendário removido(s)")
    return deleted
