"""
Serviço de Sincronização de Calendários.

CalendarSynchronizer executa a sincronização de uma integração
(leitura no provedor + upsert local). CalendarSyncService mantém a
fila em memória de SyncJobs, ordenada por `agendado_para`.

A fila vive no processo (singleton do container); o agendamento
periódico é feito pelo Celery beat.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import threading

from src.core.shared.clock import agora
from src.core.shared.exceptions import EntityNotFoundError

from .entities import (
    CalendarProviderError,
    IntegracaoCalendario,
    Provedor,
    ResultadoSincronizacao,
    SyncJob,
)
from .ports import (
    CalendarClient,
    EventoExternoRepository,
    IntegracaoRepository,
    Notificador,
)

logger = logging.getLogger(__name__)


class CalendarSynchronizer:
    """
    Sincroniza uma integração usando o cliente do provedor.

    Integrações com refresh token renovam o access token antes da
    leitura; o token novo é salvo antes de listar eventos.
    """

    ERRO_RENOVACAO = "Failed to refresh access token"

    def __init__(
        self,
        clientes: Dict[Provedor, CalendarClient],
        evento_repo: EventoExternoRepository,
        integracao_repo: Optional[IntegracaoRepository] = None,
    ):
        self.clientes = clientes
        self.evento_repo = evento_repo
        self.integracao_repo = integracao_repo

    def sincronizar(
        self,
        integracao: IntegracaoCalendario,
        desde: Optional[datetime] = None,
    ) -> ResultadoSincronizacao:
        cliente = self.clientes.get(integracao.provedor)
        if cliente is None:
            return ResultadoSincronizacao(
                success=False,
                errors=[f"Provedor não suportado: {integracao.provedor.value}"],
            )

        if integracao.refresh_token:
            try:
                access_token, refresh_token = cliente.renovar_token(integracao)
            except CalendarProviderError as e:
                logger.warning(f"Renovação de token falhou para integração {integracao.id}: {e}")
                return ResultadoSincronizacao(success=False, errors=[self.ERRO_RENOVACAO])
            integracao.renovar_tokens(access_token, refresh_token)
            if self.integracao_repo is not None:
                self.integracao_repo.save(integracao)

        try:
            eventos = cliente.listar_eventos(integracao, desde=desde)
        except CalendarProviderError as e:
            logger.warning(f"Falha no provedor {integracao.provedor.value}: {e}")
            return ResultadoSincronizacao(success=False, errors=[str(e)])

        resultado = ResultadoSincronizacao()
        for evento in eventos:
            if self.evento_repo.upsert(integracao.id, evento):
                resultado.imported += 1
            else:
                resultado.updated += 1
        return resultado


class CalendarSyncService:
    """
    Fila de sincronização de calendários.

    Regras:
    - Um job automático por integração elegível ainda não enfileirada
    - Jobs processados em ordem de agendamento
    - Job agendado no futuro interrompe o processamento (volta à fila)
    - Falhas nunca escapam de process_sync_job; viram status FAILED
      e notificação ao usuário
    """

    def __init__(
        self,
        integracao_repo: IntegracaoRepository,
        synchronizer: CalendarSynchronizer,
        notificador: Notificador,
        relogio: Callable[[], datetime] = agora,
    ):
        self.integracao_repo = integracao_repo
        self.synchronizer = synchronizer
        self.notificador = notificador
        self.relogio = relogio
        self._fila: List[SyncJob] = []
        self._processando = False
        self._lock = threading.Lock()

    # =========================================================================
    # Fila
    # =========================================================================

    def schedule_automatic_syncs(self) -> int:
        """Enfileira integrações que precisam sincronizar. Retorna quantas."""
        agora_ = self.relogio()
        adicionados = 0
        for integracao in self.integracao_repo.list_sincronizaveis():
            if not integracao.precisa_sincronizar(agora_):
                continue
            with self._lock:
                if any(j.integracao_id == integracao.id for j in self._fila):
                    continue
                self._enfileirar(SyncJob.para(integracao, "auto", agora_))
            adicionados += 1

        if adicionados:
            logger.info(f"{adicionados} sincronização(ões) automática(s) agendada(s)")
        return adicionados

    def add_sync_job(self, job: SyncJob) -> None:
        with self._lock:
            self._enfileirar(job)
        self.process_sync_queue()

    def _enfileirar(self, job: SyncJob) -> None:
        self._fila.append(job)
        self._fila.sort(key=lambda j: j.agendado_para)

    def process_sync_queue(self) -> int:
        """Processa jobs vencidos. Retorna quantos foram processados."""
        with self._lock:
            if self._processando or not self._fila:
                return 0
            self._processando = True

        processados = 0
        try:
            while True:
                with self._lock:
                    if not self._fila:
                        break
                    job = self._fila[0]
                    if job.agendado_para > self.relogio():
                        break
                    self._fila.pop(0)
                self.process_sync_job(job)
                processados += 1
        finally:
            with self._lock:
                self._processando = False
        return processados

    def process_sync_job(self, job: SyncJob) -> Optional[ResultadoSincronizacao]:
        integracao = self.integracao_repo.get_by_id(job.integracao_id)
        if not integracao or not integracao.ativa:
            logger.info(f"Job {job.id} ignorado: integração inexistente ou inativa")
            return None

        provedor = integracao.provedor.value
        desde = integracao.ultima_sincronizacao
        try:
            integracao.marcar_sincronizando(self.relogio())
            self.integracao_repo.save(integracao)

            resultado = self.synchronizer.sincronizar(integracao, desde=desde)

            integracao.registrar_resultado(resultado)
            self.integracao_repo.save(integracao)

            if resultado.success:
                self.notificador.notificar(
                    integracao.usuario_id,
                    "sync_success",
                    "Sincronização Concluída",
                    f"Calendário {provedor} sincronizado com sucesso",
                    {
                        "integrationId": integracao.id,
                        "provider": provedor,
                        "eventsProcessed": resultado.eventos_processados,
                        "conflicts": len(resultado.conflicts),
                    },
                )
            else:
                primeiro_erro = resultado.errors[0] if resultado.errors else "Erro desconhecido"
                self.notificador.notificar(
                    integracao.usuario_id,
                    "sync_error",
                    "Erro na Sincronização",
                    f"Falha ao sincronizar calendário {provedor}: {primeiro_erro}",
                    {
                        "integrationId": integracao.id,
                        "provider": provedor,
                        "error": primeiro_erro,
                    },
                )
            logger.info(
                f"Sincronização {job.id}: success={resultado.success} "
                f"processados={resultado.eventos_processados}"
            )
            return resultado

        except Exception as e:
            logger.exception(f"Erro ao processar job de sincronização {job.id}: {e}")
            integracao.registrar_falha(str(e))
            try:
                self.integracao_repo.save(integracao)
                self.notificador.notificar(
                    integracao.usuario_id,
                    "sync_error",
                    "Erro na Sincronização",
                    f"Erro interno ao sincronizar calendário: {e}",
                    {"integrationId": integracao.id, "provider": provedor, "error": str(e)},
                )
            except Exception:
                logger.exception(f"Falha ao registrar erro do job {job.id}")
            return ResultadoSincronizacao(success=False, errors=[str(e)])

    # =========================================================================
    # Operações de usuário
    # =========================================================================

    def trigger_manual_sync(self, usuario_id: str, integracao_id: str) -> SyncJob:
        integracao = self.integracao_repo.get_by_id(integracao_id)
        if not integracao or integracao.usuario_id != str(usuario_id):
            raise EntityNotFoundError(
                "Integração não encontrada",
                entity_type="IntegracaoCalendario",
                entity_id=integracao_id,
            )

        job = SyncJob.para(integracao, "manual", self.relogio())
        logger.info(f"Sincronização manual solicitada: {job.id}")
        self.add_sync_job(job)
        return job

    def get_sync_queue_status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "queue_length": len(self._fila),
                "is_processing": self._processando,
                "next_job": self._fila[0].to_dict() if self._fila else None,
            }

    def clear_user_sync_jobs(self, usuario_id: str) -> int:
        with self._lock:
            antes = len(self._fila)
            self._fila = [j for j in self._fila if j.usuario_id != str(usuario_id)]
            return antes - len(self._fila)

    def remover_jobs_da_integracao(self, integracao_id: str) -> int:
        with self._lock:
            antes = len(self._fila)
            self._fila = [j for j in self._fila if j.integracao_id != integracao_id]
            return antes - len(self._fila)
