"""
Use Cases do Domínio de Calendário.

Integrações são sempre manipuladas pelo próprio dono; integração de
outro usuário é tratada como inexistente.
"""

from typing import Any, Dict, List
import logging

from src.core.shared.exceptions import EntityNotFoundError
from src.core.shared.interfaces import UnitOfWork

from .dtos import AtualizarIntegracaoInputDTO, CriarIntegracaoInputDTO
from .entities import IntegracaoCalendario
from .ports import IntegracaoRepository
from .sync_service import CalendarSyncService

logger = logging.getLogger(__name__)


def _obter_integracao_do_usuario(
    repo: IntegracaoRepository, usuario_id: str, integracao_id: str
) -> IntegracaoCalendario:
    integracao = repo.get_by_id(integracao_id)
    if not integracao or integracao.usuario_id != str(usuario_id):
        raise EntityNotFoundError(
            "Integração não encontrada",
            entity_type="IntegracaoCalendario",
            entity_id=integracao_id,
        )
    return integracao


class ListarIntegracoesService:
    def __init__(self, integracao_repo: IntegracaoRepository):
        self.integracao_repo = integracao_repo

    def execute(self, usuario_id: str) -> List[Dict[str, Any]]:
        return [i.to_dict() for i in self.integracao_repo.list_by_usuario(str(usuario_id))]


class CriarIntegracaoService:
    def __init__(self, integracao_repo: IntegracaoRepository, uow: UnitOfWork):
        self.integracao_repo = integracao_repo
        self.uow = uow

    def execute(self, input_dto: CriarIntegracaoInputDTO) -> Dict[str, Any]:
        with self.uow:
            integracao = IntegracaoCalendario.criar(
                usuario_id=input_dto.usuario_id,
                provedor=input_dto.provedor,
                access_token=input_dto.access_token,
                calendario_id=input_dto.calendario_id,
                refresh_token=input_dto.refresh_token,
                frequencia=input_dto.frequencia,
                sincronizacao_habilitada=input_dto.sincronizacao_habilitada,
            )
            self.integracao_repo.save(integracao)

        logger.info(
            f"Integração {integracao.provedor.value} criada para usuário {integracao.usuario_id}"
        )
        return integracao.to_dict()


class AtualizarIntegracaoService:
    def __init__(self, integracao_repo: IntegracaoRepository, uow: UnitOfWork):
        self.integracao_repo = integracao_repo
        self.uow = uow

    def execute(self, input_dto: AtualizarIntegracaoInputDTO) -> Dict[str, Any]:
        with self.uow:
            integracao = _obter_integracao_do_usuario(
                self.integracao_repo, input_dto.usuario_id, input_dto.integracao_id
            )
            integracao.atualizar(
                access_token=input_dto.access_token,
                refresh_token=input_dto.refresh_token,
                calendario_id=input_dto.calendario_id,
                frequencia=input_dto.frequencia,
                sincronizacao_habilitada=input_dto.sincronizacao_habilitada,
                ativa=input_dto.ativa,
            )
            self.integracao_repo.save(integracao)

        return integracao.to_dict()


class ExcluirIntegracaoService:
    """Remove a integração e os jobs pendentes dela na fila."""

    def __init__(
        self,
        integracao_repo: IntegracaoRepository,
        sync_service: CalendarSyncService,
        uow: UnitOfWork,
    ):
        self.integracao_repo = integracao_repo
        self.sync_service = sync_service
        self.uow = uow

    def execute(self, usuario_id: str, integracao_id: str) -> None:
        with self.uow:
            integracao = _obter_integracao_do_usuario(
                self.integracao_repo, usuario_id, integracao_id
            )
            self.integracao_repo.delete(integracao.id)

        self.sync_service.remover_jobs_da_integracao(integracao.id)
        logger.info(f"Integração {integracao.id} removida")
