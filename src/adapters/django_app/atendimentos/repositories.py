"""
Repositórios Django do domínio de Atendimentos.

Implementam os Ports de src/core/atendimentos/ports.py usando o ORM.
São DRIVEN ADAPTERS: não contêm lógica de negócio e usam os Mappers
para conversão.

Agregados são gravados por inteiro (upsert + remoção de filhos que
saíram do agregado). As chamadas acontecem dentro do UnitOfWork do
use case, então a gravação é atômica.
"""

from typing import List, Optional
import logging

from django.db.models import Prefetch

from src.core.atendimentos.entities import (
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    StatusProcesso,
    StatusSessao,
    Terapia,
)

from .mappers import PedidoMapper, ProcessoMapper, SessaoAvulsaMapper, TerapiaMapper
from .models import (
    ItemOrcamentoModel,
    ParcelaModel,
    PedidoTerapeuticoModel,
    ProcessoTerapeuticoModel,
    SessaoAvulsaModel,
    SessaoTerapeuticaModel,
    TerapiaModel,
)

logger = logging.getLogger(__name__)

_PEDIDO_COM_PARCELAS = Prefetch(
    'pedido__parcelas', queryset=ParcelaModel.objects.order_by('numero')
)


class DjangoTerapiaRepository:
    def save(self, terapia: Terapia) -> None:
        TerapiaModel.objects.update_or_create(
            id=terapia.id,
            defaults=TerapiaMapper.to_defaults(terapia),
        )
        logger.debug(f"Terapia saved: {terapia.id}")

    def get_by_id(self, terapia_id: str) -> Optional[Terapia]:
        model = TerapiaModel.objects.filter(id=terapia_id).first()
        return TerapiaMapper.to_entity(model) if model else None

    def list_all(self, somente_ativas: bool = False) -> List[Terapia]:
        queryset = TerapiaModel.objects.all()
        if somente_ativas:
            queryset = queryset.filter(ativa=True)
        return [TerapiaMapper.to_entity(m) for m in queryset.order_by('nome')]


class DjangoPedidoRepository:
    """
    Pedidos e parcelas.

    Exemplo:
        repo = DjangoPedidoRepository()
        pedido = repo.get_by_parcela_id(parcela_id)
        pedido.obter_parcela(parcela_id).registrar_pagamento()
        repo.save(pedido)
    """

    def _queryset(self, for_update: bool = False):
        queryset = PedidoTerapeuticoModel.objects.prefetch_related(
            Prefetch('parcelas', queryset=ParcelaModel.objects.order_by('numero'))
        )
        return queryset.select_for_update() if for_update else queryset

    def save(self, pedido: PedidoTerapeutico) -> None:
        PedidoTerapeuticoModel.objects.update_or_create(
            id=pedido.id,
            defaults=PedidoMapper.to_defaults(pedido),
        )

        ids_atuais = [p.id for p in pedido.parcelas]
        # Remove primeiro para não colidir com (pedido, numero)
        ParcelaModel.objects.filter(pedido_id=pedido.id).exclude(id__in=ids_atuais).delete()
        for parcela in pedido.parcelas:
            ParcelaModel.objects.update_or_create(
                id=parcela.id,
                defaults=PedidoMapper.parcela_defaults(parcela, pedido.id),
            )
        logger.debug(f"Pedido saved: {pedido.id} ({pedido.status.value})")

    def get_by_id(self, pedido_id: str) -> Optional[PedidoTerapeutico]:
        model = self._queryset().filter(id=pedido_id).first()
        return PedidoMapper.to_entity(model) if model else None

    def get_by_parcela_id(
        self, parcela_id: str, for_update: bool = False
    ) -> Optional[PedidoTerapeutico]:
        pedido_id = (
            ParcelaModel.objects.filter(id=parcela_id).values_list('pedido_id', flat=True).first()
        )
        if pedido_id is None:
            return None
        # Trava só a linha do pedido; as parcelas são lidas depois do lock
        model = self._queryset(for_update).filter(id=pedido_id).first()
        return PedidoMapper.to_entity(model) if model else None

    def list_all(self, paciente_id: Optional[str] = None) -> List[PedidoTerapeutico]:
        queryset = self._queryset()
        if paciente_id:
            queryset = queryset.filter(paciente_id=paciente_id)
        return [PedidoMapper.to_entity(m) for m in queryset.order_by('criado_em')]

    def delete(self, pedido_id: str) -> None:
        PedidoTerapeuticoModel.objects.filter(id=pedido_id).delete()


class DjangoProcessoRepository:
    """Agregado ProcessoTerapeutico: processo, itens, sessões e pedido."""

    def __init__(self, pedido_repo: Optional[DjangoPedidoRepository] = None):
        self._pedido_repo = pedido_repo or DjangoPedidoRepository()

    def _queryset(self):
        return ProcessoTerapeuticoModel.objects.select_related('pedido').prefetch_related(
            Prefetch('itens', queryset=ItemOrcamentoModel.objects.order_by('ordem')),
            Prefetch('sessoes', queryset=SessaoTerapeuticaModel.objects.order_by('indice_ordem')),
            _PEDIDO_COM_PARCELAS,
        )

    def save(self, processo: ProcessoTerapeutico) -> None:
        ProcessoTerapeuticoModel.objects.update_or_create(
            id=processo.id,
            defaults=ProcessoMapper.to_defaults(processo),
        )

        ItemOrcamentoModel.objects.filter(processo_id=processo.id).exclude(
            id__in=[i.id for i in processo.itens]
        ).delete()
        for item in processo.itens:
            ItemOrcamentoModel.objects.update_or_create(
                id=item.id,
                defaults=ProcessoMapper.item_defaults(item, processo.id),
            )

        for sessao in processo.sessoes:
            SessaoTerapeuticaModel.objects.update_or_create(
                id=sessao.id,
                defaults=ProcessoMapper.sessao_defaults(sessao, processo.id),
            )

        if processo.pedido is not None:
            self._pedido_repo.save(processo.pedido)

        logger.debug(f"Processo saved: {processo.id} ({processo.status.value})")

    def get_by_id(self, processo_id: str) -> Optional[ProcessoTerapeutico]:
        model = self._queryset().filter(id=processo_id).first()
        return ProcessoMapper.to_entity(model) if model else None

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusProcesso] = None,
    ) -> List[ProcessoTerapeutico]:
        queryset = self._queryset()
        if paciente_id:
            queryset = queryset.filter(paciente_id=paciente_id)
        if status:
            queryset = queryset.filter(status=status.value)
        return [ProcessoMapper.to_entity(m) for m in queryset.order_by('-criado_em')]


class DjangoSessaoAvulsaRepository:
    def __init__(self, pedido_repo: Optional[DjangoPedidoRepository] = None):
        self._pedido_repo = pedido_repo or DjangoPedidoRepository()

    def _queryset(self):
        return SessaoAvulsaModel.objects.select_related('pedido').prefetch_related(
            _PEDIDO_COM_PARCELAS,
        )

    def save(self, sessao: SessaoAvulsa) -> None:
        SessaoAvulsaModel.objects.update_or_create(
            id=sessao.id,
            defaults=SessaoAvulsaMapper.to_defaults(sessao),
        )
        if sessao.pedido is not None:
            self._pedido_repo.save(sessao.pedido)
        logger.debug(f"Sessão avulsa saved: {sessao.id}")

    def get_by_id(self, sessao_id: str) -> Optional[SessaoAvulsa]:
        model = self._queryset().filter(id=sessao_id).first()
        return SessaoAvulsaMapper.to_entity(model) if model else None

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusSessao] = None,
    ) -> List[SessaoAvulsa]:
        queryset = self._queryset()
        if paciente_id:
            queryset = queryset.filter(paciente_id=paciente_id)
        if status:
            queryset = queryset.filter(status=status.value)
        return [SessaoAvulsaMapper.to_entity(m) for m in queryset.order_by('-data_sessao')]

    def delete(self, sessao_id: str) -> None:
        # Pedido e parcelas caem em cascata
        SessaoAvulsaModel.objects.filter(id=sessao_id).delete()
