"""
Ports (Interfaces) do Domínio de Atendimentos.

Contratos implementados pelos adapters Django:
- TerapiaRepository
- ProcessoRepository (agregado completo: itens, sessões e pedido)
- SessaoAvulsaRepository (com pedido)
- PedidoRepository (pedidos e parcelas, usado pelo financeiro)
- DiretorioUsuarios (consulta de usuários/terapeutas)

Implementações em memória no final do módulo para testes unitários.
"""

from typing import Dict, List, Optional, Protocol, runtime_checkable

from .entities import (
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    StatusProcesso,
    StatusSessao,
    Terapia,
)


@runtime_checkable
class TerapiaRepository(Protocol):
    def save(self, terapia: Terapia) -> None:
        ...

    def get_by_id(self, terapia_id: str) -> Optional[Terapia]:
        ...

    def list_all(self, somente_ativas: bool = False) -> List[Terapia]:
        ...


@runtime_checkable
class PedidoRepository(Protocol):
    """
    Persistência de pedidos com suas parcelas.

    `save` grava o pedido e todas as parcelas em uma única chamada.
    """

    def save(self, pedido: PedidoTerapeutico) -> None:
        ...

    def get_by_id(self, pedido_id: str) -> Optional[PedidoTerapeutico]:
        ...

    def get_by_parcela_id(
        self, parcela_id: str, for_update: bool = False
    ) -> Optional[PedidoTerapeutico]:
        """
        Busca o pedido que contém a parcela.

        Com `for_update=True` o pedido fica travado até o fim da transação:
        baixas concorrentes na mesma parcela passam a ser sequenciais.
        """
        ...

    def list_all(self, paciente_id: Optional[str] = None) -> List[PedidoTerapeutico]:
        ...

    def delete(self, pedido_id: str) -> None:
        ...


@runtime_checkable
class ProcessoRepository(Protocol):
    """
    Persistência do agregado ProcessoTerapeutico.

    `save` grava processo, itens (removendo os excluídos), sessões
    e pedido; `get_by_id` carrega tudo.
    """

    def save(self, processo: ProcessoTerapeutico) -> None:
        ...

    def get_by_id(self, processo_id: str) -> Optional[ProcessoTerapeutico]:
        ...

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusProcesso] = None,
    ) -> List[ProcessoTerapeutico]:
        ...


@runtime_checkable
class SessaoAvulsaRepository(Protocol):
    def save(self, sessao: SessaoAvulsa) -> None:
        ...

    def get_by_id(self, sessao_id: str) -> Optional[SessaoAvulsa]:
        ...

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusSessao] = None,
    ) -> List[SessaoAvulsa]:
        """Lista da mais recente para a mais antiga (data da sessão)."""
        ...

    def delete(self, sessao_id: str) -> None:
        """Remove sessão, pedido e parcelas."""
        ...


@runtime_checkable
class DiretorioUsuarios(Protocol):
    """Consulta de usuários da plataforma (autenticação é do framework)."""

    def existe(self, usuario_id: str) -> bool:
        ...

    def e_terapeuta(self, usuario_id: str) -> bool:
        ...


# =============================================================================
# Implementações em memória (testes)
# =============================================================================

class InMemoryTerapiaRepository:
    def __init__(self):
        self._terapias: Dict[str, Terapia] = {}

    def save(self, terapia: Terapia) -> None:
        self._terapias[terapia.id] = terapia

    def get_by_id(self, terapia_id: str) -> Optional[Terapia]:
        return self._terapias.get(terapia_id)

    def list_all(self, somente_ativas: bool = False) -> List[Terapia]:
        terapias = sorted(self._terapias.values(), key=lambda t: t.nome)
        if somente_ativas:
            return [t for t in terapias if t.ativa]
        return terapias

    def clear(self) -> None:
        self._terapias.clear()


class InMemoryPedidoRepository:
    def __init__(self):
        self._pedidos: Dict[str, PedidoTerapeutico] = {}
        self.leituras_travadas = 0

    def save(self, pedido: PedidoTerapeutico) -> None:
        self._pedidos[pedido.id] = pedido

    def get_by_id(self, pedido_id: str) -> Optional[PedidoTerapeutico]:
        return self._pedidos.get(pedido_id)

    def get_by_parcela_id(
        self, parcela_id: str, for_update: bool = False
    ) -> Optional[PedidoTerapeutico]:
        self.leituras_travadas += int(for_update)
        for pedido in self._pedidos.values():
            if any(p.id == parcela_id for p in pedido.parcelas):
                return pedido
        return None

    def list_all(self, paciente_id: Optional[str] = None) -> List[PedidoTerapeutico]:
        pedidos = list(self._pedidos.values())
        if paciente_id:
            pedidos = [p for p in pedidos if p.paciente_id == paciente_id]
        return sorted(pedidos, key=lambda p: p.criado_em)

    def delete(self, pedido_id: str) -> None:
        self._pedidos.pop(pedido_id, None)

    def clear(self) -> None:
        self._pedidos.clear()


class InMemoryProcessoRepository:
    """
    Processos em memória.

    Se receber um `pedido_repo`, espelha o pedido do processo nele
    (como o repositório Django faz com as tabelas de pedido).
    """

    def __init__(self, pedido_repo: Optional[InMemoryPedidoRepository] = None):
        self._processos: Dict[str, ProcessoTerapeutico] = {}
        self._pedido_repo = pedido_repo

    def save(self, processo: ProcessoTerapeutico) -> None:
        self._processos[processo.id] = processo
        if processo.pedido is not None and self._pedido_repo is not None:
            self._pedido_repo.save(processo.pedido)

    def get_by_id(self, processo_id: str) -> Optional[ProcessoTerapeutico]:
        return self._processos.get(processo_id)

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusProcesso] = None,
    ) -> List[ProcessoTerapeutico]:
        processos = list(self._processos.values())
        if paciente_id:
            processos = [p for p in processos if p.paciente_id == paciente_id]
        if status:
            processos = [p for p in processos if p.status == status]
        return sorted(processos, key=lambda p: p.criado_em, reverse=True)

    def clear(self) -> None:
        self._processos.clear()


class InMemorySessaoAvulsaRepository:
    def __init__(self, pedido_repo: Optional[InMemoryPedidoRepository] = None):
        self._sessoes: Dict[str, SessaoAvulsa] = {}
        self._pedido_repo = pedido_repo

    def save(self, sessao: SessaoAvulsa) -> None:
        self._sessoes[sessao.id] = sessao
        if sessao.pedido is not None and self._pedido_repo is not None:
            self._pedido_repo.save(sessao.pedido)

    def get_by_id(self, sessao_id: str) -> Optional[SessaoAvulsa]:
        return self._sessoes.get(sessao_id)

    def list_all(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[StatusSessao] = None,
    ) -> List[SessaoAvulsa]:
        sessoes = list(self._sessoes.values())
        if paciente_id:
            sessoes = [s for s in sessoes if s.paciente_id == paciente_id]
        if status:
            sessoes = [s for s in sessoes if s.status == status]
        return sorted(sessoes, key=lambda s: s.data_sessao, reverse=True)

    def delete(self, sessao_id: str) -> None:
        sessao = self._sessoes.pop(sessao_id, None)
        if sessao and sessao.pedido and self._pedido_repo is not None:
            self._pedido_repo.delete(sessao.pedido.id)

    def clear(self) -> None:
        self._sessoes.clear()


class InMemoryDiretorioUsuarios:
    """
    Diretório em memória.

    Example:
        usuarios = InMemoryDiretorioUsuarios(usuarios={"1", "2"}, terapeutas={"2"})
    """

    def __init__(self, usuarios=None, terapeutas=None):
        self._terapeutas = set(terapeutas or [])
        self._usuarios = set(usuarios or []) | self._terapeutas

    def existe(self, usuario_id: str) -> bool:
        return str(usuario_id) in self._usuarios

    def e_terapeuta(self, usuario_id: str) -> bool:
        return str(usuario_id) in self._terapeutas
