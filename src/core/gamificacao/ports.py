"""
Ports do Domínio de Gamificação.
"""

from typing import Any, Dict, List, Optional, Protocol, Set, runtime_checkable

from .entities import ConquistaUsuario, PontosUsuario, TipoTransacao, TransacaoPontos


@runtime_checkable
class PontosRepository(Protocol):
    def get(self, usuario_id: str) -> Optional[PontosUsuario]:
        ...

    def save(self, pontos: PontosUsuario) -> None:
        ...

    def ranking(self, limite: int = 10) -> List[PontosUsuario]:
        """Maiores totais primeiro."""
        ...


@runtime_checkable
class TransacaoRepository(Protocol):
    def add(self, transacao: TransacaoPontos) -> None:
        ...

    def recentes(self, usuario_id: str, limite: int = 10) -> List[TransacaoPontos]:
        ...

    def existe(self, usuario_id: str, motivo: str, chave: str, valor: Any) -> bool:
        """Há transação EARNED do usuário com `motivo` e `metadata[chave] == valor`?"""
        ...


@runtime_checkable
class ConquistaRepository(Protocol):
    def add(self, conquista: ConquistaUsuario) -> None:
        ...

    def codigos_do_usuario(self, usuario_id: str) -> Set[str]:
        ...

    def list_by_usuario(self, usuario_id: str) -> List[ConquistaUsuario]:
        ...


# =============================================================================
# Implementações em memória (testes)
# =============================================================================

class InMemoryPontosRepository:
    def __init__(self):
        self._pontos: Dict[str, PontosUsuario] = {}

    def get(self, usuario_id: str) -> Optional[PontosUsuario]:
        return self._pontos.get(usuario_id)

    def save(self, pontos: PontosUsuario) -> None:
        self._pontos[pontos.usuario_id] = pontos

    def ranking(self, limite: int = 10) -> List[PontosUsuario]:
        ordenados = sorted(self._pontos.values(), key=lambda p: p.total_pontos, reverse=True)
        return ordenados[:limite]


class InMemoryTransacaoRepository:
    def __init__(self):
        self.transacoes: List[TransacaoPontos] = []

    def add(self, transacao: TransacaoPontos) -> None:
        self.transacoes.append(transacao)

    def recentes(self, usuario_id: str, limite: int = 10) -> List[TransacaoPontos]:
        do_usuario = [t for t in self.transacoes if t.usuario_id == usuario_id]
        return list(reversed(do_usuario))[:limite]

    def existe(self, usuario_id: str, motivo: str, chave: str, valor: Any) -> bool:
        return any(
            t.usuario_id == usuario_id
            and t.tipo == TipoTransacao.EARNED
            and t.motivo == motivo
            and t.metadata.get(chave) == valor
            for t in self.transacoes
        )


class InMemoryConquistaRepository:
    def __init__(self):
        self.conquistas: List[ConquistaUsuario] = []

    def add(self, conquista: ConquistaUsuario) -> None:
        self.conquistas.append(conquista)

    def codigos_do_usuario(self, usuario_id: str) -> Set[str]:
        return {c.codigo for c in self.conquistas if c.usuario_id == usuario_id}

    def list_by_usuario(self, usuario_id: str) -> List[ConquistaUsuario]:
        return [c for c in self.conquistas if c.usuario_id == usuario_id]
