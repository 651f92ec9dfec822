"""
Ports (Interfaces) do Domínio de Calendário.

- IntegracaoRepository: integrações persistidas
- EventoExternoRepository: cópia local dos eventos externos
- CalendarClient: leitura de eventos e renovação de token de um provedor
  (Google, Outlook)
- Notificador: avisos ao usuário sobre sincronizações
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .entities import EventoExterno, IntegracaoCalendario


@runtime_checkable
class IntegracaoRepository(Protocol):
    def save(self, integracao: IntegracaoCalendario) -> None:
        ...

    def get_by_id(self, integracao_id: str) -> Optional[IntegracaoCalendario]:
        ...

    def delete(self, integracao_id: str) -> None:
        ...

    def list_by_usuario(self, usuario_id: str) -> List[IntegracaoCalendario]:
        ...

    def list_sincronizaveis(self) -> List[IntegracaoCalendario]:
        """Integrações ativas com sincronização habilitada."""
        ...


@runtime_checkable
class EventoExternoRepository(Protocol):
    def upsert(self, integracao_id: str, evento: EventoExterno) -> bool:
        """
        Cria ou atualiza evento.

        Returns:
            True se criado, False se atualizado
        """
        ...


@runtime_checkable
class CalendarClient(Protocol):
    def listar_eventos(
        self,
        integracao: IntegracaoCalendario,
        desde: Optional[datetime] = None,
    ) -> List[EventoExterno]:
        """
        Lê eventos do calendário (incremental a partir de `desde`).

        Raises:
            CalendarProviderError: Falha HTTP ou resposta inválida
        """
        ...

    def renovar_token(self, integracao: IntegracaoCalendario) -> Tuple[str, Optional[str]]:
        """
        Troca o refresh token por (access_token, refresh_token rotacionado ou None).

        Raises:
            CalendarProviderError: Token recusado ou falha de rede
        """
        ...


@runtime_checkable
class Notificador(Protocol):
    def notificar(
        self,
        usuario_id: str,
        tipo: str,
        titulo: str,
        mensagem: str,
        dados: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...


# =============================================================================
# Implementações em memória (testes)
# =============================================================================

class InMemoryIntegracaoRepository:
    def __init__(self):
        self._integracoes: Dict[str, IntegracaoCalendario] = {}

    def save(self, integracao: IntegracaoCalendario) -> None:
        self._integracoes[integracao.id] = integracao

    def get_by_id(self, integracao_id: str) -> Optional[IntegracaoCalendario]:
        return self._integracoes.get(integracao_id)

    def delete(self, integracao_id: str) -> None:
        self._integracoes.pop(integracao_id, None)

    def list_by_usuario(self, usuario_id: str) -> List[IntegracaoCalendario]:
        return [i for i in self._integracoes.values() if i.usuario_id == usuario_id]

    def list_sincronizaveis(self) -> List[IntegracaoCalendario]:
        return [
            i for i in self._integracoes.values()
            if i.ativa and i.sincronizacao_habilitada
        ]


class InMemoryEventoExternoRepository:
    def __init__(self):
        self._eventos: Dict[Tuple[str, str], EventoExterno] = {}

    def upsert(self, integracao_id: str, evento: EventoExterno) -> bool:
        chave = (integracao_id, evento.id_externo)
        criado = chave not in self._eventos
        self._eventos[chave] = evento
        return criado

    def list_by_integracao(self, integracao_id: str) -> List[EventoExterno]:
        return [e for (i, _), e in self._eventos.items() if i == integracao_id]


class InMemoryNotificador:
    def __init__(self):
        self.notificacoes: List[Dict[str, Any]] = []

    def notificar(self, usuario_id, tipo, titulo, mensagem, dados=None) -> None:
        self.notificacoes.append({
            "usuario_id": usuario_id,
            "tipo": tipo,
            "titulo": titulo,
            "mensagem": mensagem,
            "dados": dados or {},
        })
