"""
Domain Events do Domínio de Gamificação.
"""

from dataclasses import dataclass

from src.core.shared.events import DomainEvent


@dataclass
class PontosConcedidosEvent(DomainEvent):
    pontos: int = 0
    motivo: str = ""
    total_pontos: int = 0
    nivel: int = 1

    @property
    def aggregate_type(self) -> str:
        return "PontosUsuario"


@dataclass
class ConquistaDesbloqueadaEvent(DomainEvent):
    codigo: str = ""
    nome: str = ""
    bonus: int = 0

    @property
    def aggregate_type(self) -> str:
        return "PontosUsuario"
