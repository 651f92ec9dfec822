"""
Eventos de domínio.

Um use case registra o evento no Unit of Work; o evento só sai para o
publisher depois do commit. É assim que o financeiro avisa a
gamificação de que um pedido foi quitado sem importar nada dela.

Payload serializado (o mesmo que `dispatch_domain_event` recebe):

    {
        "event_id": "...",
        "event_type": "PedidoQuitadoEvent",
        "aggregate_id": "<id do pedido>",
        "aggregate_type": "Pedido",
        "occurred_at": "2024-03-01T12:00:00+00:00",
        "version": 1,
        "data": {"paciente_id": "7", "valor_total": "150.00", ...}
    }
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict
import uuid

from .clock import agora

_BASE_FIELDS = frozenset({"event_id", "aggregate_id", "occurred_at", "version"})


@dataclass
class DomainEvent(ABC):
    """
    Base dos eventos. Subclasses ficam no passado (PedidoQuitado) e
    todos os campos extras precisam de default.
    """

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=agora)
    version: int = 1

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    @property
    @abstractmethod
    def aggregate_type(self) -> str:
        ...

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    @property
    def payload(self) -> Dict[str, Any]:
        """Campos próprios da subclasse."""
        return {
            key: value
            for key, value in vars(self).items()
            if key not in _BASE_FIELDS and not key.startswith("_")
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self.payload,
        }

    def __repr__(self) -> str:
        return f"{self.event_type}(aggregate_id={self.aggregate_id}, {self.payload})"
