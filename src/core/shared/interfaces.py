"""
Ports transversais: Unit of Work e publicação de eventos.

Os ports de cada domínio (repositórios, gateways) ficam em
`<dominio>/ports.py`; aqui só o que todos os use cases compartilham.
"""

from abc import ABC, abstractmethod
from typing import List

from .events import DomainEvent


class UnitOfWork(ABC):
    """
    Fronteira transacional de um use case.

        with self.uow:
            self.pedido_repo.save(pedido)
            self.uow.publish_event(PedidoQuitadoEvent(...))

    Saída normal faz commit e entrega os eventos; exceção faz rollback,
    descarta os eventos e segue propagando.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        return False

    @abstractmethod
    def _begin_transaction(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """Efetiva a transação e, só então, entrega os eventos pendentes."""
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """Guarda o evento até o commit."""
        self._events.append(event)

    def clear_events(self) -> None:
        self._events.clear()


class EventPublisher(ABC):
    """Entrega eventos já confirmados (log local ou Celery)."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        raise NotImplementedError
