"""
Unit of Work sobre `django.db.transaction`.

Cada `with uow:` abre um `transaction.atomic()`. Os eventos de domínio
ficam retidos até o bloco sair sem erro; só então seguem para o
publisher configurado no container.
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    Como usa `atomic()`, blocos aninhados viram savepoints e o
    comportamento é o mesmo dentro da transação de teste do
    pytest-django. O mesmo objeto atende vários `with` em sequência.
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = self._rolled_back = False
        self._atomic = transaction.atomic()
        self._atomic.__enter__()

    def commit(self) -> None:
        if self._atomic is None:
            logger.warning("Commit sem transação ativa")
            return

        atomic, self._atomic = self._atomic, None
        try:
            atomic.__exit__(None, None, None)
        except Exception:
            self._rolled_back = True
            self.clear_events()
            logger.exception("Commit failed")
            raise

        self._committed = True
        self._publish_events()

    def rollback(self) -> None:
        atomic, self._atomic = self._atomic, None
        self._rolled_back = True
        self.clear_events()
        if atomic is None:
            return

        # atomic só desfaz a transação quando recebe uma exceção
        try:
            atomic.__exit__(RuntimeError, RuntimeError("rollback"), None)
        except Exception:
            logger.exception("Rollback failed")

    def _publish_events(self) -> None:
        # Os dados já estão gravados: falha ao publicar só é registrada
        events, self._events = self._events, []
        for event in events:
            logger.info(f"Publishing event: {event.event_type} for aggregate {event.aggregate_id}")
            if self._event_publisher is None:
                continue
            try:
                self._event_publisher.publish(event)
            except Exception as e:
                logger.error(f"Failed to publish event {event.event_type}: {e}")

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of Work dos testes de use case: nada é persistido, eventos ficam em lista."""

    def __init__(self):
        super().__init__()
        self.committed = False
        self.rolled_back = False
        self.published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        self.committed = True
        self.published_events.extend(self._events)
        self.clear_events()

    def rollback(self) -> None:
        self.rolled_back = True
        self.clear_events()
