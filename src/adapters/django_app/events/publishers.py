"""
Publishers de eventos de domínio.

- LoggingEventPublisher: desenvolvimento; loga e chama handlers locais
- CeleryEventPublisher: produção; entrega a `dispatch_domain_event`
- InMemoryEventPublisher: testes
"""

from typing import Callable, Dict, List
import json
import logging

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class _HandlerRegistry:
    """Handlers síncronos por tipo de evento; erro em um não afeta os outros."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def _dispatch_to_handlers(self, event: DomainEvent) -> None:
        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Erro em handler para {event.event_type}: {e}")


class LoggingEventPublisher(_HandlerRegistry, EventPublisher):
    def __init__(self, log_level: int = logging.INFO):
        super().__init__()
        self._log_level = log_level

    def publish(self, event: DomainEvent) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event.event_type} | aggregate={event.aggregate_id} | "
            f"data={json.dumps(event.payload, default=str)}"
        )
        self._dispatch_to_handlers(event)


class CeleryEventPublisher(EventPublisher):
    """
    Envia o evento serializado para a fila `events`.

    Broker indisponível não derruba a requisição: o commit já aconteceu,
    então o erro é apenas logado.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event: DomainEvent) -> None:
        # handlers -> container -> publishers: import tardio evita o ciclo
        from src.adapters.django_app.events.handlers import dispatch_domain_event

        if self._also_log:
            logger.info(f"[EVENT->CELERY] {event.event_type} | aggregate={event.aggregate_id}")
        try:
            dispatch_domain_event.delay(event.event_type, event.to_dict())
        except Exception as e:
            logger.error(f"Falha ao publicar evento no Celery: {e}", exc_info=True)


class InMemoryEventPublisher(_HandlerRegistry, EventPublisher):
    def __init__(self):
        super().__init__()
        self._published_events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self._published_events.append(event)
        self._dispatch_to_handlers(event)

    @property
    def published_events(self) -> List[DomainEvent]:
        return list(self._published_events)

    def get_events_by_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self._published_events if e.event_type == event_type]

    def clear(self) -> None:
        self._published_events.clear()


def get_event_publisher(use_celery: bool = False) -> EventPublisher:
    return CeleryEventPublisher() if use_celery else LoggingEventPublisher()
