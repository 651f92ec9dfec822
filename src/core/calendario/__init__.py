"""
Domínio de Calendário.

Integrações com Google Calendar e Outlook e fila de sincronização.
"""

from .entities import (
    CalendarProviderError,
    EventoExterno,
    FrequenciaSincronizacao,
    IntegracaoCalendario,
    Provedor,
    ResultadoSincronizacao,
    StatusSincronizacao,
    SyncJob,
)
from .sync_service import CalendarSyncService, CalendarSynchronizer

__all__ = [
    "CalendarProviderError",
    "EventoExterno",
    "FrequenciaSincronizacao",
    "IntegracaoCalendario",
    "Provedor",
    "ResultadoSincronizacao",
    "StatusSincronizacao",
    "SyncJob",
    "CalendarSyncService",
    "CalendarSynchronizer",
]
