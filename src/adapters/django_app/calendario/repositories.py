"""
Repositórios Django do domínio de Calendário.
"""

from typing import List, Optional
import logging

from django.utils import timezone

from src.core.calendario.entities import EventoExterno, IntegracaoCalendario

from .mappers import EventoExternoMapper, IntegracaoMapper
from .models import ExternalCalendarEvent, IntegracaoCalendarioModel

logger = logging.getLogger(__name__)


class DjangoIntegracaoRepository:
    def save(self, integracao: IntegracaoCalendario) -> None:
        IntegracaoCalendarioModel.objects.update_or_create(
            id=integracao.id,
            defaults=IntegracaoMapper.to_defaults(integracao),
        )
        logger.debug(f"Integração saved: {integracao.id}")

    def get_by_id(self, integracao_id: str) -> Optional[IntegracaoCalendario]:
        model = IntegracaoCalendarioModel.objects.filter(id=integracao_id).first()
        return IntegracaoMapper.to_entity(model) if model else None

    def delete(self, integracao_id: str) -> None:
        IntegracaoCalendarioModel.objects.filter(id=integracao_id).delete()

    def list_by_usuario(self, usuario_id: str) -> List[IntegracaoCalendario]:
        return [
            IntegracaoMapper.to_entity(m)
            for m in IntegracaoCalendarioModel.objects.filter(usuario_id=usuario_id)
        ]

    def list_sincronizaveis(self) -> List[IntegracaoCalendario]:
        queryset = IntegracaoCalendarioModel.objects.filter(
            ativa=True,
            sincronizacao_habilitada=True,
        ).exclude(frequencia='manual')
        return [IntegracaoMapper.to_entity(m) for m in queryset]


class DjangoEventoExternoRepository:
    def upsert(self, integracao_id: str, evento: EventoExterno) -> bool:
        defaults = EventoExternoMapper.to_defaults(evento)
        defaults['synced_at'] = timezone.now()
        _, created = ExternalCalendarEvent.objects.update_or_create(
            integration_id=integracao_id,
            external_id=evento.id_externo,
            defaults=defaults,
        )
        return created
