"""
Mappers entre Entities de Calendário e Models Django.
"""

from typing import Any, Dict

from src.core.calendario.entities import (
    EventoExterno,
    FrequenciaSincronizacao,
    IntegracaoCalendario,
    Provedor,
    StatusSincronizacao,
)

from .models import IntegracaoCalendarioModel


class IntegracaoMapper:
    @staticmethod
    def to_entity(model: IntegracaoCalendarioModel) -> IntegracaoCalendario:
        return IntegracaoCalendario(
            id=model.id,
            usuario_id=model.usuario_id,
            provedor=Provedor(model.provedor),
            calendario_id=model.calendario_id,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            ativa=model.ativa,
            sincronizacao_habilitada=model.sincronizacao_habilitada,
            frequencia=FrequenciaSincronizacao(model.frequencia),
            ultima_sincronizacao=model.ultima_sincronizacao,
            status_sincronizacao=(
                StatusSincronizacao(model.status_sincronizacao)
                if model.status_sincronizacao else None
            ),
            erro_sincronizacao=model.erro_sincronizacao,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: IntegracaoCalendario) -> Dict[str, Any]:
        return {
            'usuario_id': entity.usuario_id,
            'provedor': entity.provedor.value,
            'calendario_id': entity.calendario_id,
            'access_token': entity.access_token,
            'refresh_token': entity.refresh_token,
            'ativa': entity.ativa,
            'sincronizacao_habilitada': entity.sincronizacao_habilitada,
            'frequencia': entity.frequencia.value,
            'ultima_sincronizacao': entity.ultima_sincronizacao,
            'status_sincronizacao': (
                entity.status_sincronizacao.value if entity.status_sincronizacao else None
            ),
            'erro_sincronizacao': entity.erro_sincronizacao,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }


class EventoExternoMapper:
    @staticmethod
    def to_defaults(evento: EventoExterno) -> Dict[str, Any]:
        return {
            'title': (evento.titulo or '')[:500],
            'description': evento.descricao or '',
            'start_at': evento.inicio,
            'end_at': evento.fim,
            'all_day': evento.dia_inteiro,
            'location': (evento.local or '')[:500],
            'status': evento.status or 'confirmed',
            'updated_at': evento.atualizado_em,
        }
