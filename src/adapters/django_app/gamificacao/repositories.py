"""
Repositórios Django do domínio de Gamificação.

Conversão Entity <-> Model inline: os agregados são planos.
"""

from typing import Any, List, Optional, Set

from django.db import transaction

from src.core.gamificacao.entities import (
    CategoriaConquista,
    ConquistaUsuario,
    PontosUsuario,
    TipoTransacao,
    TransacaoPontos,
)

from .models import ConquistaUsuarioModel, PontosUsuarioModel, TransacaoPontosModel


class DjangoPontosRepository:
    @staticmethod
    def _to_entity(model: PontosUsuarioModel) -> PontosUsuario:
        return PontosUsuario(
            usuario_id=model.usuario_id,
            total_pontos=model.total_pontos,
            nivel=model.nivel,
            progresso=model.progresso,
            pontos_proximo_nivel=model.pontos_proximo_nivel,
            atualizado_em=model.atualizado_em,
        )

    def get(self, usuario_id: str) -> Optional[PontosUsuario]:
        queryset = PontosUsuarioModel.objects.filter(usuario_id=usuario_id)
        if not transaction.get_autocommit():
            # Dentro do UnitOfWork: concessões do mesmo usuário serializam
            queryset = queryset.select_for_update()
        model = queryset.first()
        return self._to_entity(model) if model else None

    def save(self, pontos: PontosUsuario) -> None:
        PontosUsuarioModel.objects.update_or_create(
            usuario_id=pontos.usuario_id,
            defaults={
                'total_pontos': pontos.total_pontos,
                'nivel': pontos.nivel,
                'progresso': pontos.progresso,
                'pontos_proximo_nivel': pontos.pontos_proximo_nivel,
                'atualizado_em': pontos.atualizado_em,
            },
        )

    def ranking(self, limite: int = 10) -> List[PontosUsuario]:
        queryset = PontosUsuarioModel.objects.order_by('-total_pontos', 'atualizado_em')[:limite]
        return [self._to_entity(m) for m in queryset]


class DjangoTransacaoRepository:
    def add(self, transacao: TransacaoPontos) -> None:
        TransacaoPontosModel.objects.create(
            id=transacao.id,
            usuario_id=transacao.usuario_id,
            tipo=transacao.tipo.value,
            pontos=transacao.pontos,
            motivo=transacao.motivo,
            descricao=transacao.descricao,
            metadata=transacao.metadata,
            criado_em=transacao.criado_em,
        )

    def recentes(self, usuario_id: str, limite: int = 10) -> List[TransacaoPontos]:
        queryset = TransacaoPontosModel.objects.filter(usuario_id=usuario_id).order_by('-criado_em')
        return [
            TransacaoPontos(
                id=m.id,
                usuario_id=m.usuario_id,
                tipo=TipoTransacao(m.tipo),
                pontos=m.pontos,
                motivo=m.motivo,
                descricao=m.descricao,
                metadata=m.metadata or {},
                criado_em=m.criado_em,
            )
            for m in queryset[:limite]
        ]

    def existe(self, usuario_id: str, motivo: str, chave: str, valor: Any) -> bool:
        return TransacaoPontosModel.objects.filter(
            usuario_id=usuario_id,
            tipo=TipoTransacao.EARNED.value,
            motivo=motivo,
            **{f"metadata__{chave}": valor},
        ).exists()


class DjangoConquistaRepository:
    def add(self, conquista: ConquistaUsuario) -> None:
        ConquistaUsuarioModel.objects.create(
            id=conquista.id,
            usuario_id=conquista.usuario_id,
            codigo=conquista.codigo,
            nome=conquista.nome,
            categoria=conquista.categoria.value,
            raridade=conquista.raridade,
            bonus=conquista.bonus,
            desbloqueada_em=conquista.desbloqueada_em,
        )

    def codigos_do_usuario(self, usuario_id: str) -> Set[str]:
        return set(
            ConquistaUsuarioModel.objects.filter(usuario_id=usuario_id)
            .values_list('codigo', flat=True)
        )

    def list_by_usuario(self, usuario_id: str) -> List[ConquistaUsuario]:
        return [
            ConquistaUsuario(
                id=m.id,
                usuario_id=m.usuario_id,
                codigo=m.codigo,
                nome=m.nome,
                categoria=CategoriaConquista(m.categoria),
                raridade=m.raridade,
                bonus=m.bonus,
                desbloqueada_em=m.desbloqueada_em,
            )
            for m in ConquistaUsuarioModel.objects.filter(usuario_id=usuario_id)
        ]
