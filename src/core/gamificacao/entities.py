"""
Entidades do Domínio de Gamificação.

Entidades:
- PontosUsuario: saldo e nível do usuário
- TransacaoPontos: lançamento no extrato de pontos
- ConquistaUsuario: marco desbloqueado (uma vez por usuário)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
import uuid

from src.core.shared.clock import agora
from src.core.shared.exceptions import ValidationError

from .pontuacao import calcular_nivel


class TipoTransacao(Enum):
    EARNED = "EARNED"
    BONUS = "BONUS"
    SPENT = "SPENT"


class CategoriaConquista(Enum):
    POINTS_MILESTONE = "POINTS_MILESTONE"
    LEVEL_MILESTONE = "LEVEL_MILESTONE"


@dataclass
class PontosUsuario:
    """
    Saldo de pontos de um usuário.

    O nível é sempre derivado do total (ver `calcular_nivel`).
    """

    usuario_id: str
    total_pontos: int = 0
    nivel: int = 1
    progresso: int = 0
    pontos_proximo_nivel: int = 100
    atualizado_em: datetime = field(default_factory=agora)

    def adicionar(self, pontos: int) -> bool:
        """
        Soma pontos e recalcula nível.

        Returns:
            True se o usuário subiu de nível
        """
        if pontos <= 0:
            raise ValidationError("Pontos devem ser um número positivo", field="points")
        nivel_anterior = self.nivel
        self.total_pontos += int(pontos)
        self._recalcular_nivel()
        return self.nivel > nivel_anterior

    def _recalcular_nivel(self) -> None:
        self.nivel, self.progresso, self.pontos_proximo_nivel = calcular_nivel(self.total_pontos)
        self.atualizado_em = agora()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.usuario_id,
            "total_points": self.total_pontos,
            "current_level": self.nivel,
            "level_progress": self.progresso,
            "points_to_next_level": self.pontos_proximo_nivel,
        }


@dataclass
class TransacaoPontos:
    usuario_id: str
    tipo: TipoTransacao
    pontos: int
    motivo: str
    descricao: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    criado_em: datetime = field(default_factory=agora)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.tipo.value,
            "points": self.pontos,
            "reason": self.motivo,
            "description": self.descricao,
            "metadata": self.metadata,
            "created_at": self.criado_em.isoformat(),
        }


@dataclass
class ConquistaUsuario:
    usuario_id: str
    codigo: str
    nome: str
    categoria: CategoriaConquista
    raridade: str
    bonus: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    desbloqueada_em: datetime = field(default_factory=agora)

    @staticmethod
    def codigo_para(categoria: CategoriaConquista, limite: int) -> str:
        prefixo = "points" if categoria == CategoriaConquista.POINTS_MILESTONE else "level"
        return f"{prefixo}_{limite}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "code": self.codigo,
            "name": self.nome,
            "category": self.categoria.value,
            "rarity": self.raridade,
            "bonus_points": self.bonus,
            "unlocked_at": self.desbloqueada_em.isoformat(),
        }


def validar_concessao(pontos: Any, motivo: Optional[str]) -> int:
    try:
        pontos = int(pontos)
    except (TypeError, ValueError):
        raise ValidationError("Pontos devem ser um número positivo", field="points")
    if pontos <= 0:
        raise ValidationError("Pontos devem ser um número positivo", field="points")
    if not motivo or not str(motivo).strip():
        raise ValidationError("Motivo é obrigatório", field="reason")
    return pontos
