"""
Domínio de Gamificação.

Extrato de pontos, níveis e conquistas por marcos.
"""

from .entities import ConquistaUsuario, PontosUsuario, TipoTransacao, TransacaoPontos
from .pontuacao import PointSettings, calcular_nivel

__all__ = [
    "ConquistaUsuario",
    "PontosUsuario",
    "TipoTransacao",
    "TransacaoPontos",
    "PointSettings",
    "calcular_nivel",
]
