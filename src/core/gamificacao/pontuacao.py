"""
Regras de pontuação da gamificação.

- Tabela de pontos por ação (PointSettings)
- Cálculo de nível a partir do total acumulado
- Marcos (milestones) de pontos e de nível com bônus
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple
import math

PONTOS_NIVEL_INICIAL = 100
FATOR_NIVEL = 1.5


def pontos_para_nivel(nivel: int) -> int:
    """Pontos necessários para sair de `nivel` para `nivel + 1`."""
    return math.floor(PONTOS_NIVEL_INICIAL * FATOR_NIVEL ** (nivel - 1))


def calcular_nivel(total_pontos: int) -> Tuple[int, int, int]:
    """
    Calcula nível a partir do total de pontos.

    Returns:
        (nivel, progresso no nível atual, pontos necessários para o próximo)

    Example:
        >>> calcular_nivel(0)
        (1, 0, 100)
        >>> calcular_nivel(250)
        (3, 0, 225)
    """
    nivel = 1
    necessario = PONTOS_NIVEL_INICIAL
    restante = max(int(total_pontos), 0)
    while restante >= necessario:
        restante -= necessario
        nivel += 1
        necessario = pontos_para_nivel(nivel)
    return nivel, restante, necessario


@dataclass(frozen=True)
class Marco:
    limite: int
    nome: str
    bonus: int
    raridade: str


def _raridade_pontos(limite: int) -> str:
    if limite >= 5000:
        return "LEGENDARY"
    if limite >= 2500:
        return "EPIC"
    if limite >= 1000:
        return "RARE"
    return "COMMON"


def _raridade_nivel(nivel: int) -> str:
    if nivel >= 50:
        return "LEGENDARY"
    if nivel >= 30:
        return "EPIC"
    if nivel >= 20:
        return "RARE"
    return "COMMON"


MARCOS_PONTOS_PADRAO: Dict[int, Tuple[str, int]] = {
    100: ("Primeiro Centenário", 5),
    500: ("Meio Milhar", 25),
    1000: ("Primeiro Milhar", 50),
    2500: ("Acumulador", 125),
    5000: ("Colecionador", 250),
    10000: ("Mestre dos Pontos", 500),
}

MARCOS_NIVEL_PADRAO: Dict[int, Tuple[str, int]] = {
    5: ("Iniciante Dedicado", 50),
    10: ("Estudante Aplicado", 100),
    20: ("Conhecedor", 200),
    30: ("Especialista", 300),
    50: ("Mestre", 500),
    100: ("Lenda", 1000),
}

ACOES_PADRAO: Dict[str, int] = {
    "ORDER_CREATED": 0,
    "ORDER_PAID": 30,
    "ORDER_COMPLETED": 80,
}


@dataclass
class PointSettings:
    """
    Configuração de pontos.

    Pode ser sobrescrita via `settings.GAMIFICATION_POINTS`:
        {"ORDER_PAID": 50, "POINTS_MILESTONES": {100: 10}}
    """

    acoes: Dict[str, int] = field(default_factory=lambda: dict(ACOES_PADRAO))
    marcos_pontos: Dict[int, Tuple[str, int]] = field(
        default_factory=lambda: dict(MARCOS_PONTOS_PADRAO)
    )
    marcos_nivel: Dict[int, Tuple[str, int]] = field(
        default_factory=lambda: dict(MARCOS_NIVEL_PADRAO)
    )

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping] = None) -> "PointSettings":
        config = cls()
        if not overrides:
            return config
        for chave, valor in overrides.items():
            if chave == "POINTS_MILESTONES":
                config.marcos_pontos = _mesclar_bonus(config.marcos_pontos, valor)
            elif chave == "LEVEL_MILESTONES":
                config.marcos_nivel = _mesclar_bonus(config.marcos_nivel, valor)
            else:
                config.acoes[chave] = int(valor)
        return config

    def pontos_da_acao(self, acao: str) -> int:
        return self.acoes.get(acao, 0)

    def marcos_de_pontos_atingidos(self, total_pontos: int) -> List[Marco]:
        return [
            Marco(limite, nome, bonus, _raridade_pontos(limite))
            for limite, (nome, bonus) in sorted(self.marcos_pontos.items())
            if total_pontos >= limite
        ]

    def marcos_de_nivel_atingidos(self, nivel: int) -> List[Marco]:
        return [
            Marco(limite, nome, bonus, _raridade_nivel(limite))
            for limite, (nome, bonus) in sorted(self.marcos_nivel.items())
            if nivel >= limite
        ]


def _mesclar_bonus(base: Dict[int, Tuple[str, int]], overrides: Mapping) -> Dict[int, Tuple[str, int]]:
    mesclado = dict(base)
    for limite, bonus in overrides.items():
        limite = int(limite)
        nome = mesclado[limite][0] if limite in mesclado else f"Marco {limite}"
        mesclado[limite] = (nome, int(bonus))
    return mesclado
