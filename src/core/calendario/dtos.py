"""
DTOs do Domínio de Calendário.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CriarIntegracaoInputDTO:
    usuario_id: str
    provedor: str
    access_token: str
    calendario_id: str = "primary"
    refresh_token: Optional[str] = None
    frequencia: str = "daily"
    sincronizacao_habilitada: bool = True


@dataclass
class AtualizarIntegracaoInputDTO:
    usuario_id: str
    integracao_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    calendario_id: Optional[str] = None
    frequencia: Optional[str] = None
    sincronizacao_habilitada: Optional[bool] = None
    ativa: Optional[bool] = None
