"""
Entidades do Domínio de Calendário.

Entidades:
- IntegracaoCalendario: conexão de um usuário com Google/Outlook
- SyncJob: tarefa de sincronização na fila em memória
- ResultadoSincronizacao: resultado de uma sincronização
- EventoExterno: evento lido do provedor

Regras:
- Sincronização automática respeita a frequência configurada
  (hourly 1h, daily 24h, weekly 7d; manual nunca automática)
- Integração inativa ou com sincronização desabilitada não sincroniza
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from src.core.shared.clock import agora
from src.core.shared.exceptions import DomainException, ValidationError


class CalendarProviderError(DomainException):
    """Falha de comunicação ou resposta inválida do provedor."""

    def __init__(self, message: str, provider: str = None, status_code: int = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message, "CALENDAR_PROVIDER_ERROR")


class Provedor(Enum):
    GOOGLE = "GOOGLE"
    OUTLOOK = "OUTLOOK"

    @classmethod
    def from_string(cls, value: str) -> "Provedor":
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError(f"Provedor inválido: {value}", field="provider")


class StatusSincronizacao(Enum):
    PENDING = "PENDING"
    SYNCED = "SYNCED"
    FAILED = "FAILED"


class FrequenciaSincronizacao(Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MANUAL = "manual"

    @property
    def intervalo(self) -> Optional[timedelta]:
        return {
            FrequenciaSincronizacao.HOURLY: timedelta(hours=1),
            FrequenciaSincronizacao.DAILY: timedelta(hours=24),
            FrequenciaSincronizacao.WEEKLY: timedelta(days=7),
        }.get(self)

    @classmethod
    def from_string(cls, value: str) -> "FrequenciaSincronizacao":
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(
                f"Frequência de sincronização inválida: {value}",
                field="sync_frequency",
            )


@dataclass
class ResultadoSincronizacao:
    success: bool = True
    imported: int = 0
    exported: int = 0
    updated: int = 0
    conflicts: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def eventos_processados(self) -> int:
        return self.imported + self.exported + self.updated

    @property
    def mensagem_erro(self) -> str:
        return "; ".join(self.errors) if self.errors else "Unknown error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "imported": self.imported,
            "exported": self.exported,
            "updated": self.updated,
            "conflicts": self.conflicts,
            "errors": self.errors,
        }


@dataclass
class IntegracaoCalendario:
    """
    Integração de calendário de um usuário.

    Attributes:
        calendario_id: ID do calendário no provedor ("primary" no Google)
        ultima_sincronizacao: Início da última sincronização
        status_sincronizacao: Resultado da última sincronização
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    usuario_id: str = ""
    provedor: Provedor = Provedor.GOOGLE
    calendario_id: str = "primary"
    access_token: str = ""
    refresh_token: Optional[str] = None
    ativa: bool = True
    sincronizacao_habilitada: bool = True
    frequencia: FrequenciaSincronizacao = FrequenciaSincronizacao.DAILY
    ultima_sincronizacao: Optional[datetime] = None
    status_sincronizacao: Optional[StatusSincronizacao] = None
    erro_sincronizacao: Optional[str] = None
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    @classmethod
    def criar(
        cls,
        usuario_id: str,
        provedor: str,
        access_token: str,
        calendario_id: str = "primary",
        refresh_token: Optional[str] = None,
        frequencia: str = "daily",
        sincronizacao_habilitada: bool = True,
    ) -> "IntegracaoCalendario":
        if not access_token:
            raise ValidationError("Token de acesso é obrigatório", field="access_token")
        return cls(
            usuario_id=str(usuario_id),
            provedor=Provedor.from_string(provedor),
            calendario_id=calendario_id or "primary",
            access_token=access_token,
            refresh_token=refresh_token,
            frequencia=FrequenciaSincronizacao.from_string(frequencia),
            sincronizacao_habilitada=sincronizacao_habilitada,
        )

    def precisa_sincronizar(self, referencia: Optional[datetime] = None) -> bool:
        """Integração elegível para sincronização automática."""
        if not self.ativa or not self.sincronizacao_habilitada:
            return False
        intervalo = self.frequencia.intervalo
        if intervalo is None:
            return False
        if self.ultima_sincronizacao is None:
            return True
        referencia = referencia or agora()
        return referencia - self.ultima_sincronizacao >= intervalo

    def marcar_sincronizando(self, quando: Optional[datetime] = None) -> None:
        self.status_sincronizacao = StatusSincronizacao.PENDING
        self.ultima_sincronizacao = quando or agora()
        self.atualizado_em = agora()

    def registrar_resultado(self, resultado: ResultadoSincronizacao) -> None:
        if resultado.success:
            self.status_sincronizacao = StatusSincronizacao.SYNCED
            self.erro_sincronizacao = None
        else:
            self.status_sincronizacao = StatusSincronizacao.FAILED
            self.erro_sincronizacao = resultado.mensagem_erro
        self.atualizado_em = agora()

    def renovar_tokens(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        """Guarda o access token renovado; mantém o refresh token se não veio outro."""
        self.access_token = access_token
        if refresh_token:
            self.refresh_token = refresh_token
        self.atualizado_em = agora()

    def registrar_falha(self, erro: str) -> None:
        self.status_sincronizacao = StatusSincronizacao.FAILED
        self.erro_sincronizacao = erro
        self.atualizado_em = agora()

    def atualizar(self, **campos) -> None:
        for nome, valor in campos.items():
            if valor is None:
                continue
            if nome == "frequencia":
                valor = FrequenciaSincronizacao.from_string(valor)
            setattr(self, nome, valor)
        self.atualizado_em = agora()

    def to_dict(self) -> Dict[str, Any]:
        """Representação pública (sem tokens)."""
        return {
            "id": self.id,
            "user_id": self.usuario_id,
            "provider": self.provedor.value,
            "calendar_id": self.calendario_id,
            "is_active": self.ativa,
            "sync_enabled": self.sincronizacao_habilitada,
            "sync_frequency": self.frequencia.value,
            "last_sync_at": self.ultima_sincronizacao.isoformat() if self.ultima_sincronizacao else None,
            "sync_status": self.status_sincronizacao.value if self.status_sincronizacao else None,
            "sync_error": self.erro_sincronizacao,
        }


@dataclass
class SyncJob:
    """Tarefa na fila de sincronização."""

    id: str
    usuario_id: str
    integracao_id: str
    provedor: Provedor
    agendado_para: datetime
    tentativas: int = 0

    @classmethod
    def para(cls, integracao: IntegracaoCalendario, origem: str, quando: datetime) -> "SyncJob":
        """Cria job `auto-<id>-<ts>` ou `manual-<id>-<ts>`."""
        return cls(
            id=f"{origem}-{integracao.id}-{int(quando.timestamp() * 1000)}",
            usuario_id=integracao.usuario_id,
            integracao_id=integracao.id,
            provedor=integracao.provedor,
            agendado_para=quando,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.usuario_id,
            "integration_id": self.integracao_id,
            "provider": self.provedor.value,
            "scheduled_at": self.agendado_para.isoformat(),
            "retry_count": self.tentativas,
        }


@dataclass
class EventoExterno:
    """Evento lido de um calendário externo."""

    id_externo: str
    titulo: str = ""
    descricao: str = ""
    inicio: Optional[datetime] = None
    fim: Optional[datetime] = None
    dia_inteiro: bool = False
    local: str = ""
    status: str = "confirmed"
    atualizado_em: Optional[datetime] = None
