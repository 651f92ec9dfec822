"""
Domain Events do Domínio de Atendimentos.

Eventos:
- ProcessoCriadoEvent: Novo processo terapêutico em análise
- TratamentoIniciadoEvent: Sessões e pedido gerados
- ProcessoStatusAlteradoEvent: Processo aprovado/cancelado/finalizado
- SessaoAvulsaCriadaEvent: Sessão avulsa registrada com cobrança
- PagamentoRegistradoEvent: Baixa (total ou parcial) em parcela
- PedidoQuitadoEvent: Todas as parcelas ativas do pedido pagas

Valores monetários trafegam como string para serialização JSON.
"""

from dataclasses import dataclass

from src.core.shared.events import DomainEvent


@dataclass
class ProcessoCriadoEvent(DomainEvent):
    paciente_id: str = ""
    criado_por_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "ProcessoTerapeutico"


@dataclass
class TratamentoIniciadoEvent(DomainEvent):
    """
    Evento: Tratamento iniciado.

    Attributes:
        pedido_id: Pedido gerado
        valor_total: Total do orçamento (string)
        quantidade_sessoes: Sessões geradas
    """

    paciente_id: str = ""
    pedido_id: str = ""
    valor_total: str = "0.00"
    quantidade_parcelas: int = 1
    quantidade_sessoes: int = 0

    @property
    def aggregate_type(self) -> str:
        return "ProcessoTerapeutico"


@dataclass
class ProcessoStatusAlteradoEvent(DomainEvent):
    status_anterior: str = ""
    novo_status: str = ""

    @property
    def aggregate_type(self) -> str:
        return "ProcessoTerapeutico"


@dataclass
class SessaoAvulsaCriadaEvent(DomainEvent):
    paciente_id: str = ""
    terapia_id: str = ""
    pedido_id: str = ""
    valor_cobrado: str = "0.00"

    @property
    def aggregate_type(self) -> str:
        return "SessaoAvulsa"


@dataclass
class PagamentoRegistradoEvent(DomainEvent):
    """Evento: Baixa registrada em uma parcela (aggregate = pedido)."""

    parcela_id: str = ""
    paciente_id: str = ""
    valor: str = "0.00"
    status_pedido: str = ""

    @property
    def aggregate_type(self) -> str:
        return "PedidoTerapeutico"


@dataclass
class PedidoQuitadoEvent(DomainEvent):
    """
    Evento: Pedido quitado.

    Handlers típicos:
    - Conceder pontos de gamificação ao paciente
    """

    paciente_id: str = ""
    valor_total: str = "0.00"
    processo_id: str = ""
    sessao_avulsa_id: str = ""

    @property
    def aggregate_type(self) -> str:
        return "PedidoTerapeutico"
