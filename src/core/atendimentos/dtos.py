"""
Data Transfer Objects (DTOs) do Domínio de Atendimentos.

Tipos de DTOs:
- Input DTOs: dados já validados pelos forms da API
- Output DTOs: formatação para resposta JSON
- Query DTOs: filtros de listagem

Convenções de saída:
- Valores monetários como string com duas casas ("150.00")
- Datas em ISO 8601
- Enums pelo valor ("IN_ANALYSIS")
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .entities import (
    ItemOrcamento,
    Parcela,
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    SessaoTerapeutica,
    Terapia,
)


class _NaoInformado:
    """Marca campo ausente em atualizações parciais (PATCH)."""

    def __repr__(self) -> str:
        return "NAO_INFORMADO"

    def __bool__(self) -> bool:
        return False


NAO_INFORMADO: Any = _NaoInformado()


def money(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    return format(value, "f")


def iso(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def _enum(value) -> Optional[str]:
    return value.value if value is not None else None


# =============================================================================
# INPUT DTOs
# =============================================================================

@dataclass(frozen=True)
class CriarTerapiaInputDTO:
    nome: str
    valor: Decimal
    descricao: str = ""
    valor_por_sessao: bool = False
    sessoes_padrao: int = 1
    valor_sessao_avulsa: Optional[Decimal] = None


@dataclass(frozen=True)
class AtualizarTerapiaInputDTO:
    """Campos None são mantidos."""

    terapia_id: str
    nome: Optional[str] = None
    descricao: Optional[str] = None
    valor: Optional[Decimal] = None
    valor_por_sessao: Optional[bool] = None
    sessoes_padrao: Optional[int] = None
    valor_sessao_avulsa: Optional[Decimal] = None
    ativa: Optional[bool] = None


@dataclass(frozen=True)
class CriarProcessoInputDTO:
    paciente_id: str
    criado_por_id: Optional[str] = None
    observacoes: str = ""


@dataclass(frozen=True)
class AdicionarItemOrcamentoInputDTO:
    processo_id: str
    terapia_id: str
    quantidade: int = 1
    desconto: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class AtualizarProcessoInputDTO:
    """
    DTO de entrada para PATCH de processo.

    Os campos de pagamento só são usados quando `status` é
    IN_TREATMENT (início do tratamento).
    """

    processo_id: str
    status: Optional[str] = None
    observacoes: Optional[str] = None
    forma_pagamento: Optional[str] = None
    modo_vencimento: Optional[str] = None
    quantidade_parcelas: Optional[int] = None
    primeiro_vencimento: Optional[date] = None
    vencimentos_manuais: tuple = field(default_factory=tuple)
    alterado_por_id: Optional[str] = None


@dataclass(frozen=True)
class AtualizarSessaoProcessoInputDTO:
    processo_id: str
    sessao_id: str
    status: Any = NAO_INFORMADO
    modo: Any = NAO_INFORMADO
    terapeuta_id: Any = NAO_INFORMADO
    data_sessao: Any = NAO_INFORMADO
    comentarios: Any = NAO_INFORMADO


@dataclass(frozen=True)
class CriarSessaoAvulsaInputDTO:
    """
    DTO de entrada para criar sessão avulsa com cobrança.

    Attributes:
        valor_cobrado: Se None, usa o valor avulso da terapia
        vencimentos_manuais: Datas (modo MANUAL), uma por parcela
    """

    paciente_id: str
    terapia_id: str
    forma_pagamento: str
    modo_vencimento: str
    quantidade_parcelas: int
    terapeuta_id: Optional[str] = None
    data_sessao: Optional[datetime] = None
    modo: Optional[str] = None
    status: str = "COMPLETED"
    comentarios: Optional[str] = None
    dados_sessao: Optional[str] = None
    valor_cobrado: Optional[Decimal] = None
    primeiro_vencimento: Optional[date] = None
    vencimentos_manuais: tuple = field(default_factory=tuple)
    criado_por_id: Optional[str] = None


@dataclass(frozen=True)
class AtualizarSessaoAvulsaInputDTO:
    sessao_id: str
    terapeuta_id: Any = NAO_INFORMADO
    data_sessao: Any = NAO_INFORMADO
    modo: Any = NAO_INFORMADO
    status: Any = NAO_INFORMADO
    comentarios: Any = NAO_INFORMADO
    dados_sessao: Any = NAO_INFORMADO
    valor_cobrado: Any = NAO_INFORMADO


@dataclass(frozen=True)
class RegistrarPagamentoInputDTO:
    parcela_id: str
    valor: Optional[Decimal] = None
    forma_pagamento: Optional[str] = None
    pago_em: Optional[datetime] = None
    registrado_por_id: Optional[str] = None


@dataclass(frozen=True)
class ListarParcelasQueryDTO:
    """Filtros da listagem financeira."""

    status: Optional[str] = None
    somente_vencidas: bool = False
    vencimento_de: Optional[date] = None
    vencimento_ate: Optional[date] = None
    paciente_id: Optional[str] = None


# =============================================================================
# OUTPUT DTOs
# =============================================================================

@dataclass
class TerapiaOutputDTO:
    id: str
    nome: str
    descricao: str
    valor: Decimal
    valor_por_sessao: bool
    sessoes_padrao: int
    valor_sessao_avulsa: Optional[Decimal]
    ativa: bool

    @classmethod
    def from_entity(cls, terapia: Terapia) -> "TerapiaOutputDTO":
        return cls(
            id=terapia.id,
            nome=terapia.nome,
            descricao=terapia.descricao,
            valor=terapia.valor,
            valor_por_sessao=terapia.valor_por_sessao,
            sessoes_padrao=terapia.sessoes_padrao,
            valor_sessao_avulsa=terapia.valor_sessao_avulsa,
            ativa=terapia.ativa,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.nome,
            "description": self.descricao,
            "value": money(self.valor),
            "value_per_session": self.valor_por_sessao,
            "default_sessions": self.sessoes_padrao,
            "single_session_value": money(self.valor_sessao_avulsa),
            "active": self.ativa,
        }


@dataclass
class ParcelaOutputDTO:
    id: str
    numero: int
    valor: Decimal
    valor_pago: Decimal
    vencimento: Optional[date]
    status: str
    pago_em: Optional[datetime]
    forma_pagamento: Optional[str]
    vencida: bool

    @classmethod
    def from_entity(cls, parcela: Parcela, referencia: Optional[date] = None) -> "ParcelaOutputDTO":
        return cls(
            id=parcela.id,
            numero=parcela.numero,
            valor=parcela.valor,
            valor_pago=parcela.valor_pago,
            vencimento=parcela.vencimento,
            status=parcela.status.value,
            pago_em=parcela.pago_em,
            forma_pagamento=_enum(parcela.forma_pagamento),
            vencida=parcela.esta_vencida(referencia),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.numero,
            "amount": money(self.valor),
            "paid_amount": money(self.valor_pago),
            "due_date": iso(self.vencimento),
            "status": self.status,
            "paid_at": iso(self.pago_em),
            "payment_method": self.forma_pagamento,
            "overdue": self.vencida,
        }


@dataclass
class PedidoOutputDTO:
    id: str
    status: str
    forma_pagamento: str
    modo_vencimento: str
    quantidade_parcelas: int
    primeiro_vencimento: Optional[date]
    valor_total: Decimal
    parcelas: List[ParcelaOutputDTO]

    @classmethod
    def from_entity(cls, pedido: PedidoTerapeutico) -> "PedidoOutputDTO":
        return cls(
            id=pedido.id,
            status=pedido.status.value,
            forma_pagamento=pedido.forma_pagamento.value,
            modo_vencimento=pedido.modo_vencimento.value,
            quantidade_parcelas=pedido.quantidade_parcelas,
            primeiro_vencimento=pedido.primeiro_vencimento,
            valor_total=pedido.valor_total,
            parcelas=[
                ParcelaOutputDTO.from_entity(p)
                for p in sorted(pedido.parcelas, key=lambda p: p.numero)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "payment_method": self.forma_pagamento,
            "due_date_mode": self.modo_vencimento,
            "installments_count": self.quantidade_parcelas,
            "first_due_date": iso(self.primeiro_vencimento),
            "total_amount": money(self.valor_total),
            "installments": [p.to_dict() for p in self.parcelas],
        }


def _item_dict(item: ItemOrcamento) -> Dict[str, Any]:
    return {
        "id": item.id,
        "therapy_id": item.terapia_id,
        "therapy_name": item.terapia_nome,
        "unit_value": money(item.valor_unitario),
        "quantity": item.quantidade,
        "sessions_per_unit": item.sessoes_por_unidade,
        "discount": money(item.desconto),
        "gross_total": money(item.total_bruto),
        "net_total": money(item.total_liquido),
        "sort_order": item.ordem,
    }


def _sessao_dict(sessao: SessaoTerapeutica) -> Dict[str, Any]:
    return {
        "id": sessao.id,
        "budget_item_id": sessao.item_orcamento_id,
        "therapy_id": sessao.terapia_id,
        "session_number": sessao.numero_sessao,
        "order_index": sessao.indice_ordem,
        "status": sessao.status.value,
        "mode": _enum(sessao.modo),
        "therapist_user_id": sessao.terapeuta_id,
        "session_date": iso(sessao.data_sessao),
        "comments": sessao.comentarios,
        "completed_at": iso(sessao.concluida_em),
    }


def _resumo_dict(resumo: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "gross_total": money(resumo["gross_total"]),
        "discount_total": money(resumo["discount_total"]),
        "budget_total": money(resumo["budget_total"]),
        "installment_simulation": [
            {
                "installments": s["installments"],
                "installment_value": money(s["installment_value"]),
                "amounts": [money(a) for a in s["amounts"]],
            }
            for s in resumo["installment_simulation"]
        ],
        "sessions_count": resumo["sessions_count"],
        "completed_sessions": resumo["completed_sessions"],
        "open_installments": resumo["open_installments"],
        "paid_installments": resumo["paid_installments"],
        "open_amount": money(resumo["open_amount"]),
        "paid_amount": money(resumo["paid_amount"]),
    }


@dataclass
class ProcessoOutputDTO:
    """DTO de saída completo do processo (itens, sessões, pedido e resumo)."""

    id: str
    paciente_id: str
    criado_por_id: Optional[str]
    status: str
    observacoes: str
    itens: List[Dict[str, Any]]
    sessoes: List[Dict[str, Any]]
    pedido: Optional[PedidoOutputDTO]
    resumo: Dict[str, Any]
    iniciado_em: Optional[datetime]
    finalizado_em: Optional[datetime]
    criado_em: datetime
    atualizado_em: datetime

    @classmethod
    def from_entity(cls, processo: ProcessoTerapeutico) -> "ProcessoOutputDTO":
        return cls(
            id=processo.id,
            paciente_id=processo.paciente_id,
            criado_por_id=processo.criado_por_id,
            status=processo.status.value,
            observacoes=processo.observacoes,
            itens=[_item_dict(i) for i in sorted(processo.itens, key=lambda i: i.ordem)],
            sessoes=[
                _sessao_dict(s)
                for s in sorted(processo.sessoes, key=lambda s: s.indice_ordem)
            ],
            pedido=PedidoOutputDTO.from_entity(processo.pedido) if processo.pedido else None,
            resumo=processo.resumo(),
            iniciado_em=processo.iniciado_em,
            finalizado_em=processo.finalizado_em,
            criado_em=processo.criado_em,
            atualizado_em=processo.atualizado_em,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patient_user_id": self.paciente_id,
            "created_by_id": self.criado_por_id,
            "status": self.status,
            "notes": self.observacoes,
            "budget_items": self.itens,
            "sessions": self.sessoes,
            "order": self.pedido.to_dict() if self.pedido else None,
            "summary": _resumo_dict(self.resumo),
            "started_at": iso(self.iniciado_em),
            "finished_at": iso(self.finalizado_em),
            "created_at": iso(self.criado_em),
            "updated_at": iso(self.atualizado_em),
        }


@dataclass
class ProcessoListItemDTO:
    """DTO simplificado para listagens de processos."""

    id: str
    paciente_id: str
    status: str
    total_orcamento: Decimal
    quantidade_sessoes: int
    status_pedido: Optional[str]
    criado_em: datetime

    @classmethod
    def from_entity(cls, processo: ProcessoTerapeutico) -> "ProcessoListItemDTO":
        return cls(
            id=processo.id,
            paciente_id=processo.paciente_id,
            status=processo.status.value,
            total_orcamento=processo.total_orcamento,
            quantidade_sessoes=len(processo.sessoes),
            status_pedido=processo.pedido.status.value if processo.pedido else None,
            criado_em=processo.criado_em,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patient_user_id": self.paciente_id,
            "status": self.status,
            "budget_total": money(self.total_orcamento),
            "sessions_count": self.quantidade_sessoes,
            "order_status": self.status_pedido,
            "created_at": iso(self.criado_em),
        }


@dataclass
class SessaoAvulsaOutputDTO:
    id: str
    paciente_id: str
    terapia_id: str
    terapia_nome: str
    terapia_valor: Decimal
    terapeuta_id: Optional[str]
    data_sessao: datetime
    modo: Optional[str]
    status: str
    comentarios: Optional[str]
    dados_sessao: Optional[str]
    valor_cobrado: Decimal
    pedido: Optional[PedidoOutputDTO]
    criado_em: datetime
    atualizado_em: datetime

    @classmethod
    def from_entity(cls, sessao: SessaoAvulsa) -> "SessaoAvulsaOutputDTO":
        return cls(
            id=sessao.id,
            paciente_id=sessao.paciente_id,
            terapia_id=sessao.terapia_id,
            terapia_nome=sessao.terapia_nome,
            terapia_valor=sessao.terapia_valor,
            terapeuta_id=sessao.terapeuta_id,
            data_sessao=sessao.data_sessao,
            modo=_enum(sessao.modo),
            status=sessao.status.value,
            comentarios=sessao.comentarios,
            dados_sessao=sessao.dados_sessao,
            valor_cobrado=sessao.valor_cobrado,
            pedido=PedidoOutputDTO.from_entity(sessao.pedido) if sessao.pedido else None,
            criado_em=sessao.criado_em,
            atualizado_em=sessao.atualizado_em,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "patient_user_id": self.paciente_id,
            "therapy_id": self.terapia_id,
            "therapy_name_snapshot": self.terapia_nome,
            "therapy_value_snapshot": money(self.terapia_valor),
            "therapist_user_id": self.terapeuta_id,
            "session_date": iso(self.data_sessao),
            "mode": self.modo,
            "status": self.status,
            "comments": self.comentarios,
            "session_data": self.dados_sessao,
            "charged_amount": money(self.valor_cobrado),
            "order": self.pedido.to_dict() if self.pedido else None,
            "created_at": iso(self.criado_em),
            "updated_at": iso(self.atualizado_em),
        }


@dataclass
class ParcelaFinanceiroDTO:
    """Parcela com o contexto do pedido, para a tela financeira."""

    parcela: ParcelaOutputDTO
    pedido_id: str
    paciente_id: str
    status_pedido: str
    origem: str
    processo_id: Optional[str]
    sessao_avulsa_id: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        data = self.parcela.to_dict()
        data.update({
            "order_id": self.pedido_id,
            "patient_user_id": self.paciente_id,
            "order_status": self.status_pedido,
            "origin": self.origem,
            "process_id": self.processo_id,
            "single_session_id": self.sessao_avulsa_id,
        })
        return data


@dataclass
class FinanceiroOutputDTO:
    parcelas: List[ParcelaFinanceiroDTO]
    total_em_aberto: Decimal
    total_pago: Decimal
    total_vencido: Decimal
    quantidade_vencidas: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "installments": [p.to_dict() for p in self.parcelas],
            "totals": {
                "open_amount": money(self.total_em_aberto),
                "paid_amount": money(self.total_pago),
                "overdue_amount": money(self.total_vencido),
                "overdue_count": self.quantidade_vencidas,
            },
        }
