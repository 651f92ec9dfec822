"""
Entidades do Domínio de Atendimentos Terapêuticos.

Entidades:
- Terapia: catálogo de terapias com valores e sessões padrão
- ProcessoTerapeutico: agregado principal (orçamento -> tratamento)
- ItemOrcamento: linha do orçamento de um processo
- SessaoTerapeutica: sessão gerada ao iniciar o tratamento
- SessaoAvulsa: sessão avulsa cobrada individualmente
- PedidoTerapeutico: cobrança de um processo ou sessão avulsa
- Parcela: pagamento parcial programado de um pedido

Regras de Negócio Encapsuladas:
- Transições de status do processo controladas
- Orçamento só pode ser alterado em análise
- Soma das parcelas sempre igual ao total do pedido
- Valor pago de uma parcela nunca excede o valor da parcela
- Status do pedido derivado das parcelas ativas
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid

from src.core.shared.clock import agora, hoje
from src.core.shared.exceptions import (
    ValidationError,
    BusinessRuleViolationError,
    EntityNotFoundError,
)

from .financeiro import (
    MAX_PARCELAS,
    compute_order_status,
    round_currency,
    simulate_installments,
    split_installments,
)


def _novo_id() -> str:
    return str(uuid.uuid4())


class _ChoiceEnum(Enum):
    """Enum cujos valores são as strings trafegadas na API."""

    @classmethod
    def from_string(cls, value: str, field_name: str = None):
        """
        Converte string para enum.

        Raises:
            ValidationError: Se valor inválido
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError(
                f"Valor inválido para {field_name or cls.__name__}: {value}",
                field=field_name,
            )


class StatusProcesso(_ChoiceEnum):
    """
    Estados do processo terapêutico.

    Fluxo de Estados:
        IN_ANALYSIS → IN_TREATMENT → FINISHED
             ↓              ↓
        NOT_APPROVED     CANCELED
             ↓
          CANCELED
    """

    IN_ANALYSIS = "IN_ANALYSIS"
    IN_TREATMENT = "IN_TREATMENT"
    NOT_APPROVED = "NOT_APPROVED"
    CANCELED = "CANCELED"
    FINISHED = "FINISHED"


TRANSICOES_PROCESSO = {
    StatusProcesso.IN_ANALYSIS: {
        StatusProcesso.IN_TREATMENT,
        StatusProcesso.NOT_APPROVED,
        StatusProcesso.CANCELED,
    },
    StatusProcesso.IN_TREATMENT: {
        StatusProcesso.FINISHED,
        StatusProcesso.CANCELED,
    },
    StatusProcesso.NOT_APPROVED: set(),
    StatusProcesso.CANCELED: set(),
    StatusProcesso.FINISHED: set(),
}


class StatusSessao(_ChoiceEnum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class ModoSessao(_ChoiceEnum):
    IN_PERSON = "IN_PERSON"
    DISTANCE = "DISTANCE"
    ONLINE = "ONLINE"


class FormaPagamento(_ChoiceEnum):
    PIX = "PIX"
    CARD_MERCADO_PAGO = "CARD_MERCADO_PAGO"
    NUBANK = "NUBANK"


class ModoVencimento(_ChoiceEnum):
    AUTOMATIC_MONTHLY = "AUTOMATIC_MONTHLY"
    MANUAL = "MANUAL"


class StatusPedido(_ChoiceEnum):
    OPEN = "OPEN"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    CANCELED = "CANCELED"


class StatusParcela(_ChoiceEnum):
    OPEN = "OPEN"
    PAID = "PAID"
    CANCELED = "CANCELED"


# =============================================================================
# Terapia
# =============================================================================

@dataclass
class Terapia:
    """
    Terapia oferecida pela clínica.

    Attributes:
        valor: Valor do pacote padrão da terapia
        valor_por_sessao: Se True, `valor` é cobrado por sessão
        sessoes_padrao: Sessões geradas por unidade orçada
        valor_sessao_avulsa: Valor cobrado em sessões avulsas (opcional)
    """

    id: str = field(default_factory=_novo_id)
    nome: str = ""
    descricao: str = ""
    valor: Decimal = Decimal("0.00")
    valor_por_sessao: bool = False
    sessoes_padrao: int = 1
    valor_sessao_avulsa: Optional[Decimal] = None
    ativa: bool = True
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    @classmethod
    def criar(
        cls,
        nome: str,
        valor: Any,
        descricao: str = "",
        valor_por_sessao: bool = False,
        sessoes_padrao: int = 1,
        valor_sessao_avulsa: Any = None,
    ) -> "Terapia":
        terapia = cls(
            nome=(nome or "").strip(),
            descricao=(descricao or "").strip(),
            valor=round_currency(valor),
            valor_por_sessao=bool(valor_por_sessao),
            sessoes_padrao=sessoes_padrao,
            valor_sessao_avulsa=(
                round_currency(valor_sessao_avulsa)
                if valor_sessao_avulsa is not None else None
            ),
        )
        terapia.validar()
        return terapia

    def validar(self) -> None:
        if len(self.nome) < 2:
            raise ValidationError("Nome da terapia é obrigatório", field="name")
        if self.valor < 0:
            raise ValidationError("Valor não pode ser negativo", field="value")
        if not isinstance(self.sessoes_padrao, int) or self.sessoes_padrao < 1:
            raise ValidationError(
                "Sessões padrão deve ser pelo menos 1", field="default_sessions"
            )
        if self.valor_sessao_avulsa is not None and self.valor_sessao_avulsa <= 0:
            raise ValidationError(
                "Valor da sessão avulsa deve ser positivo",
                field="single_session_value",
            )

    def atualizar(self, **campos) -> None:
        """Atualiza campos informados (None = manter)."""
        for nome, valor in campos.items():
            if valor is None:
                continue
            if nome in ("valor", "valor_sessao_avulsa") and valor is not None:
                valor = round_currency(valor)
            setattr(self, nome, valor)
        self.validar()
        self.atualizado_em = agora()

    @property
    def valor_cobranca_avulsa(self) -> Decimal:
        """Valor padrão de uma sessão avulsa desta terapia."""
        if self.valor_sessao_avulsa is not None:
            return self.valor_sessao_avulsa
        return self.valor


# =============================================================================
# Pedido e Parcelas
# =============================================================================

@dataclass
class Parcela:
    """
    Pagamento parcial programado de um pedido.

    Invariante: 0 <= valor_pago <= valor.
    """

    id: str = field(default_factory=_novo_id)
    pedido_id: str = ""
    numero: int = 1
    valor: Decimal = Decimal("0.00")
    valor_pago: Decimal = Decimal("0.00")
    vencimento: Optional[date] = None
    status: StatusParcela = StatusParcela.OPEN
    pago_em: Optional[datetime] = None
    forma_pagamento: Optional[FormaPagamento] = None

    @property
    def saldo(self) -> Decimal:
        return max(Decimal("0.00"), self.valor - self.valor_pago)

    def esta_vencida(self, referencia: Optional[date] = None) -> bool:
        """Parcela em aberto com vencimento anterior à data de referência."""
        referencia = referencia or hoje()
        return (
            self.status == StatusParcela.OPEN
            and self.vencimento is not None
            and self.vencimento < referencia
        )

    def registrar_pagamento(
        self,
        valor: Any = None,
        forma_pagamento: Optional[FormaPagamento] = None,
        quando: Optional[datetime] = None,
    ) -> Decimal:
        """
        Registra pagamento (total ou parcial).

        Args:
            valor: Valor pago; default é o saldo em aberto

        Returns:
            Valor efetivamente registrado

        Raises:
            BusinessRuleViolationError: Parcela paga/cancelada ou
                pagamento acima do valor da parcela
            ValidationError: Valor não positivo
        """
        if self.status != StatusParcela.OPEN:
            raise BusinessRuleViolationError(
                f"Parcela {self.numero} não está em aberto",
                rule="parcela_em_aberto",
            )

        pagamento = self.saldo if valor is None else round_currency(valor)
        if pagamento <= 0:
            raise ValidationError("Valor do pagamento deve ser positivo", field="amount")
        if self.valor_pago + pagamento > self.valor:
            raise BusinessRuleViolationError(
                "Valor pago não pode exceder o valor da parcela",
                rule="pagamento_excede_parcela",
            )

        self.valor_pago = round_currency(self.valor_pago + pagamento)
        if forma_pagamento is not None:
            self.forma_pagamento = forma_pagamento
        if self.valor_pago == self.valor:
            self.status = StatusParcela.PAID
            self.pago_em = quando or agora()
        return pagamento

    def estornar(self) -> None:
        """Desfaz pagamentos: volta para OPEN com valor pago zerado."""
        if self.status == StatusParcela.CANCELED:
            raise BusinessRuleViolationError(
                "Parcela cancelada não pode ser estornada",
                rule="parcela_cancelada",
            )
        self.valor_pago = Decimal("0.00")
        self.status = StatusParcela.OPEN
        self.pago_em = None

    def cancelar(self) -> None:
        if self.valor_pago > 0:
            raise BusinessRuleViolationError(
                "Parcela com pagamento não pode ser cancelada",
                rule="parcela_com_pagamento",
            )
        self.status = StatusParcela.CANCELED


@dataclass
class PedidoTerapeutico:
    """
    Cobrança de um atendimento (processo OU sessão avulsa).

    Invariantes:
    - Exatamente uma origem (processo_id ou sessao_avulsa_id)
    - Soma das parcelas == valor_total
    - status == compute_order_status(parcelas) após cada alteração
    """

    id: str = field(default_factory=_novo_id)
    paciente_id: str = ""
    processo_id: Optional[str] = None
    sessao_avulsa_id: Optional[str] = None
    status: StatusPedido = StatusPedido.OPEN
    forma_pagamento: FormaPagamento = FormaPagamento.PIX
    modo_vencimento: ModoVencimento = ModoVencimento.AUTOMATIC_MONTHLY
    quantidade_parcelas: int = 1
    primeiro_vencimento: Optional[date] = None
    valor_total: Decimal = Decimal("0.00")
    parcelas: List[Parcela] = field(default_factory=list)
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    @classmethod
    def criar(
        cls,
        paciente_id: str,
        valor_total: Any,
        forma_pagamento: FormaPagamento,
        modo_vencimento: ModoVencimento,
        vencimentos: List[date],
        processo_id: Optional[str] = None,
        sessao_avulsa_id: Optional[str] = None,
    ) -> "PedidoTerapeutico":
        """
        Cria pedido e parcelas.

        A quantidade de parcelas é a quantidade de vencimentos.
        """
        if bool(processo_id) == bool(sessao_avulsa_id):
            raise ValidationError(
                "Pedido deve pertencer a um processo ou a uma sessão avulsa"
            )
        quantidade = len(vencimentos)
        if quantidade < 1 or quantidade > MAX_PARCELAS:
            raise ValidationError(
                f"Quantidade de parcelas deve estar entre 1 e {MAX_PARCELAS}",
                field="installments_count",
            )

        total = round_currency(valor_total)
        valores = split_installments(total, quantidade)

        pedido = cls(
            paciente_id=paciente_id,
            processo_id=processo_id,
            sessao_avulsa_id=sessao_avulsa_id,
            forma_pagamento=forma_pagamento,
            modo_vencimento=modo_vencimento,
            quantidade_parcelas=quantidade,
            primeiro_vencimento=(
                vencimentos[0]
                if modo_vencimento == ModoVencimento.AUTOMATIC_MONTHLY else None
            ),
            valor_total=total,
        )
        pedido.parcelas = [
            Parcela(
                pedido_id=pedido.id,
                numero=numero,
                valor=valor,
                vencimento=vencimento,
            )
            for numero, (valor, vencimento) in enumerate(zip(valores, vencimentos), start=1)
        ]
        return pedido

    def obter_parcela(self, parcela_id: str) -> Parcela:
        for parcela in self.parcelas:
            if parcela.id == parcela_id:
                return parcela
        raise EntityNotFoundError(
            "Parcela não encontrada", entity_type="Parcela", entity_id=parcela_id
        )

    def recalcular_status(self) -> StatusPedido:
        """Recalcula status a partir das parcelas e retorna o novo valor."""
        self.status = StatusPedido(compute_order_status(self.parcelas))
        self.atualizado_em = agora()
        return self.status

    @property
    def possui_pagamento(self) -> bool:
        return any(p.valor_pago > 0 for p in self.parcelas)

    def redistribuir_valor(self, novo_total: Any) -> None:
        """
        Altera o valor total e redivide as parcelas existentes.

        Raises:
            BusinessRuleViolationError: Se alguma parcela já tem pagamento
        """
        if self.possui_pagamento:
            raise BusinessRuleViolationError(
                "Não é possível alterar o valor após baixa financeira",
                rule="valor_apos_baixa",
            )
        total = round_currency(novo_total)
        ordenadas = sorted(self.parcelas, key=lambda p: p.numero)
        for parcela, valor in zip(ordenadas, split_installments(total, len(ordenadas))):
            parcela.valor = valor
        self.valor_total = total
        self.recalcular_status()

    @property
    def valor_pago(self) -> Decimal:
        return round_currency(sum((p.valor_pago for p in self.parcelas), Decimal("0")))

    @property
    def valor_em_aberto(self) -> Decimal:
        return round_currency(sum(
            (p.saldo for p in self.parcelas if p.status == StatusParcela.OPEN),
            Decimal("0"),
        ))

    def resumo_parcelas(self) -> Dict[str, Any]:
        abertas = [p for p in self.parcelas if p.status == StatusParcela.OPEN]
        pagas = [p for p in self.parcelas if p.status == StatusParcela.PAID]
        return {
            "open_installments": len(abertas),
            "paid_installments": len(pagas),
            "open_amount": self.valor_em_aberto,
            "paid_amount": self.valor_pago,
        }


# =============================================================================
# Processo Terapêutico
# =============================================================================

@dataclass
class ItemOrcamento:
    """Linha do orçamento com snapshot da terapia."""

    id: str = field(default_factory=_novo_id)
    terapia_id: str = ""
    terapia_nome: str = ""
    valor_unitario: Decimal = Decimal("0.00")
    sessoes_por_unidade: int = 1
    quantidade: int = 1
    desconto: Decimal = Decimal("0.00")
    ordem: int = 0

    @classmethod
    def criar(
        cls,
        terapia: Terapia,
        quantidade: int = 1,
        desconto: Any = 0,
        ordem: int = 0,
    ) -> "ItemOrcamento":
        if not isinstance(quantidade, int) or quantidade < 1:
            raise ValidationError("Quantidade deve ser pelo menos 1", field="quantity")
        item = cls(
            terapia_id=terapia.id,
            terapia_nome=terapia.nome,
            valor_unitario=terapia.valor,
            sessoes_por_unidade=max(1, terapia.sessoes_padrao),
            quantidade=quantidade,
            desconto=round_currency(desconto or 0),
            ordem=ordem,
        )
        if item.desconto < 0:
            raise ValidationError("Desconto não pode ser negativo", field="discount")
        if item.desconto > item.total_bruto:
            raise ValidationError(
                "Desconto não pode ser maior que o valor do item", field="discount"
            )
        return item

    @property
    def total_bruto(self) -> Decimal:
        return round_currency(self.valor_unitario * self.quantidade)

    @property
    def total_liquido(self) -> Decimal:
        return round_currency(self.total_bruto - self.desconto)

    @property
    def total_sessoes(self) -> int:
        return max(1, self.quantidade) * max(1, self.sessoes_por_unidade)


@dataclass
class SessaoTerapeutica:
    """Sessão de um processo, gerada ao iniciar o tratamento."""

    id: str = field(default_factory=_novo_id)
    processo_id: str = ""
    item_orcamento_id: str = ""
    terapia_id: str = ""
    numero_sessao: int = 1
    indice_ordem: int = 1
    status: StatusSessao = StatusSessao.PENDING
    modo: Optional[ModoSessao] = None
    terapeuta_id: Optional[str] = None
    data_sessao: Optional[datetime] = None
    comentarios: str = ""
    concluida_em: Optional[datetime] = None

    def alterar_status(self, novo_status: StatusSessao) -> None:
        self.status = novo_status
        self.concluida_em = agora() if novo_status == StatusSessao.COMPLETED else None


@dataclass
class ProcessoTerapeutico:
    """
    Agregado: Processo Terapêutico.

    Começa EM ANÁLISE com um orçamento (itens). Ao iniciar o
    tratamento, gera as sessões e o pedido parcelado.

    Example:
        processo = ProcessoTerapeutico.criar(paciente_id="7", criado_por_id="1")
        processo.adicionar_item(terapia, quantidade=2)
        processo.iniciar_tratamento(
            FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, vencimentos
        )
    """

    id: str = field(default_factory=_novo_id)
    paciente_id: str = ""
    criado_por_id: Optional[str] = None
    status: StatusProcesso = StatusProcesso.IN_ANALYSIS
    observacoes: str = ""
    itens: List[ItemOrcamento] = field(default_factory=list)
    sessoes: List[SessaoTerapeutica] = field(default_factory=list)
    pedido: Optional[PedidoTerapeutico] = None
    iniciado_em: Optional[datetime] = None
    finalizado_em: Optional[datetime] = None
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    @classmethod
    def criar(
        cls,
        paciente_id: str,
        criado_por_id: Optional[str] = None,
        observacoes: str = "",
    ) -> "ProcessoTerapeutico":
        if not paciente_id:
            raise ValidationError("Usuário é obrigatório", field="patient_user_id")
        return cls(
            paciente_id=str(paciente_id),
            criado_por_id=criado_por_id,
            observacoes=(observacoes or "").strip(),
        )

    def _exigir_em_analise(self, acao: str) -> None:
        if self.status != StatusProcesso.IN_ANALYSIS:
            raise BusinessRuleViolationError(
                f"Não é possível {acao} com processo em {self.status.value}",
                rule="orcamento_em_analise",
            )

    def adicionar_item(self, terapia: Terapia, quantidade: int = 1, desconto: Any = 0) -> ItemOrcamento:
        self._exigir_em_analise("alterar o orçamento")
        if not terapia.ativa:
            raise BusinessRuleViolationError(
                "Terapia inativa não pode ser orçada", rule="terapia_inativa"
            )
        item = ItemOrcamento.criar(
            terapia, quantidade=quantidade, desconto=desconto, ordem=len(self.itens)
        )
        self.itens.append(item)
        self._tocar()
        return item

    def remover_item(self, item_id: str) -> None:
        self._exigir_em_analise("alterar o orçamento")
        restantes = [i for i in self.itens if i.id != item_id]
        if len(restantes) == len(self.itens):
            raise EntityNotFoundError(
                "Item do orçamento não encontrado",
                entity_type="ItemOrcamento",
                entity_id=item_id,
            )
        for ordem, item in enumerate(restantes):
            item.ordem = ordem
        self.itens = restantes
        self._tocar()

    def pode_transicionar_para(self, novo_status: StatusProcesso) -> bool:
        if novo_status == self.status:
            return True
        return novo_status in TRANSICOES_PROCESSO[self.status]

    def exigir_transicao(self, novo_status: StatusProcesso) -> None:
        if not self.pode_transicionar_para(novo_status):
            raise BusinessRuleViolationError(
                f"Transição de {self.status.value} para {novo_status.value} não permitida",
                rule="transicao_status",
            )

    def alterar_status(self, novo_status: StatusProcesso) -> StatusProcesso:
        """
        Altera status (exceto início de tratamento).

        Returns:
            Status anterior

        Raises:
            BusinessRuleViolationError: Transição inválida ou
                IN_TREATMENT sem passar por `iniciar_tratamento`
        """
        anterior = self.status
        if novo_status == anterior:
            return anterior
        self.exigir_transicao(novo_status)
        if novo_status == StatusProcesso.IN_TREATMENT:
            raise BusinessRuleViolationError(
                "Use o início de tratamento para iniciar o processo",
                rule="iniciar_tratamento",
            )
        self.status = novo_status
        if novo_status in (StatusProcesso.FINISHED, StatusProcesso.CANCELED):
            self.finalizado_em = agora()
        self._tocar()
        return anterior

    def iniciar_tratamento(
        self,
        forma_pagamento: FormaPagamento,
        modo_vencimento: ModoVencimento,
        vencimentos: List[date],
    ) -> PedidoTerapeutico:
        """
        Inicia o tratamento: gera sessões e pedido parcelado.

        Raises:
            BusinessRuleViolationError: Fora de análise, pedido existente
                ou orçamento vazio/zerado
        """
        if self.status != StatusProcesso.IN_ANALYSIS:
            raise BusinessRuleViolationError(
                f"Transição de {self.status.value} para IN_TREATMENT não permitida",
                rule="transicao_status",
            )
        if self.pedido is not None:
            raise BusinessRuleViolationError(
                "Processo já possui pedido financeiro", rule="pedido_existente"
            )
        if not self.itens:
            raise BusinessRuleViolationError(
                "Adicione pelo menos um item ao orçamento", rule="orcamento_vazio"
            )
        total = self.total_orcamento
        if total <= 0:
            raise BusinessRuleViolationError(
                "Total do orçamento deve ser maior que zero", rule="orcamento_zerado"
            )

        self.sessoes = self._gerar_sessoes()
        self.pedido = PedidoTerapeutico.criar(
            paciente_id=self.paciente_id,
            valor_total=total,
            forma_pagamento=forma_pagamento,
            modo_vencimento=modo_vencimento,
            vencimentos=vencimentos,
            processo_id=self.id,
        )
        self.status = StatusProcesso.IN_TREATMENT
        self.iniciado_em = agora()
        self._tocar()
        return self.pedido

    def _gerar_sessoes(self) -> List[SessaoTerapeutica]:
        sessoes = []
        indice = 1
        for item in sorted(self.itens, key=lambda i: i.ordem):
            for numero in range(1, item.total_sessoes + 1):
                sessoes.append(SessaoTerapeutica(
                    processo_id=self.id,
                    item_orcamento_id=item.id,
                    terapia_id=item.terapia_id,
                    numero_sessao=numero,
                    indice_ordem=indice,
                ))
                indice += 1
        return sessoes

    def obter_sessao(self, sessao_id: str) -> SessaoTerapeutica:
        for sessao in self.sessoes:
            if sessao.id == sessao_id:
                return sessao
        raise EntityNotFoundError(
            "Sessão não encontrada", entity_type="SessaoTerapeutica", entity_id=sessao_id
        )

    @property
    def total_bruto(self) -> Decimal:
        return round_currency(sum((i.total_bruto for i in self.itens), Decimal("0")))

    @property
    def total_desconto(self) -> Decimal:
        return round_currency(sum((i.desconto for i in self.itens), Decimal("0")))

    @property
    def total_orcamento(self) -> Decimal:
        return round_currency(sum((i.total_liquido for i in self.itens), Decimal("0")))

    def resumo(self) -> Dict[str, Any]:
        """Totais do orçamento, simulação e andamento do processo."""
        resumo = {
            "gross_total": self.total_bruto,
            "discount_total": self.total_desconto,
            "budget_total": self.total_orcamento,
            "installment_simulation": simulate_installments(self.total_orcamento),
            "sessions_count": len(self.sessoes),
            "completed_sessions": sum(
                1 for s in self.sessoes if s.status == StatusSessao.COMPLETED
            ),
            "open_installments": 0,
            "paid_installments": 0,
            "open_amount": Decimal("0.00"),
            "paid_amount": Decimal("0.00"),
        }
        if self.pedido is not None:
            resumo.update(self.pedido.resumo_parcelas())
        return resumo

    def _tocar(self) -> None:
        self.atualizado_em = agora()


# =============================================================================
# Sessão Avulsa
# =============================================================================

COMENTARIOS_MAX = 8000
DADOS_SESSAO_MAX = 20000


@dataclass
class SessaoAvulsa:
    """
    Sessão avulsa cobrada individualmente.

    Guarda snapshot do nome e valor da terapia no momento da criação.
    """

    id: str = field(default_factory=_novo_id)
    paciente_id: str = ""
    terapia_id: str = ""
    terapia_nome: str = ""
    terapia_valor: Decimal = Decimal("0.00")
    terapeuta_id: Optional[str] = None
    data_sessao: datetime = field(default_factory=agora)
    modo: Optional[ModoSessao] = None
    status: StatusSessao = StatusSessao.COMPLETED
    comentarios: Optional[str] = None
    dados_sessao: Optional[str] = None
    valor_cobrado: Decimal = Decimal("0.00")
    pedido: Optional[PedidoTerapeutico] = None
    criado_por_id: Optional[str] = None
    criado_em: datetime = field(default_factory=agora)
    atualizado_em: datetime = field(default_factory=agora)

    @classmethod
    def criar(
        cls,
        paciente_id: str,
        terapia: Terapia,
        valor_cobrado: Any = None,
        terapeuta_id: Optional[str] = None,
        data_sessao: Optional[datetime] = None,
        modo: Optional[ModoSessao] = None,
        status: StatusSessao = StatusSessao.COMPLETED,
        comentarios: Optional[str] = None,
        dados_sessao: Optional[str] = None,
        criado_por_id: Optional[str] = None,
    ) -> "SessaoAvulsa":
        valor = round_currency(
            valor_cobrado if valor_cobrado is not None else terapia.valor_cobranca_avulsa
        )
        sessao = cls(
            paciente_id=str(paciente_id),
            terapia_id=terapia.id,
            terapia_nome=terapia.nome,
            terapia_valor=terapia.valor,
            terapeuta_id=terapeuta_id,
            data_sessao=data_sessao or agora(),
            modo=modo,
            status=status,
            comentarios=comentarios,
            dados_sessao=dados_sessao,
            valor_cobrado=valor,
            criado_por_id=criado_por_id,
        )
        sessao._validar()
        return sessao

    def _validar(self) -> None:
        if self.valor_cobrado <= 0:
            raise ValidationError("Valor cobrado deve ser positivo", field="charged_amount")
        if self.comentarios and len(self.comentarios) > COMENTARIOS_MAX:
            raise ValidationError(
                f"Comentários devem ter no máximo {COMENTARIOS_MAX} caracteres",
                field="comments",
            )
        if self.dados_sessao and len(self.dados_sessao) > DADOS_SESSAO_MAX:
            raise ValidationError(
                f"Dados da sessão devem ter no máximo {DADOS_SESSAO_MAX} caracteres",
                field="session_data",
            )

    def gerar_pedido(
        self,
        forma_pagamento: FormaPagamento,
        modo_vencimento: ModoVencimento,
        vencimentos: List[date],
    ) -> PedidoTerapeutico:
        self.pedido = PedidoTerapeutico.criar(
            paciente_id=self.paciente_id,
            valor_total=self.valor_cobrado,
            forma_pagamento=forma_pagamento,
            modo_vencimento=modo_vencimento,
            vencimentos=vencimentos,
            sessao_avulsa_id=self.id,
        )
        return self.pedido

    def alterar_valor_cobrado(self, novo_valor: Any) -> bool:
        """
        Altera o valor cobrado e redistribui as parcelas.

        Returns:
            True se o valor mudou
        """
        valor = round_currency(novo_valor)
        if valor <= 0:
            raise ValidationError("Valor cobrado deve ser positivo", field="charged_amount")
        if valor == self.valor_cobrado:
            return False
        if self.pedido is not None:
            self.pedido.redistribuir_valor(valor)
        self.valor_cobrado = valor
        self.atualizado_em = agora()
        return True

    def atualizar(self, **campos) -> None:
        """Atualiza campos descritivos; chaves ausentes são mantidas."""
        if "data_sessao" in campos and campos["data_sessao"] is None:
            raise ValidationError("Data da sessão é obrigatória", field="session_date")
        for nome, valor in campos.items():
            setattr(self, nome, valor)
        self._validar()
        self.atualizado_em = agora()
