"""
Domínio de Atendimentos Terapêuticos.

Contém a lógica de negócio de:
- Catálogo de terapias
- Processos terapêuticos (orçamento, início de tratamento, sessões)
- Sessões avulsas cobradas individualmente
- Financeiro (pedidos, parcelas, baixas)

Características do Domínio:
- Valores monetários em Decimal, arredondados em centavos
- Parcelas somam exatamente o total do pedido
- Status do pedido derivado das parcelas ativas
- Eventos disparados para side-effects assíncronos (gamificação)
"""

from .entities import (
    Terapia,
    ProcessoTerapeutico,
    ItemOrcamento,
    SessaoTerapeutica,
    SessaoAvulsa,
    PedidoTerapeutico,
    Parcela,
    StatusProcesso,
    StatusSessao,
    StatusPedido,
    StatusParcela,
)
from .financeiro import (
    round_currency,
    split_installments,
    get_monthly_due_dates,
    compute_order_status,
)

__all__ = [
    "Terapia",
    "ProcessoTerapeutico",
    "ItemOrcamento",
    "SessaoTerapeutica",
    "SessaoAvulsa",
    "PedidoTerapeutico",
    "Parcela",
    "StatusProcesso",
    "StatusSessao",
    "StatusPedido",
    "StatusParcela",
    "round_currency",
    "split_installments",
    "get_monthly_due_dates",
    "compute_order_status",
]
