"""
Regras financeiras dos atendimentos terapêuticos.

Funções puras usadas pelos use cases de processos, sessões avulsas
e pelo módulo financeiro:

- round_currency: arredondamento monetário (centavos, HALF_UP)
- split_installments: divide um total em N parcelas sem perder centavos
- get_monthly_due_dates: vencimentos mensais a partir da primeira data
- resolve_due_dates: vencimentos automáticos ou manuais (validados)
- compute_order_status: status do pedido derivado das parcelas
- simulate_installments: simulação de parcelamento (1..7x)

Todos os valores monetários são `Decimal` com duas casas.
"""

import calendar
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence

from src.core.shared.exceptions import ValidationError

CENTAVO = Decimal("0.01")
MAX_PARCELAS = 36


def to_decimal(value: Any) -> Decimal:
    """
    Converte int/float/str/Decimal para Decimal.

    Floats passam por `str` para que 0.1 + 0.2 vire 0.3 e não
    0.3000000000000000444.

    Raises:
        ValidationError: Se o valor não for numérico
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Valor monetário inválido: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Valor monetário inválido: {value!r}")


def round_currency(value: Any) -> Decimal:
    """Arredonda para centavos (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENTAVO, rounding=ROUND_HALF_UP)


def split_installments(total: Any, count: int) -> List[Decimal]:
    """
    Divide `total` em `count` parcelas.

    Cada parcela recebe o piso de total/count em centavos; os centavos
    restantes vão para a última parcela. A soma das parcelas é sempre
    igual ao total arredondado.

    Example:
        >>> split_installments(Decimal("100.00"), 3)
        [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]

    Raises:
        ValidationError: Se count < 1 ou total <= 0
    """
    if not isinstance(count, int) or count < 1:
        raise ValidationError(
            "Quantidade de parcelas deve ser maior que zero",
            field="installments_count",
        )

    valor_total = round_currency(total)
    if valor_total <= 0:
        raise ValidationError("Valor total deve ser maior que zero", field="total_amount")

    centavos_total = int(valor_total / CENTAVO)
    base = centavos_total // count
    resto = centavos_total - base * count

    parcelas = [Decimal(base) * CENTAVO for _ in range(count)]
    parcelas[-1] = Decimal(base + resto) * CENTAVO
    return [p.quantize(CENTAVO) for p in parcelas]


def _add_months(base: date, months: int) -> date:
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(base.day, last_day))


def get_monthly_due_dates(first_due_date, count: int) -> List[date]:
    """
    Gera `count` vencimentos mensais a partir de `first_due_date`.

    O dia do mês é sempre o da primeira data, limitado ao último dia
    dos meses mais curtos: 31/01 -> 29/02 (ou 28/02) -> 31/03.
    """
    if count < 1:
        raise ValidationError(
            "Quantidade de parcelas deve ser maior que zero",
            field="installments_count",
        )
    if isinstance(first_due_date, datetime):
        first_due_date = first_due_date.date()
    return [_add_months(first_due_date, i) for i in range(count)]


def parse_date(value: Any) -> Optional[date]:
    """
    Converte string ISO (data ou data/hora) em `date`.

    Retorna None para valores vazios ou inválidos.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    texto = str(value).strip()
    try:
        return date.fromisoformat(texto[:10])
    except ValueError:
        return None


def resolve_due_dates(
    due_date_mode: str,
    installments_count: int,
    first_due_date: Any = None,
    manual_due_dates: Optional[Sequence[Any]] = None,
) -> List[date]:
    """
    Define os vencimentos conforme o modo escolhido.

    - AUTOMATIC_MONTHLY: exige a primeira data e gera as demais
    - MANUAL: exige exatamente uma data válida por parcela

    Raises:
        ValidationError: Com as mensagens exibidas ao usuário
    """
    if due_date_mode == "AUTOMATIC_MONTHLY":
        primeira = parse_date(first_due_date)
        if primeira is None:
            raise ValidationError(
                "Informe a primeira data de vencimento",
                field="first_due_date",
            )
        return get_monthly_due_dates(primeira, installments_count)

    if due_date_mode == "MANUAL":
        datas = list(manual_due_dates or [])
        if len(datas) != installments_count:
            raise ValidationError(
                "Informe todas as datas de vencimento para parcelas manuais",
                field="manual_due_dates",
            )
        convertidas = [parse_date(d) for d in datas]
        if any(d is None for d in convertidas):
            raise ValidationError(
                "Uma ou mais datas de vencimento são inválidas",
                field="manual_due_dates",
            )
        return convertidas

    raise ValidationError(
        f"Modo de vencimento inválido: {due_date_mode}",
        field="due_date_mode",
    )


def compute_order_status(installments: Iterable[Any]) -> str:
    """
    Deriva o status do pedido a partir das parcelas.

    Parcelas canceladas são ignoradas. Sem parcelas ativas o pedido
    está CANCELED; todas pagas, PAID; alguma com pagamento,
    PARTIALLY_PAID; caso contrário, OPEN.

    Aceita qualquer objeto com `status` (str ou Enum) e `valor_pago`.
    """
    ativas = [p for p in installments if _status_value(p) != "CANCELED"]
    if not ativas:
        return "CANCELED"
    if all(_status_value(p) == "PAID" for p in ativas):
        return "PAID"
    if any(_status_value(p) == "PAID" or _paid_amount(p) > 0 for p in ativas):
        return "PARTIALLY_PAID"
    return "OPEN"


def _status_value(installment: Any) -> str:
    status = installment.status
    return getattr(status, "value", status)


def _paid_amount(installment: Any) -> Decimal:
    return to_decimal(getattr(installment, "valor_pago", 0) or 0)


def simulate_installments(total: Any, max_count: int = 7) -> List[Dict[str, Any]]:
    """Simulação de parcelamento de 1 até `max_count` vezes."""
    valor_total = round_currency(total)
    if valor_total <= 0:
        return []
    simulacao = []
    for count in range(1, max_count + 1):
        parts = split_installments(valor_total, count)
        simulacao.append({
            "installments": count,
            "installment_value": parts[0],
            "amounts": parts,
        })
    return simulacao


def money_sum(values: Iterable[Any]) -> Decimal:
    """Soma valores monetários arredondando o resultado."""
    return round_currency(sum((to_decimal(v) for v in values), Decimal("0")))
