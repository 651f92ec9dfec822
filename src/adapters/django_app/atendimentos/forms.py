"""
Django Forms para validação da entrada JSON das APIs.

Forms são DRIVING ADAPTERS: validam estrutura e tipos antes dos
Use Cases. Regras de negócio (transições, parcelas, vencimentos)
ficam nas Entities/Use Cases.
"""

from django import forms
from django.core.exceptions import ValidationError

from src.core.atendimentos.entities import COMENTARIOS_MAX, DADOS_SESSAO_MAX
from src.core.atendimentos.financeiro import MAX_PARCELAS

from .models import (
    FormaPagamentoChoices,
    ModoSessaoChoices,
    ModoVencimentoChoices,
    StatusParcelaChoices,
    StatusProcessoChoices,
    StatusSessaoChoices,
)

VALOR = dict(max_digits=12, decimal_places=2)


def _opcional(choices):
    return [('', '')] + list(choices)


class DatasJSONField(forms.JSONField):
    """Lista JSON de datas em texto (validação fina no Core)."""

    def validate(self, value):
        super().validate(value)
        if value in (None, ''):
            return
        if not isinstance(value, list):
            raise ValidationError('Informe uma lista de datas')


# =============================================================================
# Terapias
# =============================================================================

class TerapiaForm(forms.Form):
    name = forms.CharField(
        max_length=200,
        error_messages={'required': 'Nome é obrigatório'},
    )
    description = forms.CharField(required=False, max_length=5000)
    value = forms.DecimalField(
        **VALOR,
        min_value=0,
        error_messages={'required': 'Valor é obrigatório'},
    )
    value_per_session = forms.BooleanField(required=False)
    default_sessions = forms.IntegerField(required=False, min_value=1)
    single_session_value = forms.DecimalField(**VALOR, required=False, min_value=0)


class TerapiaUpdateForm(TerapiaForm):
    active = forms.BooleanField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            field.required = False


# =============================================================================
# Processos
# =============================================================================

class ProcessoCreateForm(forms.Form):
    patient_user_id = forms.CharField(
        max_length=100,
        error_messages={'required': 'Paciente é obrigatório'},
    )
    notes = forms.CharField(required=False, max_length=COMENTARIOS_MAX)


class ItemOrcamentoForm(forms.Form):
    therapy_id = forms.CharField(
        max_length=36,
        error_messages={'required': 'Terapia é obrigatória'},
    )
    quantity = forms.IntegerField(required=False, min_value=1)
    discount = forms.DecimalField(**VALOR, required=False, min_value=0)


class PagamentoConfigForm(forms.Form):
    """Campos comuns de forma de pagamento e parcelamento."""

    payment_method = forms.ChoiceField(
        choices=_opcional(FormaPagamentoChoices.choices), required=False
    )
    due_date_mode = forms.ChoiceField(
        choices=_opcional(ModoVencimentoChoices.choices), required=False
    )
    installments_count = forms.IntegerField(
        required=False, min_value=1, max_value=MAX_PARCELAS
    )
    first_due_date = forms.CharField(required=False, max_length=40)
    manual_due_dates = DatasJSONField(required=False)


class ProcessoUpdateForm(PagamentoConfigForm):
    status = forms.ChoiceField(
        choices=_opcional(StatusProcessoChoices.choices), required=False
    )
    notes = forms.CharField(required=False, max_length=COMENTARIOS_MAX)


class SessaoProcessoUpdateForm(forms.Form):
    status = forms.ChoiceField(choices=_opcional(StatusSessaoChoices.choices), required=False)
    mode = forms.ChoiceField(choices=_opcional(ModoSessaoChoices.choices), required=False)
    therapist_user_id = forms.CharField(required=False, max_length=100)
    session_date = forms.DateTimeField(required=False)
    comments = forms.CharField(required=False, max_length=COMENTARIOS_MAX)


# =============================================================================
# Sessões avulsas
# =============================================================================

class SessaoAvulsaCreateForm(PagamentoConfigForm):
    patient_user_id = forms.CharField(
        max_length=100,
        error_messages={'required': 'Paciente é obrigatório'},
    )
    therapy_id = forms.CharField(
        max_length=36,
        error_messages={'required': 'Terapia é obrigatória'},
    )
    therapist_user_id = forms.CharField(required=False, max_length=100)
    session_date = forms.DateTimeField(required=False)
    mode = forms.ChoiceField(choices=_opcional(ModoSessaoChoices.choices), required=False)
    status = forms.ChoiceField(choices=_opcional(StatusSessaoChoices.choices), required=False)
    comments = forms.CharField(required=False, max_length=COMENTARIOS_MAX, strip=False)
    session_data = forms.CharField(required=False, max_length=DADOS_SESSAO_MAX, strip=False)
    charged_amount = forms.DecimalField(**VALOR, required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for nome in ('payment_method', 'due_date_mode', 'installments_count'):
            self.fields[nome].required = True


class SessaoAvulsaUpdateForm(forms.Form):
    therapist_user_id = forms.CharField(required=False, max_length=100)
    session_date = forms.DateTimeField(required=False)
    mode = forms.ChoiceField(choices=_opcional(ModoSessaoChoices.choices), required=False)
    status = forms.ChoiceField(choices=_opcional(StatusSessaoChoices.choices), required=False)
    comments = forms.CharField(required=False, max_length=COMENTARIOS_MAX, strip=False)
    session_data = forms.CharField(required=False, max_length=DADOS_SESSAO_MAX, strip=False)
    charged_amount = forms.DecimalField(**VALOR, required=False)


# =============================================================================
# Financeiro
# =============================================================================

class PagamentoForm(forms.Form):
    amount = forms.DecimalField(**VALOR, required=False)
    payment_method = forms.ChoiceField(
        choices=_opcional(FormaPagamentoChoices.choices), required=False
    )
    # Data informada pela recepção; sem ela vale o momento da baixa
    paid_at = forms.DateTimeField(required=False)


class ParcelasFiltroForm(forms.Form):
    """Filtros de query string da listagem financeira."""

    status = forms.ChoiceField(choices=_opcional(StatusParcelaChoices.choices), required=False)
    overdue = forms.BooleanField(required=False)
    due_from = forms.DateField(required=False)
    due_to = forms.DateField(required=False)
    patient_user_id = forms.CharField(required=False, max_length=100)

    def clean(self):
        cleaned = super().clean()
        inicio, fim = cleaned.get('due_from'), cleaned.get('due_to')
        if inicio and fim and inicio > fim:
            raise ValidationError('Período de vencimento inválido')
        return cleaned
