"""
Forms de entrada JSON das integrações de calendário.
"""

from django import forms

from .models import FrequenciaChoices, ProvedorChoices


class IntegracaoCreateForm(forms.Form):
    provider = forms.ChoiceField(
        choices=ProvedorChoices.choices,
        error_messages={'required': 'Provedor é obrigatório'},
    )
    access_token = forms.CharField(
        error_messages={'required': 'Token de acesso é obrigatório'},
    )
    refresh_token = forms.CharField(required=False)
    calendar_id = forms.CharField(required=False, max_length=255)
    sync_frequency = forms.ChoiceField(choices=FrequenciaChoices.choices, required=False)
    sync_enabled = forms.NullBooleanField(required=False)


class IntegracaoUpdateForm(forms.Form):
    access_token = forms.CharField(required=False)
    refresh_token = forms.CharField(required=False)
    calendar_id = forms.CharField(required=False, max_length=255)
    sync_frequency = forms.ChoiceField(
        choices=[('', '')] + FrequenciaChoices.choices, required=False
    )
    sync_enabled = forms.NullBooleanField(required=False)
    is_active = forms.NullBooleanField(required=False)
