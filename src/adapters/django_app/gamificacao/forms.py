"""
Forms de entrada JSON da gamificação.
"""

from django import forms


class ConcederPontosForm(forms.Form):
    user_id = forms.CharField(
        max_length=100,
        error_messages={'required': 'Usuário é obrigatório'},
    )
    points = forms.IntegerField(
        min_value=1,
        error_messages={
            'required': 'Pontos devem ser um número positivo',
            'min_value': 'Pontos devem ser um número positivo',
            'invalid': 'Pontos devem ser um número positivo',
        },
    )
    reason = forms.CharField(
        max_length=255,
        error_messages={'required': 'Motivo é obrigatório'},
    )
    description = forms.CharField(required=False, max_length=1000)
    metadata = forms.JSONField(required=False)
