"""
Fixtures dos testes de adapters Django.

Fornece:
- Usuários (administrador, pacientes e terapeuta)
- Clients autenticados que falam JSON com as APIs
- Terapia persistida via container
"""

import json
from decimal import Decimal

import pytest


class JsonClient:
    """Envolve o `django.test.Client` enviando e lendo JSON."""

    def __init__(self, client):
        self.client = client

    def get(self, url, params=None):
        return self.client.get(url, params or {})

    def post(self, url, data=None):
        return self.client.post(
            url, data=json.dumps(data or {}), content_type='application/json'
        )

    def patch(self, url, data=None):
        return self.client.patch(
            url, data=json.dumps(data or {}), content_type='application/json'
        )

    def delete(self, url):
        return self.client.delete(url)


def _json_client(user=None):
    from django.test import Client

    client = Client()
    if user is not None:
        client.force_login(user)
    return JsonClient(client)


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        username='admin', password='senha', is_staff=True
    )


@pytest.fixture
def paciente(django_user_model):
    return django_user_model.objects.create_user(username='paciente', password='senha')


@pytest.fixture
def outro_paciente(django_user_model):
    return django_user_model.objects.create_user(username='outro', password='senha')


@pytest.fixture
def terapeuta(django_user_model):
    from django.contrib.auth.models import Group

    usuario = django_user_model.objects.create_user(username='terapeuta', password='senha')
    grupo, _ = Group.objects.get_or_create(name='terapeutas')
    usuario.groups.add(grupo)
    return usuario


@pytest.fixture
def api_admin(admin_user):
    return _json_client(admin_user)


@pytest.fixture
def api_paciente(paciente):
    return _json_client(paciente)


@pytest.fixture
def api_outro(outro_paciente):
    return _json_client(outro_paciente)


@pytest.fixture
def api_anonimo():
    return _json_client()


@pytest.fixture
def terapia(db):
    """Terapia de R$ 150,00 com duas sessões por unidade."""
    from src.config.container import get_container
    from src.core.atendimentos.dtos import CriarTerapiaInputDTO

    return get_container().criar_terapia_service().execute(
        CriarTerapiaInputDTO(
            nome='Reiki',
            valor=Decimal('150.00'),
            sessoes_padrao=2,
            valor_sessao_avulsa=Decimal('120.00'),
        )
    )
