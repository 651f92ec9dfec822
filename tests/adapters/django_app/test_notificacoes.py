"""
Testes de notificações: DjangoNotificador, API JSON e health check.
"""

import pytest

from src.adapters.django_app.notificacoes.services import DjangoNotificador

pytestmark = pytest.mark.django_db

BASE = '/api/notificacoes'


@pytest.fixture
def notificador():
    return DjangoNotificador()


class TestDjangoNotificador:
    @pytest.mark.parametrize("tipo,prioridade", [
        ("sync_error", "HIGH"),
        ("payment_overdue", "HIGH"),
        ("sync_success", "LOW"),
        ("achievement_unlocked", "MEDIUM"),
    ])
    def test_prioridade_pelo_tipo(self, notificador, tipo, prioridade):
        notificacao = notificador.notificar("7", tipo, "Título", "Mensagem")

        assert notificacao.prioridade == prioridade
        assert notificacao.lida is False

    def test_listar_e_contar(self, notificador):
        notificador.notificar("7", "info", "A", "primeira")
        notificador.notificar("7", "info", "B", "segunda")
        notificador.notificar("8", "info", "C", "de outro usuário")

        assert len(notificador.listar("7")) == 2
        assert len(notificador.listar("7", limite=1)) == 1
        assert notificador.contar_nao_lidas("7") == 2

    def test_marcar_como_lida(self, notificador):
        notificacao = notificador.notificar("7", "info", "A", "texto")

        assert notificador.marcar_como_lida("7", notificacao.pk) is True
        assert notificador.listar("7", somente_nao_lidas=True) == []
        notificacao.refresh_from_db()
        assert notificacao.lida_em is not None

    def test_nao_marca_notificacao_de_outro_usuario(self, notificador):
        notificacao = notificador.notificar("7", "info", "A", "texto")

        assert notificador.marcar_como_lida("8", notificacao.pk) is False
        assert notificador.marcar_como_lida("7", "abc") is False
        assert notificador.contar_nao_lidas("7") == 1

    def test_marcar_todas(self, notificador):
        notificador.notificar("7", "info", "A", "texto")
        notificador.notificar("7", "info", "B", "texto")

        assert notificador.marcar_todas_como_lidas("7") == 2
        assert notificador.marcar_todas_como_lidas("7") == 0


class TestNotificacoesAPI:
    def test_listar(self, api_paciente, paciente, notificador):
        notificador.notificar(paciente.id, "sync_error", "Erro", "Falhou", {"provider": "GOOGLE"})

        response = api_paciente.get(f'{BASE}/')

        assert response.status_code == 200
        body = response.json()
        assert body['meta'] == {'unread': 1}
        item = body['data'][0]
        assert item['type'] == 'sync_error'
        assert item['priority'] == 'HIGH'
        assert item['data'] == {'provider': 'GOOGLE'}
        assert item['is_read'] is False

    def test_filtro_nao_lidas(self, api_paciente, paciente, notificador):
        lida = notificador.notificar(paciente.id, "info", "A", "texto")
        notificador.notificar(paciente.id, "info", "B", "texto")
        notificador.marcar_como_lida(paciente.id, lida.pk)

        response = api_paciente.get(f'{BASE}/', {'unread': 'true'})

        assert [n['title'] for n in response.json()['data']] == ['B']

    def test_marcar_lida(self, api_paciente, paciente, notificador):
        notificacao = notificador.notificar(paciente.id, "info", "A", "texto")

        response = api_paciente.post(f'{BASE}/{notificacao.pk}/lida/')

        assert response.status_code == 200
        assert response.json()['data']['is_read'] is True
        assert notificador.contar_nao_lidas(paciente.id) == 0

    def test_marcar_lida_de_outro_usuario_retorna_404(self, api_outro, paciente, notificador):
        notificacao = notificador.notificar(paciente.id, "info", "A", "texto")

        response = api_outro.post(f'{BASE}/{notificacao.pk}/lida/')

        assert response.status_code == 404

    def test_marcar_todas_lidas(self, api_paciente, paciente, notificador):
        notificador.notificar(paciente.id, "info", "A", "texto")
        notificador.notificar(paciente.id, "info", "B", "texto")

        response = api_paciente.post(f'{BASE}/marcar-todas-lidas/')

        assert response.json()['data'] == {'updated': 2}

    def test_anonimo_retorna_401(self, api_anonimo):
        assert api_anonimo.get(f'{BASE}/').status_code == 401


class TestHealthCheck:
    def test_health(self, api_anonimo):
        response = api_anonimo.get('/health/')

        assert response.status_code == 200
        assert response.json() == {'status': 'ok'}
