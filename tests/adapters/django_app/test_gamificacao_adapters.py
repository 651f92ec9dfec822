"""
Testes dos adapters de Gamificação.

Testa:
- Repositórios Django (saldo, extrato, conquistas)
- API JSON: concessão (admin), estatísticas e ranking
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.gamificacao.entities import (
    CategoriaConquista,
    ConquistaUsuario,
    PontosUsuario,
    TipoTransacao,
    TransacaoPontos,
)

pytestmark = pytest.mark.django_db

BASE = '/api/gamificacao'


# =============================================================================
# Repositórios
# =============================================================================

class TestPontosRepository:
    @pytest.fixture
    def repo(self):
        from src.adapters.django_app.gamificacao.repositories import DjangoPontosRepository
        return DjangoPontosRepository()

    def test_salvar_e_recuperar(self, repo):
        saldo = PontosUsuario(usuario_id="7")
        saldo.adicionar(900)

        repo.save(saldo)
        recuperado = repo.get("7")

        assert recuperado.total_pontos == 900
        assert (recuperado.nivel, recuperado.progresso, recuperado.pontos_proximo_nivel) == (
            5, 88, 506
        )

    def test_usuario_sem_pontos(self, repo):
        assert repo.get("nao-existe") is None

    def test_ranking_ordena_por_total(self, repo):
        for usuario_id, pontos in (("a", 50), ("b", 300), ("c", 120)):
            saldo = PontosUsuario(usuario_id=usuario_id)
            saldo.adicionar(pontos)
            repo.save(saldo)

        assert [s.usuario_id for s in repo.ranking(2)] == ["b", "c"]


class TestTransacaoRepository:
    def test_recentes_mais_novas_primeiro(self):
        from src.adapters.django_app.gamificacao.repositories import DjangoTransacaoRepository

        repo = DjangoTransacaoRepository()
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        for dia in range(3):
            repo.add(TransacaoPontos(
                usuario_id="7",
                tipo=TipoTransacao.EARNED,
                pontos=10 + dia,
                motivo="ORDER_PAID",
                metadata={"dia": dia},
                criado_em=base + timedelta(days=dia),
            ))

        recentes = repo.recentes("7", limite=2)

        assert [t.pontos for t in recentes] == [12, 11]
        assert recentes[0].metadata == {"dia": 2}
        assert recentes[0].tipo == TipoTransacao.EARNED

    def test_existe_por_chave_de_metadata(self):
        from src.adapters.django_app.gamificacao.repositories import DjangoTransacaoRepository

        repo = DjangoTransacaoRepository()
        repo.add(TransacaoPontos(
            usuario_id="7",
            tipo=TipoTransacao.EARNED,
            pontos=30,
            motivo="ORDER_PAID",
            metadata={"order_id": "pedido-1"},
        ))
        repo.add(TransacaoPontos(
            usuario_id="7",
            tipo=TipoTransacao.BONUS,
            pontos=5,
            motivo="ORDER_PAID",
            metadata={"order_id": "pedido-2"},
        ))

        assert repo.existe("7", "ORDER_PAID", "order_id", "pedido-1") is True
        assert repo.existe("7", "ORDER_PAID", "order_id", "pedido-2") is False
        assert repo.existe("8", "ORDER_PAID", "order_id", "pedido-1") is False
        assert repo.existe("7", "OUTRO", "order_id", "pedido-1") is False


class TestConquistaRepository:
    def test_codigos_do_usuario(self):
        from src.adapters.django_app.gamificacao.repositories import DjangoConquistaRepository

        repo = DjangoConquistaRepository()
        repo.add(ConquistaUsuario(
            usuario_id="7",
            codigo="points_100",
            nome="Centenário",
            categoria=CategoriaConquista.POINTS_MILESTONE,
            raridade="common",
            bonus=5,
        ))

        assert repo.codigos_do_usuario("7") == {"points_100"}
        assert repo.codigos_do_usuario("8") == set()
        conquista = repo.list_by_usuario("7")[0]
        assert conquista.categoria == CategoriaConquista.POINTS_MILESTONE
        assert conquista.bonus == 5


# =============================================================================
# API
# =============================================================================

class TestConcederPontosAPI:
    def test_admin_concede_pontos(self, api_admin, paciente):
        response = api_admin.post(f'{BASE}/pontos/', {
            'user_id': str(paciente.id),
            'points': 100,
            'reason': 'Participação no grupo',
        })

        assert response.status_code == 200
        data = response.json()['data']
        assert data['points_awarded'] == 100
        assert data['total_points'] == 105
        assert [c['code'] for c in data['achievements_unlocked']] == ['points_100']

    def test_paciente_nao_concede(self, api_paciente, paciente):
        response = api_paciente.post(f'{BASE}/pontos/', {
            'user_id': str(paciente.id),
            'points': 10,
            'reason': 'x',
        })

        assert response.status_code == 403

    @pytest.mark.parametrize("payload,campo", [
        ({'user_id': '7', 'points': 0, 'reason': 'x'}, 'points'),
        ({'user_id': '7', 'points': 'dez', 'reason': 'x'}, 'points'),
        ({'user_id': '7', 'points': 10}, 'reason'),
    ])
    def test_validacao(self, api_admin, payload, campo):
        response = api_admin.post(f'{BASE}/pontos/', payload)

        assert response.status_code == 400
        assert campo in response.json()['meta']['details']


class TestEstatisticasAPI:
    def test_estatisticas_do_proprio_usuario(self, api_admin, api_paciente, paciente):
        api_admin.post(f'{BASE}/pontos/', {
            'user_id': str(paciente.id),
            'points': 40,
            'reason': 'Sessão concluída',
        })

        response = api_paciente.get(f'{BASE}/estatisticas/')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['user_id'] == str(paciente.id)
        assert data['total_points'] == 40
        assert data['current_level'] == 1
        assert [t['reason'] for t in data['recent_transactions']] == ['Sessão concluída']
        assert data['achievements'] == []

    def test_usuario_sem_pontos(self, api_paciente):
        data = api_paciente.get(f'{BASE}/estatisticas/').json()['data']

        assert data['total_points'] == 0
        assert data['points_to_next_level'] == 100

    def test_admin_consulta_outro_usuario(self, api_admin, paciente):
        response = api_admin.get(f'{BASE}/estatisticas/', {'user_id': str(paciente.id)})

        assert response.json()['data']['user_id'] == str(paciente.id)

    def test_paciente_nao_consulta_outro_usuario(self, api_paciente, paciente, outro_paciente):
        response = api_paciente.get(f'{BASE}/estatisticas/', {'user_id': str(outro_paciente.id)})

        assert response.json()['data']['user_id'] == str(paciente.id)


class TestRankingAPI:
    def test_ranking(self, api_admin, api_paciente, paciente, outro_paciente):
        for usuario, pontos in ((paciente, 30), (outro_paciente, 60)):
            api_admin.post(f'{BASE}/pontos/', {
                'user_id': str(usuario.id),
                'points': pontos,
                'reason': 'Bônus',
            })

        response = api_paciente.get(f'{BASE}/ranking/', {'limit': 5})

        assert response.status_code == 200
        ranking = response.json()['data']
        assert [r['user_id'] for r in ranking] == [str(outro_paciente.id), str(paciente.id)]
        assert [r['position'] for r in ranking] == [1, 2]

    def test_limite_invalido(self, api_paciente):
        response = api_paciente.get(f'{BASE}/ranking/', {'limit': 'muitos'})

        assert response.status_code == 400
