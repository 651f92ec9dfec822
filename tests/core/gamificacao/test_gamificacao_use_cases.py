"""
Testes Unitários para Use Cases de Gamificação.

Coverage:
- ConcederPontosService (nível, marcos, bônus, validação)
- PontuarAcaoService
- EstatisticasUsuarioService
- RankingService
"""

import pytest

from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.gamificacao.entities import TipoTransacao
from src.core.gamificacao.ports import (
    InMemoryConquistaRepository,
    InMemoryPontosRepository,
    InMemoryTransacaoRepository,
)
from src.core.gamificacao.pontuacao import PointSettings
from src.core.gamificacao.use_cases import (
    ConcederPontosService,
    EstatisticasUsuarioService,
    PontuarAcaoService,
    RankingService,
)
from src.core.shared.exceptions import ValidationError


@pytest.fixture
def pontos_repo():
    return InMemoryPontosRepository()


@pytest.fixture
def transacao_repo():
    return InMemoryTransacaoRepository()


@pytest.fixture
def conquista_repo():
    return InMemoryConquistaRepository()


@pytest.fixture
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def conceder(pontos_repo, transacao_repo, conquista_repo, uow):
    return ConcederPontosService(pontos_repo, transacao_repo, conquista_repo, uow)


def _tipos(uow):
    return [e.event_type for e in uow.published_events]


class TestConcederPontos:
    """Testes para ConcederPontosService."""

    def test_pontos_sem_marco(self, conceder, transacao_repo, uow):
        result = conceder.execute("1", 40, "Sessão concluída")

        assert result["total_points"] == 40
        assert result["current_level"] == 1
        assert result["leveled_up"] is False
        assert result["achievements_unlocked"] == []
        assert [t.tipo for t in transacao_repo.transacoes] == [TipoTransacao.EARNED]
        assert _tipos(uow) == ["PontosConcedidosEvent"]

    def test_marco_de_pontos_com_bonus(self, conceder, transacao_repo, uow):
        result = conceder.execute("1", 100, "ORDER_COMPLETED")

        assert result["points_awarded"] == 100
        assert result["total_points"] == 105
        assert result["leveled_up"] is True
        assert [c["code"] for c in result["achievements_unlocked"]] == ["points_100"]
        assert [t.tipo for t in transacao_repo.transacoes] == [
            TipoTransacao.EARNED, TipoTransacao.BONUS,
        ]
        assert "ConquistaDesbloqueadaEvent" in _tipos(uow)

    def test_marco_desbloqueado_uma_vez(self, conceder, conquista_repo):
        conceder.execute("1", 100, "a")
        result = conceder.execute("1", 10, "b")

        assert result["total_points"] == 115
        assert result["achievements_unlocked"] == []
        assert conquista_repo.codigos_do_usuario("1") == {"points_100"}

    def test_marco_de_nivel(self, conceder):
        result = conceder.execute("1", 900, "Migração")

        codigos = [c["code"] for c in result["achievements_unlocked"]]
        assert codigos == ["points_100", "points_500", "level_5"]
        # 900 + 5 + 25 + 50 de bônus
        assert result["total_points"] == 980
        assert result["current_level"] == 5

    @pytest.mark.parametrize("pontos,motivo,campo", [
        (0, "x", "points"),
        (-5, "x", "points"),
        ("abc", "x", "points"),
        (10, "", "reason"),
        (10, "   ", "reason"),
    ])
    def test_validacao(self, conceder, pontos_repo, pontos, motivo, campo):
        with pytest.raises(ValidationError) as exc:
            conceder.execute("1", pontos, motivo)
        assert exc.value.field == campo
        assert pontos_repo.get("1") is None


class TestPontuarAcao:
    def test_acao_configurada(self, conceder):
        servico = PontuarAcaoService(conceder, PointSettings())
        result = servico.execute("1", "ORDER_PAID", metadata={"orderId": "p1"})
        assert result["points_awarded"] == 30

    def test_mesmo_pedido_pontua_uma_vez(self, conceder, pontos_repo, transacao_repo):
        """Reentrega do evento de quitação não duplica pontos."""
        servico = PontuarAcaoService(conceder, PointSettings())

        primeira = servico.execute("1", "ORDER_PAID", metadata={"order_id": "p1"})
        repetida = servico.execute("1", "ORDER_PAID", metadata={"order_id": "p1"})
        outro_pedido = servico.execute("1", "ORDER_PAID", metadata={"order_id": "p2"})

        assert primeira["total_points"] == 30
        assert repetida is None
        assert outro_pedido["total_points"] == 60
        assert pontos_repo.get("1").total_pontos == 60
        assert len(transacao_repo.transacoes) == 2

    def test_concessao_manual_nao_e_deduplicada(self, conceder, pontos_repo):
        conceder.execute("1", 10, "Bônus", metadata={"order_id": "p1"})
        conceder.execute("1", 10, "Bônus", metadata={"order_id": "p1"})

        assert pontos_repo.get("1").total_pontos == 20

    def test_acao_sem_pontos(self, conceder, pontos_repo):
        servico = PontuarAcaoService(conceder, PointSettings())
        assert servico.execute("1", "ORDER_CREATED") is None
        assert servico.execute("1", "DESCONHECIDA") is None
        assert pontos_repo.get("1") is None


class TestEstatisticasERanking:
    def test_estatisticas_de_usuario_novo(self, pontos_repo, transacao_repo, conquista_repo):
        result = EstatisticasUsuarioService(pontos_repo, transacao_repo, conquista_repo).execute("9")

        assert result["total_points"] == 0
        assert result["current_level"] == 1
        assert result["points_to_next_level"] == 100
        assert result["recent_transactions"] == []
        assert result["achievements"] == []

    def test_estatisticas_mais_recentes_primeiro(
        self, conceder, pontos_repo, transacao_repo, conquista_repo
    ):
        conceder.execute("1", 100, "a")
        result = EstatisticasUsuarioService(pontos_repo, transacao_repo, conquista_repo).execute("1")

        assert [t["type"] for t in result["recent_transactions"]] == ["BONUS", "EARNED"]
        assert len(result["achievements"]) == 1

    def test_ranking(self, conceder, pontos_repo):
        conceder.execute("1", 10, "a")
        conceder.execute("2", 50, "a")
        conceder.execute("3", 30, "a")

        ranking = RankingService(pontos_repo).execute(limite=2)
        assert [(r["position"], r["user_id"]) for r in ranking] == [(1, "2"), (2, "3")]

    @pytest.mark.parametrize("limite,esperado", [(0, 1), (-3, 1), (500, 3)])
    def test_ranking_limite_normalizado(self, conceder, pontos_repo, limite, esperado):
        for usuario in ("1", "2", "3"):
            conceder.execute(usuario, 10, "a")
        assert len(RankingService(pontos_repo).execute(limite=limite)) == esperado
