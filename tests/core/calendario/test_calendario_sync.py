"""
Testes Unitários da Sincronização de Calendários.

Cobre:
- Regras de elegibilidade da integração (frequência, ativa)
- CalendarSynchronizer (importação, atualização, falha do provedor)
- CalendarSyncService (fila, jobs manuais, notificações)
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.calendario.entities import (
    CalendarProviderError,
    EventoExterno,
    FrequenciaSincronizacao,
    IntegracaoCalendario,
    Provedor,
    StatusSincronizacao,
    SyncJob,
)
from src.core.calendario.ports import (
    InMemoryEventoExternoRepository,
    InMemoryIntegracaoRepository,
    InMemoryNotificador,
)
from src.core.calendario.sync_service import CalendarSynchronizer, CalendarSyncService
from src.core.shared.exceptions import EntityNotFoundError, ValidationError

AGORA = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeCalendarClient:
    """Cliente de provedor com eventos fixos; registra as chamadas."""

    def __init__(self, eventos=None, erro=None, erro_renovacao=None, log=None):
        self.eventos = eventos or []
        self.erro = erro
        self.erro_renovacao = erro_renovacao
        self.chamadas = []
        self.log = log if log is not None else []

    def renovar_token(self, integracao):
        self.log.append(("renovar", integracao.refresh_token))
        if self.erro_renovacao:
            raise self.erro_renovacao
        return "token-novo", "refresh-novo"

    def listar_eventos(self, integracao, desde=None):
        self.chamadas.append((integracao.id, desde))
        self.log.append(("listar", integracao.access_token))
        if self.erro:
            raise self.erro
        return list(self.eventos)


class RepoQueRegistraTokens(InMemoryIntegracaoRepository):
    def __init__(self, log):
        super().__init__()
        self.log = log

    def save(self, integracao):
        self.log.append(("salvar", integracao.access_token))
        super().save(integracao)


def _evento(id_externo, titulo="Consulta"):
    return EventoExterno(
        id_externo=id_externo,
        titulo=titulo,
        inicio=AGORA,
        fim=AGORA + timedelta(hours=1),
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def integracao_repo():
    return InMemoryIntegracaoRepository()


@pytest.fixture
def evento_repo():
    return InMemoryEventoExternoRepository()


@pytest.fixture
def notificador():
    return InMemoryNotificador()


@pytest.fixture
def cliente():
    return FakeCalendarClient(eventos=[_evento("a"), _evento("b")])


@pytest.fixture
def service(integracao_repo, evento_repo, notificador, cliente):
    synchronizer = CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo)
    return CalendarSyncService(
        integracao_repo, synchronizer, notificador, relogio=lambda: AGORA
    )


@pytest.fixture
def integracao(integracao_repo):
    integracao = IntegracaoCalendario.criar(
        usuario_id="5", provedor="google", access_token="token"
    )
    integracao_repo.save(integracao)
    return integracao


# =============================================================================
# Entidade
# =============================================================================

class TestIntegracaoCalendario:
    """Testes das regras da integração."""

    def test_criar_normaliza_valores(self):
        integracao = IntegracaoCalendario.criar(
            usuario_id=5, provedor="outlook", access_token="t", calendario_id="",
            frequencia="HOURLY",
        )
        assert integracao.usuario_id == "5"
        assert integracao.provedor == Provedor.OUTLOOK
        assert integracao.calendario_id == "primary"
        assert integracao.frequencia == FrequenciaSincronizacao.HOURLY

    def test_criar_sem_token(self):
        with pytest.raises(ValidationError) as exc:
            IntegracaoCalendario.criar(usuario_id="5", provedor="google", access_token="")
        assert exc.value.field == "access_token"

    def test_provedor_invalido(self):
        with pytest.raises(ValidationError) as exc:
            IntegracaoCalendario.criar(usuario_id="5", provedor="yahoo", access_token="t")
        assert exc.value.field == "provider"

    @pytest.mark.parametrize("frequencia,decorrido,esperado", [
        ("hourly", timedelta(minutes=59), False),
        ("hourly", timedelta(hours=1), True),
        ("daily", timedelta(hours=23), False),
        ("daily", timedelta(hours=24), True),
        ("weekly", timedelta(days=6), False),
        ("weekly", timedelta(days=7), True),
        ("manual", timedelta(days=365), False),
    ])
    def test_precisa_sincronizar_por_frequencia(self, frequencia, decorrido, esperado):
        integracao = IntegracaoCalendario.criar(
            usuario_id="5", provedor="google", access_token="t", frequencia=frequencia
        )
        integracao.ultima_sincronizacao = AGORA - decorrido
        assert integracao.precisa_sincronizar(AGORA) is esperado

    def test_nunca_sincronizada_e_elegivel(self, integracao):
        assert integracao.precisa_sincronizar(AGORA)

    def test_inativa_ou_desabilitada_nao_sincroniza(self, integracao):
        integracao.ativa = False
        assert not integracao.precisa_sincronizar(AGORA)
        integracao.ativa = True
        integracao.sincronizacao_habilitada = False
        assert not integracao.precisa_sincronizar(AGORA)

    def test_to_dict_nao_expoe_tokens(self, integracao):
        data = integracao.to_dict()
        assert "access_token" not in data
        assert data["provider"] == "GOOGLE"
        assert data["sync_frequency"] == "daily"


class TestSyncJob:
    def test_id_inclui_origem_e_integracao(self, integracao):
        job = SyncJob.para(integracao, "manual", AGORA)
        assert job.id == f"manual-{integracao.id}-{int(AGORA.timestamp() * 1000)}"
        assert job.usuario_id == "5"
        assert job.to_dict()["provider"] == "GOOGLE"


# =============================================================================
# Sincronizador
# =============================================================================

class TestCalendarSynchronizer:
    """Testes para CalendarSynchronizer."""

    def test_importa_e_atualiza(self, integracao, evento_repo, cliente):
        synchronizer = CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo)

        primeiro = synchronizer.sincronizar(integracao)
        assert (primeiro.imported, primeiro.updated) == (2, 0)

        cliente.eventos.append(_evento("c"))
        segundo = synchronizer.sincronizar(integracao, desde=AGORA)
        assert (segundo.imported, segundo.updated) == (1, 2)
        assert segundo.eventos_processados == 3
        assert cliente.chamadas[-1] == (integracao.id, AGORA)
        assert len(evento_repo.list_by_integracao(integracao.id)) == 3

    def test_falha_do_provedor_vira_resultado(self, integracao, evento_repo):
        cliente = FakeCalendarClient(
            erro=CalendarProviderError("GOOGLE API error: 500", provider="GOOGLE", status_code=500)
        )
        resultado = CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo).sincronizar(integracao)

        assert resultado.success is False
        assert resultado.errors == ["GOOGLE API error: 500"]

    def test_provedor_sem_cliente(self, evento_repo):
        integracao = IntegracaoCalendario.criar(
            usuario_id="5", provedor="outlook", access_token="t"
        )
        resultado = CalendarSynchronizer({}, evento_repo).sincronizar(integracao)
        assert resultado.success is False
        assert "OUTLOOK" in resultado.mensagem_erro

    def test_renova_e_salva_token_antes_de_listar(self, evento_repo):
        log = []
        repo = RepoQueRegistraTokens(log)
        cliente = FakeCalendarClient(eventos=[_evento("a")], log=log)
        integracao = IntegracaoCalendario.criar(
            usuario_id="5", provedor="google", access_token="expirado", refresh_token="ref"
        )

        resultado = CalendarSynchronizer(
            {Provedor.GOOGLE: cliente}, evento_repo, integracao_repo=repo
        ).sincronizar(integracao)

        assert resultado.success is True
        assert log == [
            ("renovar", "ref"),
            ("salvar", "token-novo"),
            ("listar", "token-novo"),
        ]
        salva = repo.get_by_id(integracao.id)
        assert (salva.access_token, salva.refresh_token) == ("token-novo", "refresh-novo")

    def test_falha_na_renovacao_interrompe_sincronizacao(self, evento_repo, integracao_repo):
        cliente = FakeCalendarClient(
            eventos=[_evento("a")],
            erro_renovacao=CalendarProviderError("GOOGLE: renovação de token recusada (400)"),
        )
        integracao = IntegracaoCalendario.criar(
            usuario_id="5", provedor="google", access_token="expirado", refresh_token="ref"
        )

        resultado = CalendarSynchronizer(
            {Provedor.GOOGLE: cliente}, evento_repo, integracao_repo=integracao_repo
        ).sincronizar(integracao)

        assert resultado.success is False
        assert resultado.errors == ["Failed to refresh access token"]
        assert cliente.chamadas == []
        assert integracao.access_token == "expirado"
        assert evento_repo.list_by_integracao(integracao.id) == []

    def test_sem_refresh_token_usa_token_atual(self, integracao, evento_repo, cliente):
        CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo).sincronizar(integracao)

        assert cliente.log == [("listar", "token")]


# =============================================================================
# Fila de sincronização
# =============================================================================

class TestCalendarSyncService:
    """Testes para CalendarSyncService."""

    def test_agenda_apenas_elegiveis_sem_duplicar(self, service, integracao_repo, integracao):
        recente = IntegracaoCalendario.criar(usuario_id="6", provedor="google", access_token="t")
        recente.ultima_sincronizacao = AGORA - timedelta(hours=1)
        integracao_repo.save(recente)

        assert service.schedule_automatic_syncs() == 1
        assert service.schedule_automatic_syncs() == 0

        status = service.get_sync_queue_status()
        assert status["queue_length"] == 1
        assert status["is_processing"] is False
        assert status["next_job"]["integration_id"] == integracao.id
        assert status["next_job"]["id"].startswith("auto-")

    def test_processa_fila_com_sucesso(self, service, integracao, notificador):
        service.schedule_automatic_syncs()

        assert service.process_sync_queue() == 1
        assert service.get_sync_queue_status()["queue_length"] == 0

        assert integracao.status_sincronizacao == StatusSincronizacao.SYNCED
        assert integracao.ultima_sincronizacao == AGORA
        assert integracao.erro_sincronizacao is None

        notificacao = notificador.notificacoes[-1]
        assert notificacao["tipo"] == "sync_success"
        assert notificacao["usuario_id"] == "5"
        assert notificacao["dados"]["eventsProcessed"] == 2

    def test_sincronizacao_incremental(self, service, integracao, cliente):
        anterior = AGORA - timedelta(days=2)
        integracao.ultima_sincronizacao = anterior

        service.trigger_manual_sync("5", integracao.id)

        assert cliente.chamadas == [(integracao.id, anterior)]

    def test_falha_registra_status_e_notifica(
        self, integracao_repo, evento_repo, notificador, integracao
    ):
        cliente = FakeCalendarClient(erro=CalendarProviderError("token expirado"))
        service = CalendarSyncService(
            integracao_repo,
            CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo),
            notificador,
            relogio=lambda: AGORA,
        )

        service.trigger_manual_sync("5", integracao.id)

        assert integracao.status_sincronizacao == StatusSincronizacao.FAILED
        assert integracao.erro_sincronizacao == "token expirado"
        assert notificador.notificacoes[-1]["tipo"] == "sync_error"
        assert "token expirado" in notificador.notificacoes[-1]["mensagem"]
        assert notificador.notificacoes[-1]["dados"]["error"] == "token expirado"

    def test_token_nao_renovado_falha_e_notifica(self, integracao_repo, evento_repo, notificador):
        integracao = IntegracaoCalendario.criar(
            usuario_id="5", provedor="google", access_token="expirado", refresh_token="revogado"
        )
        integracao_repo.save(integracao)
        cliente = FakeCalendarClient(erro_renovacao=CalendarProviderError("invalid_grant"))
        service = CalendarSyncService(
            integracao_repo,
            CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo, integracao_repo),
            notificador,
            relogio=lambda: AGORA,
        )

        service.trigger_manual_sync("5", integracao.id)

        assert integracao.status_sincronizacao == StatusSincronizacao.FAILED
        assert integracao.erro_sincronizacao == "Failed to refresh access token"
        assert notificador.notificacoes[-1]["dados"]["error"] == "Failed to refresh access token"

    def test_erro_inesperado_nao_escapa(self, integracao_repo, evento_repo, notificador, integracao):
        cliente = FakeCalendarClient(erro=RuntimeError("boom"))
        service = CalendarSyncService(
            integracao_repo,
            CalendarSynchronizer({Provedor.GOOGLE: cliente}, evento_repo),
            notificador,
            relogio=lambda: AGORA,
        )

        resultado = service.process_sync_job(SyncJob.para(integracao, "auto", AGORA))

        assert resultado.success is False
        assert integracao.status_sincronizacao == StatusSincronizacao.FAILED
        assert notificador.notificacoes[-1]["tipo"] == "sync_error"
        assert notificador.notificacoes[-1]["dados"] == {
            "integrationId": integracao.id,
            "provider": "GOOGLE",
            "error": "boom",
        }

    def test_job_futuro_permanece_na_fila(self, service, integracao, cliente):
        service.add_sync_job(SyncJob.para(integracao, "auto", AGORA + timedelta(minutes=5)))

        assert service.get_sync_queue_status()["queue_length"] == 1
        assert cliente.chamadas == []

    def test_job_de_integracao_inativa_e_ignorado(self, service, integracao, notificador):
        integracao.ativa = False
        assert service.process_sync_job(SyncJob.para(integracao, "auto", AGORA)) is None
        assert notificador.notificacoes == []

    def test_sincronizacao_manual_de_outro_usuario(self, service, integracao):
        with pytest.raises(EntityNotFoundError):
            service.trigger_manual_sync("99", integracao.id)

    def test_sincronizacao_manual_processa_imediatamente(self, service, integracao, evento_repo):
        job = service.trigger_manual_sync("5", integracao.id)

        assert job.id.startswith("manual-")
        assert len(evento_repo.list_by_integracao(integracao.id)) == 2
        assert service.get_sync_queue_status()["queue_length"] == 0

    def test_limpeza_de_jobs(self, service, integracao_repo, integracao):
        outra = IntegracaoCalendario.criar(usuario_id="6", provedor="google", access_token="t")
        integracao_repo.save(outra)
        futuro = AGORA + timedelta(hours=1)
        service.add_sync_job(SyncJob.para(integracao, "auto", futuro))
        service.add_sync_job(SyncJob.para(outra, "auto", futuro))

        assert service.clear_user_sync_jobs("5") == 1
        assert service.remover_jobs_da_integracao(outra.id) == 1
        assert service.get_sync_queue_status()["next_job"] is None
