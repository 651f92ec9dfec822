"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, clients, fila de sync)
- Factory: Nova instância por chamada (services, UoW)

As classes são importadas sob demanda (`_lazy`): o container é
importado antes dos apps Django estarem prontos e os repositories
dependem dos models.
"""

from importlib import import_module
from typing import Optional
import logging

from dependency_injector import containers, providers
from django.conf import settings

logger = logging.getLogger(__name__)


def _lazy(path: str):
    """Callable que importa `modulo.Classe` só quando instanciado."""
    module_name, _, attr = path.rpartition('.')

    def factory(*args, **kwargs):
        return getattr(import_module(module_name), attr)(*args, **kwargs)

    factory.__name__ = attr
    return factory


def _build_event_publisher():
    """
    Publisher conforme EVENT_PUBLISHER_MODE.

    - 'celery': CeleryEventPublisher (produção)
    - 'sync': LoggingEventPublisher; PedidoQuitado é tratado no próprio
      processo para a gamificação funcionar sem broker
    """
    from src.adapters.django_app.events.publishers import get_event_publisher

    mode = getattr(settings, 'EVENT_PUBLISHER_MODE', 'sync')
    publisher = get_event_publisher(use_celery=(mode == 'celery'))

    if mode != 'celery':
        from src.adapters.django_app.events.handlers import handle_pedido_quitado

        publisher.register_handler(
            'PedidoQuitadoEvent',
            lambda event: handle_pedido_quitado(event.to_dict()),
        )

    logger.info(f"Event publisher: {publisher.__class__.__name__} (modo {mode})")
    return publisher


def _build_point_settings():
    from src.core.gamificacao.pontuacao import PointSettings

    return PointSettings.from_mapping(getattr(settings, 'GAMIFICATION_POINTS', None))


def _build_calendar_clients(google, outlook):
    from src.core.calendario.entities import Provedor

    return {Provedor.GOOGLE: google, Provedor.OUTLOOK: outlook}


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Organização:
    - Infrastructure: Event publisher, clients HTTP, diretório de usuários
    - Repositories: Persistência
    - Unit of Work: Transações
    - Services: Use Cases

    Example:
        from src.config.container import get_container

        service = get_container().criar_terapia_service()
        result = service.execute(input_dto)
    """

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(_build_event_publisher)

    usuarios = providers.Singleton(
        _lazy('src.adapters.django_app.shared.usuarios.DjangoDiretorioUsuarios')
    )

    notificador = providers.Singleton(
        _lazy('src.adapters.django_app.notificacoes.services.DjangoNotificador')
    )

    point_settings = providers.Singleton(_build_point_settings)

    google_calendar_client = providers.Singleton(
        _lazy('src.adapters.django_app.calendario.gateways.GoogleCalendarClient'),
        base_url=getattr(settings, 'GOOGLE_CALENDAR_API_URL',
                         'https://www.googleapis.com/calendar/v3'),
        token_url=getattr(settings, 'GOOGLE_OAUTH_TOKEN_URL',
                          'https://oauth2.googleapis.com/token'),
        client_id=getattr(settings, 'GOOGLE_CLIENT_ID', ''),
        client_secret=getattr(settings, 'GOOGLE_CLIENT_SECRET', ''),
        timeout=getattr(settings, 'CALENDAR_HTTP_TIMEOUT', 30.0),
    )

    outlook_calendar_client = providers.Singleton(
        _lazy('src.adapters.django_app.calendario.gateways.OutlookCalendarClient'),
        base_url=getattr(settings, 'MICROSOFT_GRAPH_API_URL',
                         'https://graph.microsoft.com/v1.0'),
        token_url=getattr(settings, 'MICROSOFT_OAUTH_TOKEN_URL',
                          'https://login.microsoftonline.com/common/oauth2/v2.0/token'),
        client_id=getattr(settings, 'MICROSOFT_CLIENT_ID', ''),
        client_secret=getattr(settings, 'MICROSOFT_CLIENT_SECRET', ''),
        timeout=getattr(settings, 'CALENDAR_HTTP_TIMEOUT', 30.0),
    )

    # =========================================================================
    # Repositories (Singleton - uma instância por app)
    # =========================================================================

    pedido_repository = providers.Singleton(
        _lazy('src.adapters.django_app.atendimentos.repositories.DjangoPedidoRepository')
    )

    terapia_repository = providers.Singleton(
        _lazy('src.adapters.django_app.atendimentos.repositories.DjangoTerapiaRepository')
    )

    processo_repository = providers.Singleton(
        _lazy('src.adapters.django_app.atendimentos.repositories.DjangoProcessoRepository'),
        pedido_repo=pedido_repository,
    )

    sessao_avulsa_repository = providers.Singleton(
        _lazy('src.adapters.django_app.atendimentos.repositories.DjangoSessaoAvulsaRepository'),
        pedido_repo=pedido_repository,
    )

    integracao_repository = providers.Singleton(
        _lazy('src.adapters.django_app.calendario.repositories.DjangoIntegracaoRepository')
    )

    evento_externo_repository = providers.Singleton(
        _lazy('src.adapters.django_app.calendario.repositories.DjangoEventoExternoRepository')
    )

    pontos_repository = providers.Singleton(
        _lazy('src.adapters.django_app.gamificacao.repositories.DjangoPontosRepository')
    )

    transacao_repository = providers.Singleton(
        _lazy('src.adapters.django_app.gamificacao.repositories.DjangoTransacaoRepository')
    )

    conquista_repository = providers.Singleton(
        _lazy('src.adapters.django_app.gamificacao.repositories.DjangoConquistaRepository')
    )

    # =========================================================================
    # Unit of Work (Factory - nova instância por operação)
    # =========================================================================

    unit_of_work = providers.Factory(
        _lazy('src.adapters.django_app.shared.unit_of_work.DjangoUnitOfWork'),
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services - Terapias
    # =========================================================================

    listar_terapias_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ListarTerapiasService'),
        terapia_repo=terapia_repository,
    )

    obter_terapia_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ObterTerapiaService'),
        terapia_repo=terapia_repository,
    )

    criar_terapia_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.CriarTerapiaService'),
        terapia_repo=terapia_repository,
        uow=unit_of_work,
    )

    atualizar_terapia_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.AtualizarTerapiaService'),
        terapia_repo=terapia_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Processos terapêuticos
    # =========================================================================

    listar_processos_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ListarProcessosService'),
        processo_repo=processo_repository,
    )

    obter_processo_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ObterProcessoService'),
        processo_repo=processo_repository,
    )

    criar_processo_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.CriarProcessoService'),
        processo_repo=processo_repository,
        usuarios=usuarios,
        uow=unit_of_work,
    )

    adicionar_item_orcamento_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.AdicionarItemOrcamentoService'),
        processo_repo=processo_repository,
        terapia_repo=terapia_repository,
        uow=unit_of_work,
    )

    remover_item_orcamento_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.RemoverItemOrcamentoService'),
        processo_repo=processo_repository,
        uow=unit_of_work,
    )

    atualizar_processo_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.AtualizarProcessoService'),
        processo_repo=processo_repository,
        uow=unit_of_work,
    )

    atualizar_sessao_processo_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.AtualizarSessaoProcessoService'),
        processo_repo=processo_repository,
        usuarios=usuarios,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Sessões avulsas
    # =========================================================================

    listar_sessoes_avulsas_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ListarSessoesAvulsasService'),
        sessao_repo=sessao_avulsa_repository,
    )

    obter_sessao_avulsa_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ObterSessaoAvulsaService'),
        sessao_repo=sessao_avulsa_repository,
    )

    criar_sessao_avulsa_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.CriarSessaoAvulsaService'),
        sessao_repo=sessao_avulsa_repository,
        terapia_repo=terapia_repository,
        usuarios=usuarios,
        uow=unit_of_work,
    )

    atualizar_sessao_avulsa_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.AtualizarSessaoAvulsaService'),
        sessao_repo=sessao_avulsa_repository,
        usuarios=usuarios,
        uow=unit_of_work,
    )

    excluir_sessao_avulsa_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ExcluirSessaoAvulsaService'),
        sessao_repo=sessao_avulsa_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Financeiro
    # =========================================================================

    listar_parcelas_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.ListarParcelasService'),
        pedido_repo=pedido_repository,
    )

    registrar_pagamento_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.RegistrarPagamentoService'),
        pedido_repo=pedido_repository,
        uow=unit_of_work,
    )

    estornar_pagamento_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.EstornarPagamentoService'),
        pedido_repo=pedido_repository,
        uow=unit_of_work,
    )

    cancelar_parcela_service = providers.Factory(
        _lazy('src.core.atendimentos.use_cases.CancelarParcelaService'),
        pedido_repo=pedido_repository,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Calendário
    # =========================================================================

    calendar_clients = providers.Singleton(
        _build_calendar_clients,
        google=google_calendar_client,
        outlook=outlook_calendar_client,
    )

    calendar_synchronizer = providers.Singleton(
        _lazy('src.core.calendario.sync_service.CalendarSynchronizer'),
        clientes=calendar_clients,
        evento_repo=evento_externo_repository,
        integracao_repo=integracao_repository,
    )

    # Fila de sincronização: uma por processo
    calendar_sync_service = providers.Singleton(
        _lazy('src.core.calendario.sync_service.CalendarSyncService'),
        integracao_repo=integracao_repository,
        synchronizer=calendar_synchronizer,
        notificador=notificador,
    )

    listar_integracoes_service = providers.Factory(
        _lazy('src.core.calendario.use_cases.ListarIntegracoesService'),
        integracao_repo=integracao_repository,
    )

    criar_integracao_service = providers.Factory(
        _lazy('src.core.calendario.use_cases.CriarIntegracaoService'),
        integracao_repo=integracao_repository,
        uow=unit_of_work,
    )

    atualizar_integracao_service = providers.Factory(
        _lazy('src.core.calendario.use_cases.AtualizarIntegracaoService'),
        integracao_repo=integracao_repository,
        uow=unit_of_work,
    )

    excluir_integracao_service = providers.Factory(
        _lazy('src.core.calendario.use_cases.ExcluirIntegracaoService'),
        integracao_repo=integracao_repository,
        sync_service=calendar_sync_service,
        uow=unit_of_work,
    )

    # =========================================================================
    # Services - Gamificação
    # =========================================================================

    conceder_pontos_service = providers.Factory(
        _lazy('src.core.gamificacao.use_cases.ConcederPontosService'),
        pontos_repo=pontos_repository,
        transacao_repo=transacao_repository,
        conquista_repo=conquista_repository,
        uow=unit_of_work,
        point_settings=point_settings,
    )

    pontuar_acao_service = providers.Factory(
        _lazy('src.core.gamificacao.use_cases.PontuarAcaoService'),
        conceder=conceder_pontos_service,
        point_settings=point_settings,
    )

    estatisticas_usuario_service = providers.Factory(
        _lazy('src.core.gamificacao.use_cases.EstatisticasUsuarioService'),
        pontos_repo=pontos_repository,
        transacao_repo=transacao_repository,
        conquista_repo=conquista_repository,
    )

    ranking_service = providers.Factory(
        _lazy('src.core.gamificacao.use_cases.RankingService'),
        pontos_repo=pontos_repository,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container.

    Cria se não existir (lazy initialization).
    """
    global _container

    if _container is None:
        _container = Container()

    return _container


def reset_container() -> None:
    """
    Reset do container (para testes).

    Permite criar novo container limpo.
    """
    global _container
    _container = None
