"""
Testes Unitários para Use Cases do Domínio de Atendimentos.

Estratégia de Teste:
- Repositórios em memória (fakes) para isolamento
- InMemoryUnitOfWork para verificar commit e eventos publicados
- Cenários de sucesso e erro

Coverage:
- Terapias: criar, atualizar, obter
- Processos: criar, orçamento, início do tratamento, sessões
- Sessões avulsas: criar, atualizar, excluir
- Financeiro: listagem, pagamento, estorno, cancelamento
"""

from datetime import date
from decimal import Decimal

import pytest

from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.atendimentos.dtos import (
    AdicionarItemOrcamentoInputDTO,
    AtualizarProcessoInputDTO,
    AtualizarSessaoAvulsaInputDTO,
    AtualizarSessaoProcessoInputDTO,
    AtualizarTerapiaInputDTO,
    CriarProcessoInputDTO,
    CriarSessaoAvulsaInputDTO,
    CriarTerapiaInputDTO,
    ListarParcelasQueryDTO,
    RegistrarPagamentoInputDTO,
)
from src.core.atendimentos.entities import Terapia
from src.core.atendimentos.ports import (
    InMemoryDiretorioUsuarios,
    InMemoryPedidoRepository,
    InMemoryProcessoRepository,
    InMemorySessaoAvulsaRepository,
    InMemoryTerapiaRepository,
)
from src.core.atendimentos.use_cases import (
    AdicionarItemOrcamentoService,
    AtualizarProcessoService,
    AtualizarSessaoAvulsaService,
    AtualizarSessaoProcessoService,
    AtualizarTerapiaService,
    CancelarParcelaService,
    CriarProcessoService,
    CriarSessaoAvulsaService,
    CriarTerapiaService,
    EstornarPagamentoService,
    ExcluirSessaoAvulsaService,
    ListarParcelasService,
    ListarProcessosService,
    ObterTerapiaService,
    RegistrarPagamentoService,
    RemoverItemOrcamentoService,
)
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)

PACIENTE = "7"
TERAPEUTA = "3"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def uow():
    return InMemoryUnitOfWork()


@pytest.fixture
def usuarios():
    return InMemoryDiretorioUsuarios(usuarios={PACIENTE, "1"}, terapeutas={TERAPEUTA})


@pytest.fixture
def terapia_repo():
    return InMemoryTerapiaRepository()


@pytest.fixture
def pedido_repo():
    return InMemoryPedidoRepository()


@pytest.fixture
def processo_repo(pedido_repo):
    return InMemoryProcessoRepository(pedido_repo)


@pytest.fixture
def sessao_repo(pedido_repo):
    return InMemorySessaoAvulsaRepository(pedido_repo)


@pytest.fixture
def terapia(terapia_repo):
    terapia = Terapia.criar(nome="Reiki", valor="100.00", sessoes_padrao=1,
                            valor_sessao_avulsa="120.00")
    terapia_repo.save(terapia)
    return terapia


@pytest.fixture
def processo(processo_repo, usuarios, uow):
    return CriarProcessoService(processo_repo, usuarios, uow).execute(
        CriarProcessoInputDTO(paciente_id=PACIENTE, criado_por_id="1", observacoes="Inicial")
    )


def _iniciar_tratamento(processo_repo, uow, processo_id, parcelas=3):
    return AtualizarProcessoService(processo_repo, uow).execute(
        AtualizarProcessoInputDTO(
            processo_id=processo_id,
            status="IN_TREATMENT",
            forma_pagamento="PIX",
            modo_vencimento="AUTOMATIC_MONTHLY",
            quantidade_parcelas=parcelas,
            primeiro_vencimento=date(2024, 1, 31),
        )
    )


def _eventos(uow, tipo):
    return [e for e in uow.published_events if e.event_type == tipo]


# =============================================================================
# Terapias
# =============================================================================

class TestTerapias:
    """Testes para os use cases de terapia."""

    def test_criar_terapia(self, terapia_repo, uow):
        result = CriarTerapiaService(terapia_repo, uow).execute(
            CriarTerapiaInputDTO(nome="Reiki", valor=Decimal("150"), sessoes_padrao=4)
        )
        assert uow.committed
        assert result.valor == Decimal("150.00")
        assert terapia_repo.get_by_id(result.id).sessoes_padrao == 4
        assert result.to_dict()["value"] == "150.00"

    def test_criar_terapia_invalida_nao_persiste(self, terapia_repo, uow):
        with pytest.raises(ValidationError):
            CriarTerapiaService(terapia_repo, uow).execute(
                CriarTerapiaInputDTO(nome="", valor=Decimal("10"))
            )
        assert uow.rolled_back
        assert terapia_repo.list_all() == []

    def test_atualizar_terapia(self, terapia_repo, uow, terapia):
        result = AtualizarTerapiaService(terapia_repo, uow).execute(
            AtualizarTerapiaInputDTO(terapia_id=terapia.id, ativa=False)
        )
        assert result.ativa is False
        assert result.nome == "Reiki"

    def test_obter_terapia_inexistente(self, terapia_repo):
        with pytest.raises(EntityNotFoundError):
            ObterTerapiaService(terapia_repo).execute("nao-existe")


# =============================================================================
# Processos
# =============================================================================

class TestProcessos:
    """Testes para CriarProcessoService e orçamento."""

    def test_criar_processo_publica_evento(self, processo, uow):
        assert processo.status == "IN_ANALYSIS"
        assert processo.observacoes == "Inicial"
        eventos = _eventos(uow, "ProcessoCriadoEvent")
        assert len(eventos) == 1
        assert eventos[0].paciente_id == PACIENTE

    def test_criar_processo_paciente_inexistente(self, processo_repo, usuarios, uow):
        with pytest.raises(EntityNotFoundError):
            CriarProcessoService(processo_repo, usuarios, uow).execute(
                CriarProcessoInputDTO(paciente_id="999")
            )

    def test_adicionar_e_remover_item(self, processo_repo, terapia_repo, uow, processo, terapia):
        result = AdicionarItemOrcamentoService(processo_repo, terapia_repo, uow).execute(
            AdicionarItemOrcamentoInputDTO(
                processo_id=processo.id, terapia_id=terapia.id,
                quantidade=2, desconto=Decimal("10"),
            )
        )
        assert result.resumo["budget_total"] == Decimal("190.00")
        item_id = result.itens[0]["id"]

        result = RemoverItemOrcamentoService(processo_repo, uow).execute(processo.id, item_id)
        assert result.itens == []

    def test_adicionar_item_terapia_inexistente(self, processo_repo, terapia_repo, uow, processo):
        with pytest.raises(EntityNotFoundError):
            AdicionarItemOrcamentoService(processo_repo, terapia_repo, uow).execute(
                AdicionarItemOrcamentoInputDTO(processo_id=processo.id, terapia_id="x")
            )

    def test_listar_por_paciente(self, processo_repo, processo):
        assert [p.id for p in ListarProcessosService(processo_repo).execute(paciente_id=PACIENTE)] == [processo.id]
        assert ListarProcessosService(processo_repo).execute(paciente_id="1") == []


class TestInicioTratamento:
    """Testes para AtualizarProcessoService."""

    @pytest.fixture
    def processo_orcado(self, processo_repo, terapia_repo, uow, processo, terapia):
        AdicionarItemOrcamentoService(processo_repo, terapia_repo, uow).execute(
            AdicionarItemOrcamentoInputDTO(
                processo_id=processo.id, terapia_id=terapia.id, quantidade=3
            )
        )
        return processo

    def test_exige_dados_de_pagamento(self, processo_repo, uow, processo_orcado):
        with pytest.raises(ValidationError) as exc:
            AtualizarProcessoService(processo_repo, uow).execute(
                AtualizarProcessoInputDTO(processo_id=processo_orcado.id, status="IN_TREATMENT")
            )
        assert exc.value.field == "payment"
        assert processo_repo.get_by_id(processo_orcado.id).pedido is None

    def test_inicia_tratamento(self, processo_repo, pedido_repo, uow, processo_orcado):
        result = _iniciar_tratamento(processo_repo, uow, processo_orcado.id)

        assert result.status == "IN_TREATMENT"
        assert len(result.sessoes) == 3
        assert result.pedido.valor_total == Decimal("300.00")
        assert [p.vencimento for p in result.pedido.parcelas] == [
            date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31),
        ]
        assert pedido_repo.get_by_id(result.pedido.id) is not None

        assert len(_eventos(uow, "TratamentoIniciadoEvent")) == 1
        alterado = _eventos(uow, "ProcessoStatusAlteradoEvent")[0]
        assert (alterado.status_anterior, alterado.novo_status) == ("IN_ANALYSIS", "IN_TREATMENT")

    def test_transicao_invalida(self, processo_repo, uow, processo_orcado):
        with pytest.raises(BusinessRuleViolationError):
            AtualizarProcessoService(processo_repo, uow).execute(
                AtualizarProcessoInputDTO(processo_id=processo_orcado.id, status="FINISHED")
            )

    def test_apenas_observacoes(self, processo_repo, uow, processo_orcado):
        result = AtualizarProcessoService(processo_repo, uow).execute(
            AtualizarProcessoInputDTO(processo_id=processo_orcado.id, observacoes="  Nova  ")
        )
        assert result.observacoes == "Nova"
        assert result.status == "IN_ANALYSIS"

    def test_atualizar_sessao_do_processo(self, processo_repo, usuarios, uow, processo_orcado):
        result = _iniciar_tratamento(processo_repo, uow, processo_orcado.id)
        sessao_id = result.sessoes[0]["id"]

        result = AtualizarSessaoProcessoService(processo_repo, usuarios, uow).execute(
            AtualizarSessaoProcessoInputDTO(
                processo_id=processo_orcado.id,
                sessao_id=sessao_id,
                status="COMPLETED",
                terapeuta_id=TERAPEUTA,
                modo="ONLINE",
            )
        )
        sessao = result.sessoes[0]
        assert sessao["status"] == "COMPLETED"
        assert sessao["therapist_user_id"] == TERAPEUTA
        assert sessao["mode"] == "ONLINE"
        assert sessao["completed_at"] is not None
        assert result.resumo["completed_sessions"] == 1

    def test_sessao_com_terapeuta_invalido(self, processo_repo, usuarios, uow, processo_orcado):
        result = _iniciar_tratamento(processo_repo, uow, processo_orcado.id)
        with pytest.raises(ValidationError) as exc:
            AtualizarSessaoProcessoService(processo_repo, usuarios, uow).execute(
                AtualizarSessaoProcessoInputDTO(
                    processo_id=processo_orcado.id,
                    sessao_id=result.sessoes[0]["id"],
                    terapeuta_id=PACIENTE,
                )
            )
        assert exc.value.field == "therapist_user_id"


# =============================================================================
# Sessões avulsas
# =============================================================================

class TestSessoesAvulsas:
    """Testes para os use cases de sessão avulsa."""

    @pytest.fixture
    def criar(self, sessao_repo, terapia_repo, usuarios, uow):
        def _criar(**kwargs):
            dados = dict(
                paciente_id=PACIENTE,
                forma_pagamento="NUBANK",
                modo_vencimento="MANUAL",
                quantidade_parcelas=2,
                vencimentos_manuais=("2024-05-10", "2024-06-10"),
            )
            dados.update(kwargs)
            return CriarSessaoAvulsaService(sessao_repo, terapia_repo, usuarios, uow).execute(
                CriarSessaoAvulsaInputDTO(**dados)
            )
        return _criar

    def test_criar_com_valor_avulso_da_terapia(self, criar, terapia, uow):
        result = criar(terapia_id=terapia.id, terapeuta_id=TERAPEUTA)

        assert result.valor_cobrado == Decimal("120.00")
        assert result.terapia_nome == "Reiki"
        assert [p.valor for p in result.pedido.parcelas] == [Decimal("60.00")] * 2
        assert result.pedido.modo_vencimento == "MANUAL"
        assert len(_eventos(uow, "SessaoAvulsaCriadaEvent")) == 1

    def test_criar_com_valor_informado(self, criar, terapia):
        result = criar(terapia_id=terapia.id, valor_cobrado=Decimal("99.99"),
                       quantidade_parcelas=1, vencimentos_manuais=("2024-05-10",))
        assert result.pedido.valor_total == Decimal("99.99")

    def test_terapia_inexistente(self, criar):
        with pytest.raises(EntityNotFoundError):
            criar(terapia_id="nao-existe")

    def test_paciente_inexistente(self, criar, terapia):
        with pytest.raises(EntityNotFoundError):
            criar(terapia_id=terapia.id, paciente_id="404")

    def test_datas_manuais_incompletas(self, criar, terapia, sessao_repo):
        with pytest.raises(ValidationError):
            criar(terapia_id=terapia.id, vencimentos_manuais=("2024-05-10",))
        assert sessao_repo.list_all() == []

    def test_alterar_valor_apos_pagamento(self, criar, terapia, sessao_repo, pedido_repo,
                                          usuarios, uow):
        result = criar(terapia_id=terapia.id)
        RegistrarPagamentoService(pedido_repo, uow).execute(
            RegistrarPagamentoInputDTO(parcela_id=result.pedido.parcelas[0].id)
        )

        with pytest.raises(BusinessRuleViolationError):
            AtualizarSessaoAvulsaService(sessao_repo, usuarios, uow).execute(
                AtualizarSessaoAvulsaInputDTO(sessao_id=result.id, valor_cobrado=Decimal("200"))
            )

    def test_atualizacao_parcial(self, criar, terapia, sessao_repo, usuarios, uow):
        result = criar(terapia_id=terapia.id, comentarios="antes")

        result = AtualizarSessaoAvulsaService(sessao_repo, usuarios, uow).execute(
            AtualizarSessaoAvulsaInputDTO(sessao_id=result.id, dados_sessao="anotações")
        )
        assert result.comentarios == "antes"
        assert result.dados_sessao == "anotações"

    def test_excluir_remove_pedido(self, criar, terapia, sessao_repo, pedido_repo, uow):
        result = criar(terapia_id=terapia.id)
        ExcluirSessaoAvulsaService(sessao_repo, uow).execute(result.id)

        assert sessao_repo.get_by_id(result.id) is None
        assert pedido_repo.get_by_id(result.pedido.id) is None

        with pytest.raises(EntityNotFoundError):
            ExcluirSessaoAvulsaService(sessao_repo, uow).execute(result.id)


# =============================================================================
# Financeiro
# =============================================================================

class TestFinanceiro:
    """Testes para listagem de parcelas e baixas."""

    @pytest.fixture
    def pedido(self, sessao_repo, terapia_repo, usuarios, uow, terapia):
        result = CriarSessaoAvulsaService(sessao_repo, terapia_repo, usuarios, uow).execute(
            CriarSessaoAvulsaInputDTO(
                paciente_id=PACIENTE,
                terapia_id=terapia.id,
                forma_pagamento="PIX",
                modo_vencimento="AUTOMATIC_MONTHLY",
                quantidade_parcelas=3,
                primeiro_vencimento=date(2024, 1, 10),
                valor_cobrado=Decimal("100.00"),
            )
        )
        return result.pedido

    def test_listagem_com_totais(self, pedido_repo, pedido):
        result = ListarParcelasService(pedido_repo).execute(referencia=date(2024, 2, 15))

        assert len(result.parcelas) == 3
        assert result.quantidade_vencidas == 2
        assert result.total_vencido == Decimal("66.66")
        assert result.total_em_aberto == Decimal("100.00")
        assert result.parcelas[0].origem == "SINGLE_SESSION"

    def test_filtros(self, pedido_repo, pedido):
        servico = ListarParcelasService(pedido_repo)
        vencidas = servico.execute(
            ListarParcelasQueryDTO(somente_vencidas=True), referencia=date(2024, 1, 20)
        )
        assert [p.parcela.numero for p in vencidas.parcelas] == [1]

        periodo = servico.execute(
            ListarParcelasQueryDTO(vencimento_de=date(2024, 2, 1), vencimento_ate=date(2024, 3, 31))
        )
        assert [p.parcela.numero for p in periodo.parcelas] == [2, 3]

        assert servico.execute(ListarParcelasQueryDTO(paciente_id="1")).parcelas == []

    def test_pagamento_parcial(self, pedido_repo, uow, pedido):
        result = RegistrarPagamentoService(pedido_repo, uow).execute(
            RegistrarPagamentoInputDTO(parcela_id=pedido.parcelas[0].id, valor=Decimal("10"))
        )
        assert result.status == "PARTIALLY_PAID"
        assert result.parcelas[0].valor_pago == Decimal("10.00")
        assert result.parcelas[0].status == "OPEN"
        assert _eventos(uow, "PedidoQuitadoEvent") == []

    def test_baixas_leem_o_pedido_travado(self, pedido_repo, uow, pedido):
        parcela_id = pedido.parcelas[0].id

        RegistrarPagamentoService(pedido_repo, uow).execute(
            RegistrarPagamentoInputDTO(parcela_id=parcela_id)
        )
        EstornarPagamentoService(pedido_repo, uow).execute(parcela_id)
        CancelarParcelaService(pedido_repo, uow).execute(parcela_id)

        assert pedido_repo.leituras_travadas == 3

    def test_quitacao_publica_evento_uma_vez(self, pedido_repo, uow, pedido):
        servico = RegistrarPagamentoService(pedido_repo, uow)
        for parcela in pedido.parcelas:
            result = servico.execute(
                RegistrarPagamentoInputDTO(parcela_id=parcela.id, forma_pagamento="PIX")
            )

        assert result.status == "PAID"
        quitados = _eventos(uow, "PedidoQuitadoEvent")
        assert len(quitados) == 1
        assert quitados[0].paciente_id == PACIENTE
        assert len(_eventos(uow, "PagamentoRegistradoEvent")) == 3

    def test_pagamento_acima_do_valor(self, pedido_repo, uow, pedido):
        with pytest.raises(BusinessRuleViolationError):
            RegistrarPagamentoService(pedido_repo, uow).execute(
                RegistrarPagamentoInputDTO(parcela_id=pedido.parcelas[0].id, valor=Decimal("50"))
            )

    def test_parcela_inexistente(self, pedido_repo, uow):
        with pytest.raises(EntityNotFoundError):
            RegistrarPagamentoService(pedido_repo, uow).execute(
                RegistrarPagamentoInputDTO(parcela_id="nao-existe")
            )

    def test_estorno(self, pedido_repo, uow, pedido):
        parcela_id = pedido.parcelas[0].id
        RegistrarPagamentoService(pedido_repo, uow).execute(
            RegistrarPagamentoInputDTO(parcela_id=parcela_id)
        )
        result = EstornarPagamentoService(pedido_repo, uow).execute(parcela_id)
        assert result.status == "OPEN"
        assert result.parcelas[0].valor_pago == Decimal("0.00")

    def test_cancelar_parcela(self, pedido_repo, uow, pedido):
        servico = CancelarParcelaService(pedido_repo, uow)
        for parcela in pedido.parcelas:
            result = servico.execute(parcela.id)
        assert result.status == "CANCELED"
