"""
Testes Unitários das Entidades de Atendimentos.

Testa regras de negócio encapsuladas:
- Terapia: validação e valor de cobrança avulsa
- Parcela: pagamento, estorno e cancelamento
- PedidoTerapeutico: criação, status e redistribuição
- ProcessoTerapeutico: orçamento, transições e início do tratamento
- SessaoAvulsa: snapshot da terapia e limites de texto
"""

from datetime import date
from decimal import Decimal

import pytest

from src.core.atendimentos.entities import (
    COMENTARIOS_MAX,
    FormaPagamento,
    ModoVencimento,
    Parcela,
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    StatusParcela,
    StatusPedido,
    StatusProcesso,
    StatusSessao,
    Terapia,
)
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    ValidationError,
)

VENCIMENTOS = [date(2024, 1, 10), date(2024, 2, 10), date(2024, 3, 10)]


@pytest.fixture
def terapia():
    return Terapia.criar(nome="Reiki", valor="150.00", sessoes_padrao=2)


@pytest.fixture
def pedido():
    return PedidoTerapeutico.criar(
        paciente_id="7",
        valor_total=Decimal("100.00"),
        forma_pagamento=FormaPagamento.PIX,
        modo_vencimento=ModoVencimento.AUTOMATIC_MONTHLY,
        vencimentos=VENCIMENTOS,
        processo_id="proc-1",
    )


# =============================================================================
# Terapia
# =============================================================================

class TestTerapia:
    """Testes para a entidade Terapia."""

    def test_criar_arredonda_valores(self):
        terapia = Terapia.criar(nome="  Reiki ", valor=150.555)
        assert terapia.nome == "Reiki"
        assert terapia.valor == Decimal("150.56")
        assert terapia.ativa is True

    def test_nome_obrigatorio(self):
        with pytest.raises(ValidationError) as exc:
            Terapia.criar(nome="R", valor=10)
        assert exc.value.field == "name"

    def test_valor_negativo(self):
        with pytest.raises(ValidationError):
            Terapia.criar(nome="Reiki", valor=-1)

    def test_sessao_avulsa_usa_valor_especifico(self):
        terapia = Terapia.criar(nome="Reiki", valor=100, valor_sessao_avulsa=120)
        assert terapia.valor_cobranca_avulsa == Decimal("120.00")

    def test_sessao_avulsa_usa_valor_padrao(self, terapia):
        assert terapia.valor_cobranca_avulsa == Decimal("150.00")

    def test_atualizar_ignora_campos_none(self, terapia):
        terapia.atualizar(nome=None, valor="99.9", ativa=False)
        assert terapia.nome == "Reiki"
        assert terapia.valor == Decimal("99.90")
        assert terapia.ativa is False


# =============================================================================
# Parcela
# =============================================================================

class TestParcela:
    """Pagamento parcial, total, estorno e cancelamento."""

    def test_pagamento_total_por_padrao(self):
        parcela = Parcela(valor=Decimal("50.00"))
        pago = parcela.registrar_pagamento()
        assert pago == Decimal("50.00")
        assert parcela.status == StatusParcela.PAID
        assert parcela.pago_em is not None

    def test_pagamento_parcial_mantem_aberta(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.registrar_pagamento("20", forma_pagamento=FormaPagamento.NUBANK)
        assert parcela.status == StatusParcela.OPEN
        assert parcela.saldo == Decimal("30.00")
        assert parcela.forma_pagamento == FormaPagamento.NUBANK

    def test_pagamento_nao_excede_valor(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.registrar_pagamento("40")
        with pytest.raises(BusinessRuleViolationError) as exc:
            parcela.registrar_pagamento("10.01")
        assert exc.value.rule == "pagamento_excede_parcela"
        assert parcela.valor_pago == Decimal("40.00")

    def test_pagamento_deve_ser_positivo(self):
        with pytest.raises(ValidationError):
            Parcela(valor=Decimal("50.00")).registrar_pagamento("0")

    def test_parcela_paga_nao_recebe_pagamento(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.registrar_pagamento()
        with pytest.raises(BusinessRuleViolationError):
            parcela.registrar_pagamento("1")

    def test_estorno_zera_pagamento(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.registrar_pagamento()
        parcela.estornar()
        assert parcela.status == StatusParcela.OPEN
        assert parcela.valor_pago == Decimal("0.00")
        assert parcela.pago_em is None

    def test_cancelar_com_pagamento(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.registrar_pagamento("1")
        with pytest.raises(BusinessRuleViolationError):
            parcela.cancelar()

    def test_cancelada_nao_pode_ser_estornada(self):
        parcela = Parcela(valor=Decimal("50.00"))
        parcela.cancelar()
        with pytest.raises(BusinessRuleViolationError):
            parcela.estornar()

    def test_vencida(self):
        parcela = Parcela(valor=Decimal("10"), vencimento=date(2024, 1, 10))
        assert parcela.esta_vencida(date(2024, 1, 11))
        assert not parcela.esta_vencida(date(2024, 1, 10))


# =============================================================================
# Pedido
# =============================================================================

class TestPedidoTerapeutico:
    """Criação do pedido e status derivado."""

    def test_cria_parcelas_com_soma_igual_ao_total(self, pedido):
        assert [p.numero for p in pedido.parcelas] == [1, 2, 3]
        assert sum(p.valor for p in pedido.parcelas) == Decimal("100.00")
        assert pedido.parcelas[-1].valor == Decimal("33.34")
        assert pedido.primeiro_vencimento == date(2024, 1, 10)

    def test_exige_exatamente_uma_origem(self):
        with pytest.raises(ValidationError):
            PedidoTerapeutico.criar(
                paciente_id="7",
                valor_total=10,
                forma_pagamento=FormaPagamento.PIX,
                modo_vencimento=ModoVencimento.MANUAL,
                vencimentos=[date(2024, 1, 1)],
                processo_id="p",
                sessao_avulsa_id="s",
            )

    def test_manual_sem_primeiro_vencimento(self):
        pedido = PedidoTerapeutico.criar(
            paciente_id="7",
            valor_total=10,
            forma_pagamento=FormaPagamento.PIX,
            modo_vencimento=ModoVencimento.MANUAL,
            vencimentos=[date(2024, 1, 1)],
            sessao_avulsa_id="s",
        )
        assert pedido.primeiro_vencimento is None

    def test_status_apos_pagamentos(self, pedido):
        pedido.parcelas[0].registrar_pagamento()
        assert pedido.recalcular_status() == StatusPedido.PARTIALLY_PAID

        for parcela in pedido.parcelas[1:]:
            parcela.registrar_pagamento()
        assert pedido.recalcular_status() == StatusPedido.PAID

    def test_obter_parcela_inexistente(self, pedido):
        with pytest.raises(EntityNotFoundError):
            pedido.obter_parcela("nao-existe")

    def test_redistribuir_valor(self, pedido):
        pedido.redistribuir_valor("200")
        assert pedido.valor_total == Decimal("200.00")
        assert [p.valor for p in pedido.parcelas] == [
            Decimal("66.66"), Decimal("66.66"), Decimal("66.68"),
        ]

    def test_redistribuir_apos_baixa(self, pedido):
        pedido.parcelas[0].registrar_pagamento("1")
        with pytest.raises(BusinessRuleViolationError) as exc:
            pedido.redistribuir_valor("200")
        assert exc.value.rule == "valor_apos_baixa"

    def test_resumo_parcelas(self, pedido):
        pedido.parcelas[0].registrar_pagamento()
        resumo = pedido.resumo_parcelas()
        assert resumo["open_installments"] == 2
        assert resumo["paid_installments"] == 1
        assert resumo["paid_amount"] == Decimal("33.33")
        assert resumo["open_amount"] == Decimal("66.67")


# =============================================================================
# Processo
# =============================================================================

class TestProcessoTerapeutico:
    """Orçamento, máquina de estados e início do tratamento."""

    def test_criar_em_analise(self):
        processo = ProcessoTerapeutico.criar(paciente_id=7, criado_por_id="1")
        assert processo.status == StatusProcesso.IN_ANALYSIS
        assert processo.paciente_id == "7"

    def test_criar_sem_paciente(self):
        with pytest.raises(ValidationError):
            ProcessoTerapeutico.criar(paciente_id="")

    def test_orcamento(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia, quantidade=2, desconto="50")
        assert processo.total_bruto == Decimal("300.00")
        assert processo.total_desconto == Decimal("50.00")
        assert processo.total_orcamento == Decimal("250.00")

    def test_desconto_maior_que_item(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        with pytest.raises(ValidationError):
            processo.adicionar_item(terapia, quantidade=1, desconto="151")

    def test_terapia_inativa(self, terapia):
        terapia.ativa = False
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        with pytest.raises(BusinessRuleViolationError):
            processo.adicionar_item(terapia)

    def test_remover_item_reordena(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        primeiro = processo.adicionar_item(terapia)
        segundo = processo.adicionar_item(terapia)
        processo.remover_item(primeiro.id)
        assert [i.id for i in processo.itens] == [segundo.id]
        assert processo.itens[0].ordem == 0

    def test_remover_item_inexistente(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        with pytest.raises(EntityNotFoundError):
            processo.remover_item("x")

    def test_iniciar_tratamento_gera_sessoes_e_pedido(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia, quantidade=2)

        pedido = processo.iniciar_tratamento(
            FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, VENCIMENTOS
        )

        assert processo.status == StatusProcesso.IN_TREATMENT
        assert len(processo.sessoes) == 4
        assert [s.indice_ordem for s in processo.sessoes] == [1, 2, 3, 4]
        assert all(s.status == StatusSessao.PENDING for s in processo.sessoes)
        assert pedido.valor_total == Decimal("300.00")
        assert pedido.processo_id == processo.id
        assert processo.iniciado_em is not None

    def test_iniciar_tratamento_sem_itens(self):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        with pytest.raises(BusinessRuleViolationError) as exc:
            processo.iniciar_tratamento(
                FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, VENCIMENTOS
            )
        assert exc.value.rule == "orcamento_vazio"

    def test_iniciar_tratamento_orcamento_zerado(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia, desconto="150")
        with pytest.raises(BusinessRuleViolationError) as exc:
            processo.iniciar_tratamento(
                FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, VENCIMENTOS
            )
        assert exc.value.rule == "orcamento_zerado"

    def test_orcamento_bloqueado_apos_inicio(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia)
        processo.iniciar_tratamento(
            FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, VENCIMENTOS
        )
        with pytest.raises(BusinessRuleViolationError):
            processo.adicionar_item(terapia)

    @pytest.mark.parametrize("destino", [StatusProcesso.FINISHED, StatusProcesso.IN_ANALYSIS])
    def test_transicoes_invalidas_a_partir_de_nao_aprovado(self, destino):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.alterar_status(StatusProcesso.NOT_APPROVED)
        with pytest.raises(BusinessRuleViolationError):
            processo.alterar_status(destino)

    def test_alterar_status_para_tratamento_exige_inicio(self):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        with pytest.raises(BusinessRuleViolationError) as exc:
            processo.alterar_status(StatusProcesso.IN_TREATMENT)
        assert exc.value.rule == "iniciar_tratamento"

    def test_finalizar_registra_data(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia)
        processo.iniciar_tratamento(
            FormaPagamento.PIX, ModoVencimento.AUTOMATIC_MONTHLY, VENCIMENTOS
        )
        anterior = processo.alterar_status(StatusProcesso.FINISHED)
        assert anterior == StatusProcesso.IN_TREATMENT
        assert processo.finalizado_em is not None

    def test_resumo_com_simulacao(self, terapia):
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        processo.adicionar_item(terapia)
        resumo = processo.resumo()
        assert resumo["budget_total"] == Decimal("150.00")
        assert len(resumo["installment_simulation"]) == 7
        assert resumo["open_installments"] == 0


# =============================================================================
# Sessão avulsa
# =============================================================================

class TestSessaoAvulsa:
    def test_snapshot_da_terapia(self, terapia):
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia)
        terapia.atualizar(nome="Reiki Avançado", valor="300")
        assert sessao.terapia_nome == "Reiki"
        assert sessao.terapia_valor == Decimal("150.00")
        assert sessao.valor_cobrado == Decimal("150.00")
        assert sessao.status == StatusSessao.COMPLETED

    def test_comentarios_acima_do_limite(self, terapia):
        with pytest.raises(ValidationError) as exc:
            SessaoAvulsa.criar(
                paciente_id="7", terapia=terapia, comentarios="x" * (COMENTARIOS_MAX + 1)
            )
        assert exc.value.field == "comments"

    def test_alterar_valor_redistribui_parcelas(self, terapia):
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia)
        sessao.gerar_pedido(FormaPagamento.PIX, ModoVencimento.MANUAL, VENCIMENTOS[:2])

        assert sessao.alterar_valor_cobrado("201") is True
        assert [p.valor for p in sessao.pedido.parcelas] == [
            Decimal("100.50"), Decimal("100.50"),
        ]
        assert sessao.alterar_valor_cobrado("201.00") is False

    def test_data_da_sessao_obrigatoria(self, terapia):
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia)
        with pytest.raises(ValidationError):
            sessao.atualizar(data_sessao=None)
