"""
Testes dos repositórios Django de Atendimentos e do diretório de usuários.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.db import transaction

from src.adapters.django_app.atendimentos.repositories import (
    DjangoPedidoRepository,
    DjangoProcessoRepository,
    DjangoSessaoAvulsaRepository,
    DjangoTerapiaRepository,
)
from src.adapters.django_app.shared.usuarios import DjangoDiretorioUsuarios
from src.core.atendimentos.entities import (
    FormaPagamento,
    ModoVencimento,
    ProcessoTerapeutico,
    SessaoAvulsa,
    StatusProcesso,
    Terapia,
)

pytestmark = pytest.mark.django_db

VENCIMENTOS = [date(2024, 1, 10), date(2024, 2, 10), date(2024, 3, 10)]


@pytest.fixture
def terapia_salva():
    terapia = Terapia.criar(nome="Reiki", valor=Decimal("100.00"), sessoes_padrao=2)
    DjangoTerapiaRepository().save(terapia)
    return terapia


class TestTerapiaRepository:
    def test_listar_ordenado_por_nome(self):
        repo = DjangoTerapiaRepository()
        for nome in ("Reiki", "Acupuntura"):
            repo.save(Terapia.criar(nome=nome, valor=Decimal("80.00")))

        assert [t.nome for t in repo.list_all()] == ["Acupuntura", "Reiki"]

    def test_valores_decimais_preservados(self, terapia_salva):
        recuperada = DjangoTerapiaRepository().get_by_id(terapia_salva.id)

        assert recuperada.valor == Decimal("100.00")
        assert recuperada.sessoes_padrao == 2


class TestProcessoRepository:
    def test_agregado_completo(self, terapia_salva):
        repo = DjangoProcessoRepository()
        processo = ProcessoTerapeutico.criar(paciente_id="7", criado_por_id="1")
        processo.adicionar_item(terapia_salva, quantidade=1)
        processo.iniciar_tratamento(FormaPagamento.PIX, ModoVencimento.MANUAL, VENCIMENTOS)

        repo.save(processo)
        recuperado = repo.get_by_id(processo.id)

        assert recuperado.status == StatusProcesso.IN_TREATMENT
        assert len(recuperado.itens) == 1
        assert [s.numero_sessao for s in recuperado.sessoes] == [1, 2]
        assert [p.vencimento for p in recuperado.pedido.parcelas] == VENCIMENTOS
        assert sum(p.valor for p in recuperado.pedido.parcelas) == Decimal("100.00")

    def test_remover_item_apaga_do_banco(self, terapia_salva):
        repo = DjangoProcessoRepository()
        processo = ProcessoTerapeutico.criar(paciente_id="7")
        item = processo.adicionar_item(terapia_salva)
        repo.save(processo)

        processo.remover_item(item.id)
        repo.save(processo)

        assert repo.get_by_id(processo.id).itens == []

    def test_filtrar_por_paciente_e_status(self):
        repo = DjangoProcessoRepository()
        repo.save(ProcessoTerapeutico.criar(paciente_id="7"))
        repo.save(ProcessoTerapeutico.criar(paciente_id="8"))

        assert len(repo.list_all(paciente_id="7")) == 1
        assert repo.list_all(status=StatusProcesso.FINISHED) == []


class TestPedidoRepository:
    def test_buscar_pela_parcela(self, terapia_salva):
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia_salva)
        pedido = sessao.gerar_pedido(FormaPagamento.NUBANK, ModoVencimento.MANUAL, VENCIMENTOS)
        DjangoSessaoAvulsaRepository().save(sessao)

        encontrado = DjangoPedidoRepository().get_by_parcela_id(pedido.parcelas[1].id)

        assert encontrado.id == pedido.id
        assert encontrado.sessao_avulsa_id == sessao.id
        assert DjangoPedidoRepository().get_by_parcela_id("nao-existe") is None

    def test_leitura_para_baixa_trava_o_pedido(self, terapia_salva):
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia_salva)
        pedido = sessao.gerar_pedido(FormaPagamento.PIX, ModoVencimento.MANUAL, VENCIMENTOS)
        DjangoSessaoAvulsaRepository().save(sessao)

        repo = DjangoPedidoRepository()
        queryset_real = repo._queryset
        querysets = []

        def registrar(for_update=False):
            queryset = queryset_real(for_update)
            querysets.append(queryset)
            return queryset

        repo._queryset = registrar
        with transaction.atomic():
            travado = repo.get_by_parcela_id(pedido.parcelas[0].id, for_update=True)
        livre = repo.get_by_parcela_id(pedido.parcelas[0].id)

        assert travado.id == livre.id == pedido.id
        assert [len(p.parcelas) for p in (travado, livre)] == [3, 3]
        assert [q.query.select_for_update for q in querysets] == [True, False]

    def test_excluir_sessao_remove_pedido(self, terapia_salva):
        repo = DjangoSessaoAvulsaRepository()
        sessao = SessaoAvulsa.criar(paciente_id="7", terapia=terapia_salva)
        sessao.gerar_pedido(FormaPagamento.PIX, ModoVencimento.MANUAL, VENCIMENTOS)
        repo.save(sessao)

        repo.delete(sessao.id)

        assert repo.get_by_id(sessao.id) is None
        assert DjangoPedidoRepository().list_all() == []


class TestDiretorioUsuarios:
    def test_existe(self, paciente, django_user_model):
        inativo = django_user_model.objects.create_user(username='inativo', is_active=False)
        usuarios = DjangoDiretorioUsuarios()

        assert usuarios.existe(str(paciente.id)) is True
        assert usuarios.existe(str(inativo.id)) is False
        assert usuarios.existe("99999") is False
        assert usuarios.existe("") is False

    def test_e_terapeuta(self, paciente, terapeuta):
        usuarios = DjangoDiretorioUsuarios()

        assert usuarios.e_terapeuta(str(terapeuta.id)) is True
        assert usuarios.e_terapeuta(str(paciente.id)) is False
