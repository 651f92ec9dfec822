"""
Use Cases (Application Services) do Domínio de Atendimentos.

Terapias:
- CriarTerapiaService, AtualizarTerapiaService
- ListarTerapiasService, ObterTerapiaService

Processos terapêuticos:
- CriarProcessoService, ObterProcessoService, ListarProcessosService
- AdicionarItemOrcamentoService, RemoverItemOrcamentoService
- AtualizarProcessoService (observações, status e início do tratamento)
- AtualizarSessaoProcessoService

Sessões avulsas:
- CriarSessaoAvulsaService, ObterSessaoAvulsaService
- ListarSessoesAvulsasService, AtualizarSessaoAvulsaService
- ExcluirSessaoAvulsaService

Financeiro:
- ListarParcelasService
- RegistrarPagamentoService, EstornarPagamentoService, CancelarParcelaService

Escritas rodam dentro de `with self.uow:`; eventos são publicados
apenas após commit. Leituras não usam UoW.
"""

from datetime import date
from typing import List, Optional, Tuple
import logging

from src.core.shared.clock import hoje
from src.core.shared.interfaces import UnitOfWork
from src.core.shared.exceptions import (
    EntityNotFoundError,
    ValidationError,
)

from .entities import (
    FormaPagamento,
    ModoSessao,
    ModoVencimento,
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    StatusParcela,
    StatusPedido,
    StatusProcesso,
    StatusSessao,
    Terapia,
)
from .financeiro import MAX_PARCELAS, money_sum, resolve_due_dates
from .ports import (
    DiretorioUsuarios,
    PedidoRepository,
    ProcessoRepository,
    SessaoAvulsaRepository,
    TerapiaRepository,
)
from .dtos import (
    NAO_INFORMADO,
    AdicionarItemOrcamentoInputDTO,
    AtualizarProcessoInputDTO,
    AtualizarSessaoAvulsaInputDTO,
    AtualizarSessaoProcessoInputDTO,
    AtualizarTerapiaInputDTO,
    CriarProcessoInputDTO,
    CriarSessaoAvulsaInputDTO,
    CriarTerapiaInputDTO,
    FinanceiroOutputDTO,
    ListarParcelasQueryDTO,
    ParcelaFinanceiroDTO,
    ParcelaOutputDTO,
    PedidoOutputDTO,
    ProcessoListItemDTO,
    ProcessoOutputDTO,
    RegistrarPagamentoInputDTO,
    SessaoAvulsaOutputDTO,
    TerapiaOutputDTO,
    money,
)
from .events import (
    PagamentoRegistradoEvent,
    PedidoQuitadoEvent,
    ProcessoCriadoEvent,
    ProcessoStatusAlteradoEvent,
    SessaoAvulsaCriadaEvent,
    TratamentoIniciadoEvent,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def _obter_terapia(terapia_repo: TerapiaRepository, terapia_id: str) -> Terapia:
    terapia = terapia_repo.get_by_id(terapia_id)
    if not terapia:
        raise EntityNotFoundError(
            "Terapia não encontrada", entity_type="Terapia", entity_id=terapia_id
        )
    return terapia


def _validar_paciente(usuarios: DiretorioUsuarios, paciente_id: str) -> None:
    if not paciente_id or not usuarios.existe(paciente_id):
        raise EntityNotFoundError(
            "Usuário não encontrado", entity_type="User", entity_id=paciente_id
        )


def _validar_terapeuta(usuarios: DiretorioUsuarios, terapeuta_id: Optional[str]) -> None:
    if terapeuta_id and not usuarios.e_terapeuta(terapeuta_id):
        raise ValidationError("Terapeuta inválido", field="therapist_user_id")


def _configuracao_pagamento(
    forma_pagamento: Optional[str],
    modo_vencimento: Optional[str],
    quantidade_parcelas: Optional[int],
    primeiro_vencimento,
    vencimentos_manuais,
) -> Tuple[FormaPagamento, ModoVencimento, List[date]]:
    """
    Valida forma de pagamento, parcelamento e resolve vencimentos.

    Raises:
        ValidationError: Campos ausentes ou inválidos
    """
    if not forma_pagamento or not modo_vencimento or not quantidade_parcelas:
        raise ValidationError(
            "Informe forma de pagamento, quantidade de parcelas e modo de vencimento",
            field="payment",
        )
    forma = FormaPagamento.from_string(forma_pagamento, "payment_method")
    modo = ModoVencimento.from_string(modo_vencimento, "due_date_mode")
    if quantidade_parcelas < 1 or quantidade_parcelas > MAX_PARCELAS:
        raise ValidationError(
            f"Quantidade de parcelas deve estar entre 1 e {MAX_PARCELAS}",
            field="installments_count",
        )
    vencimentos = resolve_due_dates(
        modo.value, quantidade_parcelas, primeiro_vencimento, vencimentos_manuais
    )
    return forma, modo, vencimentos


def _evento_quitacao(pedido: PedidoTerapeutico) -> PedidoQuitadoEvent:
    return PedidoQuitadoEvent(
        aggregate_id=pedido.id,
        paciente_id=pedido.paciente_id,
        valor_total=money(pedido.valor_total),
        processo_id=pedido.processo_id or "",
        sessao_avulsa_id=pedido.sessao_avulsa_id or "",
    )


# =============================================================================
# Terapias
# =============================================================================

class CriarTerapiaService:
    def __init__(self, terapia_repo: TerapiaRepository, uow: UnitOfWork):
        self.terapia_repo = terapia_repo
        self.uow = uow

    def execute(self, input_dto: CriarTerapiaInputDTO) -> TerapiaOutputDTO:
        with self.uow:
            terapia = Terapia.criar(
                nome=input_dto.nome,
                valor=input_dto.valor,
                descricao=input_dto.descricao,
                valor_por_sessao=input_dto.valor_por_sessao,
                sessoes_padrao=input_dto.sessoes_padrao,
                valor_sessao_avulsa=input_dto.valor_sessao_avulsa,
            )
            self.terapia_repo.save(terapia)

        logger.info(f"Terapia criada: {terapia.id} ({terapia.nome})")
        return TerapiaOutputDTO.from_entity(terapia)


class AtualizarTerapiaService:
    def __init__(self, terapia_repo: TerapiaRepository, uow: UnitOfWork):
        self.terapia_repo = terapia_repo
        self.uow = uow

    def execute(self, input_dto: AtualizarTerapiaInputDTO) -> TerapiaOutputDTO:
        with self.uow:
            terapia = _obter_terapia(self.terapia_repo, input_dto.terapia_id)
            terapia.atualizar(
                nome=input_dto.nome,
                descricao=input_dto.descricao,
                valor=input_dto.valor,
                valor_por_sessao=input_dto.valor_por_sessao,
                sessoes_padrao=input_dto.sessoes_padrao,
                valor_sessao_avulsa=input_dto.valor_sessao_avulsa,
                ativa=input_dto.ativa,
            )
            self.terapia_repo.save(terapia)

        return TerapiaOutputDTO.from_entity(terapia)


class ListarTerapiasService:
    def __init__(self, terapia_repo: TerapiaRepository):
        self.terapia_repo = terapia_repo

    def execute(self, somente_ativas: bool = False) -> List[TerapiaOutputDTO]:
        return [
            TerapiaOutputDTO.from_entity(t)
            for t in self.terapia_repo.list_all(somente_ativas=somente_ativas)
        ]


class ObterTerapiaService:
    def __init__(self, terapia_repo: TerapiaRepository):
        self.terapia_repo = terapia_repo

    def execute(self, terapia_id: str) -> TerapiaOutputDTO:
        return TerapiaOutputDTO.from_entity(_obter_terapia(self.terapia_repo, terapia_id))


# =============================================================================
# Processos Terapêuticos
# =============================================================================

def _obter_processo(processo_repo: ProcessoRepository, processo_id: str) -> ProcessoTerapeutico:
    processo = processo_repo.get_by_id(processo_id)
    if not processo:
        raise EntityNotFoundError(
            "Processo não encontrado",
            entity_type="ProcessoTerapeutico",
            entity_id=processo_id,
        )
    return processo


class CriarProcessoService:
    """
    Use Case: Abrir processo terapêutico (status IN_ANALYSIS).

    Fluxo:
    1. Verificar paciente
    2. Criar processo
    3. Persistir e disparar ProcessoCriadoEvent
    """

    def __init__(
        self,
        processo_repo: ProcessoRepository,
        usuarios: DiretorioUsuarios,
        uow: UnitOfWork,
    ):
        self.processo_repo = processo_repo
        self.usuarios = usuarios
        self.uow = uow

    def execute(self, input_dto: CriarProcessoInputDTO) -> ProcessoOutputDTO:
        with self.uow:
            _validar_paciente(self.usuarios, input_dto.paciente_id)

            processo = ProcessoTerapeutico.criar(
                paciente_id=input_dto.paciente_id,
                criado_por_id=input_dto.criado_por_id,
                observacoes=input_dto.observacoes,
            )
            self.processo_repo.save(processo)

            self.uow.publish_event(
                ProcessoCriadoEvent(
                    aggregate_id=processo.id,
                    paciente_id=processo.paciente_id,
                    criado_por_id=processo.criado_por_id or "",
                )
            )

        logger.info(f"Processo criado: {processo.id} para paciente {processo.paciente_id}")
        return ProcessoOutputDTO.from_entity(processo)


class ObterProcessoService:
    def __init__(self, processo_repo: ProcessoRepository):
        self.processo_repo = processo_repo

    def execute(self, processo_id: str) -> ProcessoOutputDTO:
        return ProcessoOutputDTO.from_entity(_obter_processo(self.processo_repo, processo_id))


class ListarProcessosService:
    def __init__(self, processo_repo: ProcessoRepository):
        self.processo_repo = processo_repo

    def execute(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[ProcessoListItemDTO]:
        status_enum = StatusProcesso.from_string(status, "status") if status else None
        processos = self.processo_repo.list_all(paciente_id=paciente_id, status=status_enum)
        return [ProcessoListItemDTO.from_entity(p) for p in processos]


class AdicionarItemOrcamentoService:
    def __init__(
        self,
        processo_repo: ProcessoRepository,
        terapia_repo: TerapiaRepository,
        uow: UnitOfWork,
    ):
        self.processo_repo = processo_repo
        self.terapia_repo = terapia_repo
        self.uow = uow

    def execute(self, input_dto: AdicionarItemOrcamentoInputDTO) -> ProcessoOutputDTO:
        with self.uow:
            processo = _obter_processo(self.processo_repo, input_dto.processo_id)
            terapia = _obter_terapia(self.terapia_repo, input_dto.terapia_id)
            processo.adicionar_item(
                terapia,
                quantidade=input_dto.quantidade,
                desconto=input_dto.desconto,
            )
            self.processo_repo.save(processo)

        return ProcessoOutputDTO.from_entity(processo)


class RemoverItemOrcamentoService:
    def __init__(self, processo_repo: ProcessoRepository, uow: UnitOfWork):
        self.processo_repo = processo_repo
        self.uow = uow

    def execute(self, processo_id: str, item_id: str) -> ProcessoOutputDTO:
        with self.uow:
            processo = _obter_processo(self.processo_repo, processo_id)
            processo.remover_item(item_id)
            self.processo_repo.save(processo)

        return ProcessoOutputDTO.from_entity(processo)


class AtualizarProcessoService:
    """
    Use Case: Atualizar processo (PATCH).

    - Observações podem ser alteradas a qualquer momento
    - Mudança para IN_TREATMENT inicia o tratamento: exige forma de
      pagamento, quantidade de parcelas e modo de vencimento; gera as
      sessões e o pedido parcelado na mesma transação
    - Demais transições seguem a máquina de estados do processo
    """

    def __init__(self, processo_repo: ProcessoRepository, uow: UnitOfWork):
        self.processo_repo = processo_repo
        self.uow = uow

    def execute(self, input_dto: AtualizarProcessoInputDTO) -> ProcessoOutputDTO:
        with self.uow:
            processo = _obter_processo(self.processo_repo, input_dto.processo_id)

            if input_dto.observacoes is not None:
                processo.observacoes = input_dto.observacoes.strip()

            if input_dto.status:
                novo_status = StatusProcesso.from_string(input_dto.status, "status")
                anterior = processo.status

                if novo_status != anterior:
                    processo.exigir_transicao(novo_status)

                    if novo_status == StatusProcesso.IN_TREATMENT:
                        self._iniciar_tratamento(processo, input_dto)
                    else:
                        processo.alterar_status(novo_status)

                    self.uow.publish_event(
                        ProcessoStatusAlteradoEvent(
                            aggregate_id=processo.id,
                            status_anterior=anterior.value,
                            novo_status=novo_status.value,
                        )
                    )

            self.processo_repo.save(processo)

        return ProcessoOutputDTO.from_entity(processo)

    def _iniciar_tratamento(
        self,
        processo: ProcessoTerapeutico,
        input_dto: AtualizarProcessoInputDTO,
    ) -> None:
        forma, modo, vencimentos = _configuracao_pagamento(
            input_dto.forma_pagamento,
            input_dto.modo_vencimento,
            input_dto.quantidade_parcelas,
            input_dto.primeiro_vencimento,
            input_dto.vencimentos_manuais,
        )
        pedido = processo.iniciar_tratamento(forma, modo, vencimentos)

        self.uow.publish_event(
            TratamentoIniciadoEvent(
                aggregate_id=processo.id,
                paciente_id=processo.paciente_id,
                pedido_id=pedido.id,
                valor_total=money(pedido.valor_total),
                quantidade_parcelas=pedido.quantidade_parcelas,
                quantidade_sessoes=len(processo.sessoes),
            )
        )
        logger.info(
            f"Tratamento iniciado: processo {processo.id} | "
            f"{len(processo.sessoes)} sessões | pedido {pedido.id}"
        )


class AtualizarSessaoProcessoService:
    def __init__(
        self,
        processo_repo: ProcessoRepository,
        usuarios: DiretorioUsuarios,
        uow: UnitOfWork,
    ):
        self.processo_repo = processo_repo
        self.usuarios = usuarios
        self.uow = uow

    def execute(self, input_dto: AtualizarSessaoProcessoInputDTO) -> ProcessoOutputDTO:
        with self.uow:
            processo = _obter_processo(self.processo_repo, input_dto.processo_id)
            sessao = processo.obter_sessao(input_dto.sessao_id)

            if input_dto.terapeuta_id is not NAO_INFORMADO:
                _validar_terapeuta(self.usuarios, input_dto.terapeuta_id)
                sessao.terapeuta_id = input_dto.terapeuta_id or None
            if input_dto.status is not NAO_INFORMADO:
                sessao.alterar_status(StatusSessao.from_string(input_dto.status, "status"))
            if input_dto.modo is not NAO_INFORMADO:
                sessao.modo = ModoSessao.from_string(input_dto.modo, "mode") if input_dto.modo else None
            if input_dto.data_sessao is not NAO_INFORMADO:
                sessao.data_sessao = input_dto.data_sessao
            if input_dto.comentarios is not NAO_INFORMADO:
                sessao.comentarios = input_dto.comentarios or ""

            self.processo_repo.save(processo)

        return ProcessoOutputDTO.from_entity(processo)


# =============================================================================
# Sessões Avulsas
# =============================================================================

def _obter_sessao_avulsa(sessao_repo: SessaoAvulsaRepository, sessao_id: str) -> SessaoAvulsa:
    sessao = sessao_repo.get_by_id(sessao_id)
    if not sessao:
        raise EntityNotFoundError(
            "Sessão avulsa não encontrada", entity_type="SessaoAvulsa", entity_id=sessao_id
        )
    return sessao


class CriarSessaoAvulsaService:
    """
    Use Case: Registrar sessão avulsa com cobrança.

    Fluxo:
    1. Verificar paciente (404), terapia (404) e terapeuta (400)
    2. Resolver vencimentos (automático mensal ou manual)
    3. Criar sessão com snapshot da terapia
    4. Criar pedido e parcelas na mesma transação
    """

    def __init__(
        self,
        sessao_repo: SessaoAvulsaRepository,
        terapia_repo: TerapiaRepository,
        usuarios: DiretorioUsuarios,
        uow: UnitOfWork,
    ):
        self.sessao_repo = sessao_repo
        self.terapia_repo = terapia_repo
        self.usuarios = usuarios
        self.uow = uow

    def execute(self, input_dto: CriarSessaoAvulsaInputDTO) -> SessaoAvulsaOutputDTO:
        with self.uow:
            _validar_paciente(self.usuarios, input_dto.paciente_id)
            terapia = _obter_terapia(self.terapia_repo, input_dto.terapia_id)
            _validar_terapeuta(self.usuarios, input_dto.terapeuta_id)

            forma, modo_vencimento, vencimentos = _configuracao_pagamento(
                input_dto.forma_pagamento,
                input_dto.modo_vencimento,
                input_dto.quantidade_parcelas,
                input_dto.primeiro_vencimento,
                input_dto.vencimentos_manuais,
            )

            sessao = SessaoAvulsa.criar(
                paciente_id=input_dto.paciente_id,
                terapia=terapia,
                valor_cobrado=input_dto.valor_cobrado,
                terapeuta_id=input_dto.terapeuta_id or None,
                data_sessao=input_dto.data_sessao,
                modo=ModoSessao.from_string(input_dto.modo, "mode") if input_dto.modo else None,
                status=StatusSessao.from_string(input_dto.status or "COMPLETED", "status"),
                comentarios=input_dto.comentarios,
                dados_sessao=input_dto.dados_sessao,
                criado_por_id=input_dto.criado_por_id,
            )
            pedido = sessao.gerar_pedido(forma, modo_vencimento, vencimentos)

            self.sessao_repo.save(sessao)

            self.uow.publish_event(
                SessaoAvulsaCriadaEvent(
                    aggregate_id=sessao.id,
                    paciente_id=sessao.paciente_id,
                    terapia_id=sessao.terapia_id,
                    pedido_id=pedido.id,
                    valor_cobrado=money(sessao.valor_cobrado),
                )
            )

        logger.info(
            f"Sessão avulsa criada: {sessao.id} | valor {sessao.valor_cobrado} "
            f"em {pedido.quantidade_parcelas}x"
        )
        return SessaoAvulsaOutputDTO.from_entity(sessao)


class ObterSessaoAvulsaService:
    def __init__(self, sessao_repo: SessaoAvulsaRepository):
        self.sessao_repo = sessao_repo

    def execute(self, sessao_id: str) -> SessaoAvulsaOutputDTO:
        return SessaoAvulsaOutputDTO.from_entity(
            _obter_sessao_avulsa(self.sessao_repo, sessao_id)
        )


class ListarSessoesAvulsasService:
    def __init__(self, sessao_repo: SessaoAvulsaRepository):
        self.sessao_repo = sessao_repo

    def execute(
        self,
        paciente_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[SessaoAvulsaOutputDTO]:
        status_enum = StatusSessao.from_string(status, "status") if status else None
        return [
            SessaoAvulsaOutputDTO.from_entity(s)
            for s in self.sessao_repo.list_all(paciente_id=paciente_id, status=status_enum)
        ]


class AtualizarSessaoAvulsaService:
    """
    Use Case: Atualizar sessão avulsa (PATCH).

    Alterar o valor cobrado redistribui as parcelas, o que é recusado
    quando alguma parcela já recebeu pagamento.
    """

    def __init__(
        self,
        sessao_repo: SessaoAvulsaRepository,
        usuarios: DiretorioUsuarios,
        uow: UnitOfWork,
    ):
        self.sessao_repo = sessao_repo
        self.usuarios = usuarios
        self.uow = uow

    def execute(self, input_dto: AtualizarSessaoAvulsaInputDTO) -> SessaoAvulsaOutputDTO:
        with self.uow:
            sessao = _obter_sessao_avulsa(self.sessao_repo, input_dto.sessao_id)

            campos = {}
            if input_dto.terapeuta_id is not NAO_INFORMADO:
                _validar_terapeuta(self.usuarios, input_dto.terapeuta_id)
                campos["terapeuta_id"] = input_dto.terapeuta_id or None
            if input_dto.data_sessao is not NAO_INFORMADO:
                campos["data_sessao"] = input_dto.data_sessao
            if input_dto.modo is not NAO_INFORMADO:
                campos["modo"] = (
                    ModoSessao.from_string(input_dto.modo, "mode") if input_dto.modo else None
                )
            if input_dto.status is not NAO_INFORMADO:
                campos["status"] = StatusSessao.from_string(input_dto.status, "status")
            if input_dto.comentarios is not NAO_INFORMADO:
                campos["comentarios"] = input_dto.comentarios
            if input_dto.dados_sessao is not NAO_INFORMADO:
                campos["dados_sessao"] = input_dto.dados_sessao

            if campos:
                sessao.atualizar(**campos)
            if input_dto.valor_cobrado is not NAO_INFORMADO:
                if input_dto.valor_cobrado is None:
                    raise ValidationError("Valor cobrado inválido", field="charged_amount")
                sessao.alterar_valor_cobrado(input_dto.valor_cobrado)

            self.sessao_repo.save(sessao)

        return SessaoAvulsaOutputDTO.from_entity(sessao)


class ExcluirSessaoAvulsaService:
    def __init__(self, sessao_repo: SessaoAvulsaRepository, uow: UnitOfWork):
        self.sessao_repo = sessao_repo
        self.uow = uow

    def execute(self, sessao_id: str) -> None:
        with self.uow:
            _obter_sessao_avulsa(self.sessao_repo, sessao_id)
            self.sessao_repo.delete(sessao_id)

        logger.info(f"Sessão avulsa excluída: {sessao_id}")


# =============================================================================
# Financeiro
# =============================================================================

class ListarParcelasService:
    """
    Use Case: Listagem financeira de parcelas.

    Reúne as parcelas de todos os pedidos (processos e sessões avulsas)
    aplicando filtros de status, atraso, período de vencimento e
    paciente, e calcula os totais do resultado filtrado.
    """

    def __init__(self, pedido_repo: PedidoRepository):
        self.pedido_repo = pedido_repo

    def execute(
        self,
        query: Optional[ListarParcelasQueryDTO] = None,
        referencia: Optional[date] = None,
    ) -> FinanceiroOutputDTO:
        query = query or ListarParcelasQueryDTO()
        referencia = referencia or hoje()
        status = StatusParcela.from_string(query.status, "status") if query.status else None

        linhas = []
        for pedido in self.pedido_repo.list_all(paciente_id=query.paciente_id):
            for parcela in pedido.parcelas:
                if status and parcela.status != status:
                    continue
                if query.somente_vencidas and not parcela.esta_vencida(referencia):
                    continue
                if query.vencimento_de and (
                    parcela.vencimento is None or parcela.vencimento < query.vencimento_de
                ):
                    continue
                if query.vencimento_ate and (
                    parcela.vencimento is None or parcela.vencimento > query.vencimento_ate
                ):
                    continue
                linhas.append((pedido, parcela))

        linhas.sort(key=lambda par: (par[1].vencimento or date.max, par[1].numero))

        parcelas = [p for _, p in linhas]
        vencidas = [p for p in parcelas if p.esta_vencida(referencia)]
        return FinanceiroOutputDTO(
            parcelas=[
                ParcelaFinanceiroDTO(
                    parcela=ParcelaOutputDTO.from_entity(parcela, referencia),
                    pedido_id=pedido.id,
                    paciente_id=pedido.paciente_id,
                    status_pedido=pedido.status.value,
                    origem="PROCESS" if pedido.processo_id else "SINGLE_SESSION",
                    processo_id=pedido.processo_id,
                    sessao_avulsa_id=pedido.sessao_avulsa_id,
                )
                for pedido, parcela in linhas
            ],
            total_em_aberto=money_sum(
                p.saldo for p in parcelas if p.status == StatusParcela.OPEN
            ),
            total_pago=money_sum(p.valor_pago for p in parcelas),
            total_vencido=money_sum(p.saldo for p in vencidas),
            quantidade_vencidas=len(vencidas),
        )


class _AlterarParcelaService:
    """Base das baixas: carrega pedido da parcela e recalcula status."""

    def __init__(self, pedido_repo: PedidoRepository, uow: UnitOfWork):
        self.pedido_repo = pedido_repo
        self.uow = uow

    def _obter_pedido(self, parcela_id: str) -> PedidoTerapeutico:
        pedido = self.pedido_repo.get_by_parcela_id(parcela_id, for_update=True)
        if not pedido:
            raise EntityNotFoundError(
                "Parcela não encontrada", entity_type="Parcela", entity_id=parcela_id
            )
        return pedido

    def _finalizar(self, pedido: PedidoTerapeutico, status_anterior: StatusPedido) -> None:
        novo_status = pedido.recalcular_status()
        self.pedido_repo.save(pedido)
        if novo_status == StatusPedido.PAID and status_anterior != StatusPedido.PAID:
            self.uow.publish_event(_evento_quitacao(pedido))
            logger.info(f"Pedido quitado: {pedido.id}")


class RegistrarPagamentoService(_AlterarParcelaService):
    """
    Use Case: Registrar pagamento (baixa) de parcela.

    Invariante: valor pago acumulado nunca excede o valor da parcela.
    """

    def execute(self, input_dto: RegistrarPagamentoInputDTO) -> PedidoOutputDTO:
        with self.uow:
            pedido = self._obter_pedido(input_dto.parcela_id)
            parcela = pedido.obter_parcela(input_dto.parcela_id)
            status_anterior = pedido.status

            forma = (
                FormaPagamento.from_string(input_dto.forma_pagamento, "payment_method")
                if input_dto.forma_pagamento else None
            )
            valor = parcela.registrar_pagamento(
                input_dto.valor, forma_pagamento=forma, quando=input_dto.pago_em
            )

            self._finalizar(pedido, status_anterior)

            self.uow.publish_event(
                PagamentoRegistradoEvent(
                    aggregate_id=pedido.id,
                    parcela_id=parcela.id,
                    paciente_id=pedido.paciente_id,
                    valor=money(valor),
                    status_pedido=pedido.status.value,
                )
            )

        logger.info(
            f"Pagamento registrado: parcela {parcela.numero} do pedido {pedido.id} | "
            f"valor {valor} | status {pedido.status.value}"
        )
        return PedidoOutputDTO.from_entity(pedido)


class EstornarPagamentoService(_AlterarParcelaService):
    def execute(self, parcela_id: str) -> PedidoOutputDTO:
        with self.uow:
            pedido = self._obter_pedido(parcela_id)
            status_anterior = pedido.status
            pedido.obter_parcela(parcela_id).estornar()
            self._finalizar(pedido, status_anterior)

        logger.info(f"Pagamento estornado: parcela {parcela_id}")
        return PedidoOutputDTO.from_entity(pedido)


class CancelarParcelaService(_AlterarParcelaService):
    def execute(self, parcela_id: str) -> PedidoOutputDTO:
        with self.uow:
            pedido = self._obter_pedido(parcela_id)
            status_anterior = pedido.status
            pedido.obter_parcela(parcela_id).cancelar()
            self._finalizar(pedido, status_anterior)

        return PedidoOutputDTO.from_entity(pedido)
