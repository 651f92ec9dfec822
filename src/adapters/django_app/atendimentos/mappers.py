"""
Mappers para conversão entre Entities (Core) e Models (Django).

- to_entity(): Model → Entity (dados já validados; não passa por `criar`)
- to_defaults(): Entity → dicionário para `update_or_create`

Mappers são stateless e não contêm lógica de negócio.
"""

from typing import Any, Dict, Optional

from src.core.atendimentos.entities import (
    FormaPagamento,
    ItemOrcamento,
    ModoSessao,
    ModoVencimento,
    Parcela,
    PedidoTerapeutico,
    ProcessoTerapeutico,
    SessaoAvulsa,
    SessaoTerapeutica,
    StatusParcela,
    StatusPedido,
    StatusProcesso,
    StatusSessao,
    Terapia,
)

from .models import (
    ItemOrcamentoModel,
    ParcelaModel,
    PedidoTerapeuticoModel,
    ProcessoTerapeuticoModel,
    SessaoAvulsaModel,
    SessaoTerapeuticaModel,
    TerapiaModel,
)


def _valor(enum_value) -> Optional[str]:
    return enum_value.value if enum_value is not None else None


class TerapiaMapper:
    @staticmethod
    def to_entity(model: TerapiaModel) -> Terapia:
        return Terapia(
            id=model.id,
            nome=model.nome,
            descricao=model.descricao,
            valor=model.valor,
            valor_por_sessao=model.valor_por_sessao,
            sessoes_padrao=model.sessoes_padrao,
            valor_sessao_avulsa=model.valor_sessao_avulsa,
            ativa=model.ativa,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: Terapia) -> Dict[str, Any]:
        return {
            'nome': entity.nome,
            'descricao': entity.descricao,
            'valor': entity.valor,
            'valor_por_sessao': entity.valor_por_sessao,
            'sessoes_padrao': entity.sessoes_padrao,
            'valor_sessao_avulsa': entity.valor_sessao_avulsa,
            'ativa': entity.ativa,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }


class PedidoMapper:
    """Pedido com parcelas (espera `parcelas` pré-carregadas)."""

    @staticmethod
    def parcela_to_entity(model: ParcelaModel) -> Parcela:
        return Parcela(
            id=model.id,
            pedido_id=model.pedido_id,
            numero=model.numero,
            valor=model.valor,
            valor_pago=model.valor_pago,
            vencimento=model.vencimento,
            status=StatusParcela(model.status),
            pago_em=model.pago_em,
            forma_pagamento=FormaPagamento(model.forma_pagamento) if model.forma_pagamento else None,
        )

    @staticmethod
    def parcela_defaults(parcela: Parcela, pedido_id: str) -> Dict[str, Any]:
        return {
            'pedido_id': pedido_id,
            'numero': parcela.numero,
            'valor': parcela.valor,
            'valor_pago': parcela.valor_pago,
            'vencimento': parcela.vencimento,
            'status': parcela.status.value,
            'pago_em': parcela.pago_em,
            'forma_pagamento': _valor(parcela.forma_pagamento),
        }

    @classmethod
    def to_entity(cls, model: PedidoTerapeuticoModel) -> PedidoTerapeutico:
        return PedidoTerapeutico(
            id=model.id,
            paciente_id=model.paciente_id,
            processo_id=model.processo_id,
            sessao_avulsa_id=model.sessao_avulsa_id,
            status=StatusPedido(model.status),
            forma_pagamento=FormaPagamento(model.forma_pagamento),
            modo_vencimento=ModoVencimento(model.modo_vencimento),
            quantidade_parcelas=model.quantidade_parcelas,
            primeiro_vencimento=model.primeiro_vencimento,
            valor_total=model.valor_total,
            parcelas=[cls.parcela_to_entity(p) for p in model.parcelas.all()],
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: PedidoTerapeutico) -> Dict[str, Any]:
        return {
            'paciente_id': entity.paciente_id,
            'processo_id': entity.processo_id,
            'sessao_avulsa_id': entity.sessao_avulsa_id,
            'status': entity.status.value,
            'forma_pagamento': entity.forma_pagamento.value,
            'modo_vencimento': entity.modo_vencimento.value,
            'quantidade_parcelas': entity.quantidade_parcelas,
            'primeiro_vencimento': entity.primeiro_vencimento,
            'valor_total': entity.valor_total,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }


def _pedido_de(model) -> Optional[PedidoTerapeutico]:
    try:
        return PedidoMapper.to_entity(model.pedido)
    except PedidoTerapeuticoModel.DoesNotExist:
        return None


class ProcessoMapper:
    """Agregado completo: itens, sessões e pedido."""

    @staticmethod
    def item_to_entity(model: ItemOrcamentoModel) -> ItemOrcamento:
        return ItemOrcamento(
            id=model.id,
            terapia_id=model.terapia_id,
            terapia_nome=model.terapia_nome,
            valor_unitario=model.valor_unitario,
            sessoes_por_unidade=model.sessoes_por_unidade,
            quantidade=model.quantidade,
            desconto=model.desconto,
            ordem=model.ordem,
        )

    @staticmethod
    def item_defaults(item: ItemOrcamento, processo_id: str) -> Dict[str, Any]:
        return {
            'processo_id': processo_id,
            'terapia_id': item.terapia_id,
            'terapia_nome': item.terapia_nome,
            'valor_unitario': item.valor_unitario,
            'sessoes_por_unidade': item.sessoes_por_unidade,
            'quantidade': item.quantidade,
            'desconto': item.desconto,
            'ordem': item.ordem,
        }

    @staticmethod
    def sessao_to_entity(model: SessaoTerapeuticaModel) -> SessaoTerapeutica:
        return SessaoTerapeutica(
            id=model.id,
            processo_id=model.processo_id,
            item_orcamento_id=model.item_orcamento_id,
            terapia_id=model.terapia_id,
            numero_sessao=model.numero_sessao,
            indice_ordem=model.indice_ordem,
            status=StatusSessao(model.status),
            modo=ModoSessao(model.modo) if model.modo else None,
            terapeuta_id=model.terapeuta_id,
            data_sessao=model.data_sessao,
            comentarios=model.comentarios,
            concluida_em=model.concluida_em,
        )

    @staticmethod
    def sessao_defaults(sessao: SessaoTerapeutica, processo_id: str) -> Dict[str, Any]:
        return {
            'processo_id': processo_id,
            'item_orcamento_id': sessao.item_orcamento_id,
            'terapia_id': sessao.terapia_id,
            'numero_sessao': sessao.numero_sessao,
            'indice_ordem': sessao.indice_ordem,
            'status': sessao.status.value,
            'modo': _valor(sessao.modo),
            'terapeuta_id': sessao.terapeuta_id,
            'data_sessao': sessao.data_sessao,
            'comentarios': sessao.comentarios or '',
            'concluida_em': sessao.concluida_em,
        }

    @classmethod
    def to_entity(cls, model: ProcessoTerapeuticoModel) -> ProcessoTerapeutico:
        return ProcessoTerapeutico(
            id=model.id,
            paciente_id=model.paciente_id,
            criado_por_id=model.criado_por_id,
            status=StatusProcesso(model.status),
            observacoes=model.observacoes,
            itens=[cls.item_to_entity(i) for i in model.itens.all()],
            sessoes=[cls.sessao_to_entity(s) for s in model.sessoes.all()],
            pedido=_pedido_de(model),
            iniciado_em=model.iniciado_em,
            finalizado_em=model.finalizado_em,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: ProcessoTerapeutico) -> Dict[str, Any]:
        return {
            'paciente_id': entity.paciente_id,
            'criado_por_id': entity.criado_por_id,
            'status': entity.status.value,
            'observacoes': entity.observacoes,
            'iniciado_em': entity.iniciado_em,
            'finalizado_em': entity.finalizado_em,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }


class SessaoAvulsaMapper:
    @staticmethod
    def to_entity(model: SessaoAvulsaModel) -> SessaoAvulsa:
        return SessaoAvulsa(
            id=model.id,
            paciente_id=model.paciente_id,
            terapia_id=model.terapia_id,
            terapia_nome=model.terapia_nome,
            terapia_valor=model.terapia_valor,
            terapeuta_id=model.terapeuta_id,
            data_sessao=model.data_sessao,
            modo=ModoSessao(model.modo) if model.modo else None,
            status=StatusSessao(model.status),
            comentarios=model.comentarios,
            dados_sessao=model.dados_sessao,
            valor_cobrado=model.valor_cobrado,
            pedido=_pedido_de(model),
            criado_por_id=model.criado_por_id,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )

    @staticmethod
    def to_defaults(entity: SessaoAvulsa) -> Dict[str, Any]:
        return {
            'paciente_id': entity.paciente_id,
            'terapia_id': entity.terapia_id,
            'terapia_nome': entity.terapia_nome,
            'terapia_valor': entity.terapia_valor,
            'terapeuta_id': entity.terapeuta_id,
            'data_sessao': entity.data_sessao,
            'modo': _valor(entity.modo),
            'status': entity.status.value,
            'comentarios': entity.comentarios,
            'dados_sessao': entity.dados_sessao,
            'valor_cobrado': entity.valor_cobrado,
            'criado_por_id': entity.criado_por_id,
            'criado_em': entity.criado_em,
            'atualizado_em': entity.atualizado_em,
        }