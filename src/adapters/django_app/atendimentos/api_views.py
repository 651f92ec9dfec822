"""
API Views JSON para o domínio de Atendimentos.

Endpoints (prefixo /api/atendimentos/):
- GET/POST   terapias/                              - Listar / criar terapias
- GET/PATCH  terapias/<id>/                         - Obter / atualizar terapia
- GET/POST   processos/                             - Listar / criar processos
- GET/PATCH  processos/<id>/                        - Obter / atualizar processo
- POST       processos/<id>/itens/                  - Adicionar item ao orçamento
- DELETE     processos/<id>/itens/<item_id>/        - Remover item do orçamento
- PATCH      processos/<id>/sessoes/<sessao_id>/    - Atualizar sessão do processo
- GET/POST   sessoes-avulsas/                       - Listar / criar sessões avulsas
- GET/PATCH/DELETE sessoes-avulsas/<id>/            - Sessão avulsa
- GET        financeiro/parcelas/                   - Listagem financeira
- POST       financeiro/parcelas/<id>/pagamento/    - Registrar pagamento
- POST       financeiro/parcelas/<id>/estorno/      - Estornar pagamento
- POST       financeiro/parcelas/<id>/cancelamento/ - Cancelar parcela

Escritas exigem administrador. Pacientes leem apenas os próprios
processos e sessões.
"""

import logging
from decimal import Decimal

from django.http import HttpRequest, JsonResponse

from src.core.atendimentos.dtos import (
    NAO_INFORMADO,
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
from src.core.shared.exceptions import PermissionDeniedError

from ..shared.api import (
    BaseAPIView,
    get_user_id,
    is_admin,
    json_response,
    require_admin,
    require_login,
)
from .forms import (
    ItemOrcamentoForm,
    PagamentoForm,
    ParcelasFiltroForm,
    ProcessoCreateForm,
    ProcessoUpdateForm,
    SessaoAvulsaCreateForm,
    SessaoAvulsaUpdateForm,
    SessaoProcessoUpdateForm,
    TerapiaForm,
    TerapiaUpdateForm,
)

logger = logging.getLogger(__name__)


def _exigir_acesso(request: HttpRequest, paciente_id: str) -> None:
    """Administradores veem tudo; demais usuários apenas os próprios registros."""
    if not is_admin(request.user) and get_user_id(request) != str(paciente_id):
        raise PermissionDeniedError()


def _presente(campos, chave):
    return campos[chave] if chave in campos else NAO_INFORMADO


# =============================================================================
# Terapias
# =============================================================================

class TerapiaAPIListView(BaseAPIView):
    """
    GET /api/atendimentos/terapias/ - Lista terapias (?active=true)
    POST /api/atendimentos/terapias/ - Cria terapia
    """

    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            somente_ativas = request.GET.get('active', '').lower() in ('1', 'true')
            terapias = self.get_service('listar_terapias_service').execute(
                somente_ativas=somente_ativas
            )
            return json_response(
                success=True,
                data=[t.to_dict() for t in terapias],
                meta={'total': len(terapias)},
            )
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "name": "string (obrigatório)",
            "value": "decimal (obrigatório)",
            "description": "string",
            "value_per_session": bool,
            "default_sessions": int,
            "single_session_value": "decimal"
        }
        """
        try:
            dados = self.validate(TerapiaForm, self.parse_body(request))

            output = self.get_service('criar_terapia_service').execute(
                CriarTerapiaInputDTO(
                    nome=dados['name'],
                    valor=dados['value'],
                    descricao=dados.get('description') or '',
                    valor_por_sessao=bool(dados.get('value_per_session')),
                    sessoes_padrao=dados.get('default_sessions') or 1,
                    valor_sessao_avulsa=dados.get('single_session_value'),
                )
            )

            logger.info(f"API: Terapia criada: {output.id}")
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class TerapiaAPIDetailView(BaseAPIView):
    @require_login
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('obter_terapia_service').execute(pk)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            campos = self.validate(TerapiaUpdateForm, self.parse_body(request), partial=True)

            output = self.get_service('atualizar_terapia_service').execute(
                AtualizarTerapiaInputDTO(
                    terapia_id=pk,
                    nome=campos.get('name'),
                    descricao=campos.get('description'),
                    valor=campos.get('value'),
                    valor_por_sessao=campos.get('value_per_session'),
                    sessoes_padrao=campos.get('default_sessions'),
                    valor_sessao_avulsa=campos.get('single_session_value'),
                    ativa=campos.get('active'),
                )
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Processos terapêuticos
# =============================================================================

class ProcessoAPIListView(BaseAPIView):
    """
    GET /api/atendimentos/processos/ - Lista processos
        Query params: patient_user_id, status
    POST /api/atendimentos/processos/ - Cria processo (IN_ANALYSIS)
    """

    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            paciente_id = request.GET.get('patient_user_id') or None
            if not is_admin(request.user):
                paciente_id = get_user_id(request)

            processos = self.get_service('listar_processos_service').execute(
                paciente_id=paciente_id,
                status=request.GET.get('status') or None,
            )
            return json_response(
                success=True,
                data=[p.to_dict() for p in processos],
                meta={'total': len(processos)},
            )
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            dados = self.validate(ProcessoCreateForm, self.parse_body(request))

            output = self.get_service('criar_processo_service').execute(
                CriarProcessoInputDTO(
                    paciente_id=dados['patient_user_id'],
                    criado_por_id=get_user_id(request),
                    observacoes=dados.get('notes') or '',
                )
            )

            logger.info(f"API: Processo criado: {output.id}")
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class ProcessoAPIDetailView(BaseAPIView):
    """
    GET /api/atendimentos/processos/<id>/ - Processo com resumo financeiro
    PATCH /api/atendimentos/processos/<id>/ - Observações e status

    Mudar o status para IN_TREATMENT inicia o tratamento:
    {
        "status": "IN_TREATMENT",
        "payment_method": "PIX|CARD_MERCADO_PAGO|NUBANK",
        "installments_count": 1..36,
        "due_date_mode": "AUTOMATIC_MONTHLY|MANUAL",
        "first_due_date": "YYYY-MM-DD",
        "manual_due_dates": ["YYYY-MM-DD", ...]
    }
    """

    @require_login
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('obter_processo_service').execute(pk)
            _exigir_acesso(request, output.paciente_id)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            campos = self.validate(ProcessoUpdateForm, self.parse_body(request), partial=True)
            if not campos:
                return json_response(
                    success=False,
                    error="Nenhum campo válido para atualização",
                    status=400
                )

            output = self.get_service('atualizar_processo_service').execute(
                AtualizarProcessoInputDTO(
                    processo_id=pk,
                    status=campos.get('status') or None,
                    observacoes=campos.get('notes'),
                    forma_pagamento=campos.get('payment_method') or None,
                    modo_vencimento=campos.get('due_date_mode') or None,
                    quantidade_parcelas=campos.get('installments_count'),
                    primeiro_vencimento=campos.get('first_due_date') or None,
                    vencimentos_manuais=tuple(campos.get('manual_due_dates') or ()),
                    alterado_por_id=get_user_id(request),
                )
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class ItemOrcamentoAPIView(BaseAPIView):
    """POST /api/atendimentos/processos/<id>/itens/"""

    @require_admin
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Body JSON:
        {
            "therapy_id": "string (obrigatório)",
            "quantity": int (default 1),
            "discount": "decimal (default 0)"
        }
        """
        try:
            dados = self.validate(ItemOrcamentoForm, self.parse_body(request))

            output = self.get_service('adicionar_item_orcamento_service').execute(
                AdicionarItemOrcamentoInputDTO(
                    processo_id=pk,
                    terapia_id=dados['therapy_id'],
                    quantidade=dados.get('quantity') or 1,
                    desconto=dados.get('discount') or Decimal('0.00'),
                )
            )
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class ItemOrcamentoDetailAPIView(BaseAPIView):
    """DELETE /api/atendimentos/processos/<id>/itens/<item_id>/"""

    @require_admin
    def delete(self, request: HttpRequest, pk: str, item_id: str) -> JsonResponse:
        try:
            output = self.get_service('remover_item_orcamento_service').execute(pk, item_id)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class SessaoProcessoAPIView(BaseAPIView):
    """PATCH /api/atendimentos/processos/<id>/sessoes/<sessao_id>/"""

    @require_admin
    def patch(self, request: HttpRequest, pk: str, sessao_id: str) -> JsonResponse:
        try:
            campos = self.validate(
                SessaoProcessoUpdateForm, self.parse_body(request), partial=True
            )

            output = self.get_service('atualizar_sessao_processo_service').execute(
                AtualizarSessaoProcessoInputDTO(
                    processo_id=pk,
                    sessao_id=sessao_id,
                    status=_presente(campos, 'status'),
                    modo=_presente(campos, 'mode'),
                    terapeuta_id=_presente(campos, 'therapist_user_id'),
                    data_sessao=_presente(campos, 'session_date'),
                    comentarios=_presente(campos, 'comments'),
                )
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Sessões avulsas
# =============================================================================

class SessaoAvulsaAPIListView(BaseAPIView):
    """
    GET /api/atendimentos/sessoes-avulsas/ - Lista sessões (mais recentes primeiro)
        Query params: patient_user_id, status
    POST /api/atendimentos/sessoes-avulsas/ - Registra sessão com cobrança
    """

    @require_login
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            paciente_id = request.GET.get('patient_user_id') or None
            if not is_admin(request.user):
                paciente_id = get_user_id(request)

            sessoes = self.get_service('listar_sessoes_avulsas_service').execute(
                paciente_id=paciente_id,
                status=request.GET.get('status') or None,
            )
            return json_response(
                success=True,
                data=[s.to_dict() for s in sessoes],
                meta={'total': len(sessoes)},
            )
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "patient_user_id": "string (obrigatório)",
            "therapy_id": "string (obrigatório)",
            "payment_method": "PIX|CARD_MERCADO_PAGO|NUBANK (obrigatório)",
            "installments_count": int (obrigatório),
            "due_date_mode": "AUTOMATIC_MONTHLY|MANUAL (obrigatório)",
            "first_due_date": "YYYY-MM-DD",
            "manual_due_dates": ["YYYY-MM-DD", ...],
            "therapist_user_id": "string",
            "session_date": "ISO 8601",
            "mode": "IN_PERSON|DISTANCE|ONLINE",
            "status": "PENDING|COMPLETED|CANCELED",
            "comments": "string",
            "session_data": "string",
            "charged_amount": "decimal"
        }
        """
        try:
            dados = self.validate(SessaoAvulsaCreateForm, self.parse_body(request))

            output = self.get_service('criar_sessao_avulsa_service').execute(
                CriarSessaoAvulsaInputDTO(
                    paciente_id=dados['patient_user_id'],
                    terapia_id=dados['therapy_id'],
                    forma_pagamento=dados['payment_method'],
                    modo_vencimento=dados['due_date_mode'],
                    quantidade_parcelas=dados['installments_count'],
                    terapeuta_id=dados.get('therapist_user_id') or None,
                    data_sessao=dados.get('session_date'),
                    modo=dados.get('mode') or None,
                    status=dados.get('status') or 'COMPLETED',
                    comentarios=dados.get('comments') or None,
                    dados_sessao=dados.get('session_data') or None,
                    valor_cobrado=dados.get('charged_amount'),
                    primeiro_vencimento=dados.get('first_due_date') or None,
                    vencimentos_manuais=tuple(dados.get('manual_due_dates') or ()),
                    criado_por_id=get_user_id(request),
                )
            )

            logger.info(f"API: Sessão avulsa criada: {output.id}")
            return json_response(success=True, data=output.to_dict(), status=201)
        except Exception as e:
            return self.handle_exception(e)


class SessaoAvulsaAPIDetailView(BaseAPIView):
    @require_login
    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('obter_sessao_avulsa_service').execute(pk)
            _exigir_acesso(request, output.paciente_id)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def patch(self, request: HttpRequest, pk: str) -> JsonResponse:
        """
        Atualização parcial. `session_date: null` é rejeitado; alterar
        `charged_amount` redistribui as parcelas.
        """
        try:
            campos = self.validate(
                SessaoAvulsaUpdateForm, self.parse_body(request), partial=True
            )

            output = self.get_service('atualizar_sessao_avulsa_service').execute(
                AtualizarSessaoAvulsaInputDTO(
                    sessao_id=pk,
                    terapeuta_id=_presente(campos, 'therapist_user_id'),
                    data_sessao=_presente(campos, 'session_date'),
                    modo=_presente(campos, 'mode'),
                    status=_presente(campos, 'status'),
                    comentarios=_presente(campos, 'comments'),
                    dados_sessao=_presente(campos, 'session_data'),
                    valor_cobrado=_presente(campos, 'charged_amount'),
                )
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)

    @require_admin
    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            self.get_service('excluir_sessao_avulsa_service').execute(pk)
            return json_response(success=True, data={'id': pk})
        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Financeiro
# =============================================================================

class ParcelasAPIListView(BaseAPIView):
    """
    GET /api/atendimentos/financeiro/parcelas/

    Query params: status, overdue, due_from, due_to, patient_user_id
    """

    @require_admin
    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            filtros = self.validate(ParcelasFiltroForm, request.GET.dict())

            output = self.get_service('listar_parcelas_service').execute(
                ListarParcelasQueryDTO(
                    status=filtros.get('status') or None,
                    somente_vencidas=bool(filtros.get('overdue')),
                    vencimento_de=filtros.get('due_from'),
                    vencimento_ate=filtros.get('due_to'),
                    paciente_id=filtros.get('patient_user_id') or None,
                )
            )
            resultado = output.to_dict()
            return json_response(
                success=True,
                data=resultado['installments'],
                meta=resultado['totals'],
            )
        except Exception as e:
            return self.handle_exception(e)


class RegistrarPagamentoAPIView(BaseAPIView):
    """
    POST /api/atendimentos/financeiro/parcelas/<id>/pagamento/

    Body JSON (opcional):
    {
        "amount": "decimal (default: saldo da parcela)",
        "payment_method": "PIX|CARD_MERCADO_PAGO|NUBANK",
        "paid_at": "ISO 8601 (default: agora)"
    }
    """

    @require_admin
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            dados = self.validate(PagamentoForm, self.parse_body(request))

            output = self.get_service('registrar_pagamento_service').execute(
                RegistrarPagamentoInputDTO(
                    parcela_id=pk,
                    valor=dados.get('amount'),
                    forma_pagamento=dados.get('payment_method') or None,
                    pago_em=dados.get('paid_at'),
                    registrado_por_id=get_user_id(request),
                )
            )
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class EstornarPagamentoAPIView(BaseAPIView):
    """POST /api/atendimentos/financeiro/parcelas/<id>/estorno/"""

    @require_admin
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('estornar_pagamento_service').execute(pk)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)


class CancelarParcelaAPIView(BaseAPIView):
    """POST /api/atendimentos/financeiro/parcelas/<id>/cancelamento/"""

    @require_admin
    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            output = self.get_service('cancelar_parcela_service').execute(pk)
            return json_response(success=True, data=output.to_dict())
        except Exception as e:
            return self.handle_exception(e)
