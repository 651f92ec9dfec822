"""
Base das APIs JSON.

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

Autenticação:
- Sessão Django (`request.user`), via `require_login` / `require_admin`
"""

import json
import logging
from functools import wraps
from typing import Any, Dict, Type

from django import forms
from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.config.container import get_container
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    DomainException,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Ordem importa: subclasses antes da base
DOMAIN_ERROR_STATUS = (
    (ValidationError, 400),
    (EntityNotFoundError, 404),
    (PermissionDeniedError, 403),
    (BusinessRuleViolationError, 422),
)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("JSON inválido: esperado um objeto")
    return data


def get_user_id(request: HttpRequest) -> str:
    """Extrai ID do usuário do request."""
    if request.user.is_authenticated:
        return str(request.user.id)
    return 'anonymous'


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))


class InvalidFormError(Exception):
    """Dados de entrada rejeitados por um Django Form."""

    def __init__(self, form: forms.Form):
        self.errors = form.errors.get_json_data()
        super().__init__("Dados inválidos")


# =============================================================================
# Decorators de autenticação
# =============================================================================

def require_login(view_method):
    """Exige sessão autenticada (401 caso contrário)."""

    @wraps(view_method)
    def wrapper(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_response(success=False, error="Não autorizado", status=401)
        return view_method(self, request, *args, **kwargs)

    return wrapper


def require_admin(view_method):
    """Exige usuário administrador (401 sem sessão, 403 sem permissão)."""

    @wraps(view_method)
    def wrapper(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_response(success=False, error="Não autorizado", status=401)
        if not is_admin(request.user):
            return json_response(success=False, error="Acesso negado", status=403)
        return view_method(self, request, *args, **kwargs)

    return wrapper


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON e validação por Form
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container pelo nome do provider."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def validate(self, form_class: Type[forms.Form], data: Dict,
                 partial: bool = False) -> Dict:
        """
        Valida dados com um Form e retorna `cleaned_data`.

        Com `partial=True` (PATCH), retorna apenas as chaves enviadas.

        Raises:
            InvalidFormError: Se o form for inválido
        """
        form = form_class(data)
        if not form.is_valid():
            raise InvalidFormError(form)
        if partial:
            return {k: v for k, v in form.cleaned_data.items() if k in data}
        return form.cleaned_data

    def handle_exception(self, e: Exception) -> JsonResponse:
        """Traduz exceções em respostas JSON com o status apropriado."""
        if isinstance(e, InvalidFormError):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'details': e.errors}
            )

        if isinstance(e, DomainException):
            status = next(
                (code for cls, code in DOMAIN_ERROR_STATUS if isinstance(e, cls)), 400
            )
            return json_response(
                success=False,
                error=str(e),
                status=status,
                meta=e.details() or None
            )

        if isinstance(e, ValueError):
            return json_response(success=False, error=str(e), status=400)

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )
