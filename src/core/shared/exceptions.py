"""
Exceções de domínio da plataforma Hekate.

Os use cases só levantam estas exceções; a camada HTTP decide o status:

    DomainException
    ├── ValidationError             400  dado de entrada inválido
    ├── EntityNotFoundError         404  registro inexistente ou de outro usuário
    ├── PermissionDeniedError       403
    └── BusinessRuleViolationError  422  operação válida, mas proibida pelo estado atual
"""


class DomainException(Exception):
    """Base de todos os erros de domínio."""

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def details(self) -> dict:
        """Contexto extra exposto ao cliente em `meta`."""
        return {}


class ValidationError(DomainException):
    """
    Entrada rejeitada pelo domínio.

    `field` usa o nome do campo na API (ex.: "installments_count"),
    para que o cliente saiba onde exibir o erro.
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message, "VALIDATION_ERROR")

    def details(self) -> dict:
        return {"field": self.field}


class EntityNotFoundError(DomainException):

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def details(self) -> dict:
        return {"entity": self.entity_type} if self.entity_type else {}


class PermissionDeniedError(DomainException):
    def __init__(self, message: str = "Acesso negado"):
        super().__init__(message, "PERMISSION_DENIED")


class BusinessRuleViolationError(DomainException):
    """
    Regra de negócio impede a operação.

    Example:
        if self.valor_pago + valor > self.valor:
            raise BusinessRuleViolationError(
                "Pagamento excede o valor da parcela",
                rule="pagamento_excede_parcela",
            )
    """

    def __init__(self, message: str, rule: str = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def details(self) -> dict:
        return {"rule": self.rule}
