# app/schemas/common.py
from decimal import Decimal
from typing import Annotated, Any, Iterable, Mapping
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from app.core.errors import InvalidIdentifier


class CamelModel(BaseModel):
    """JSON en camelCase, atributos en snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelRequest(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# Monto de entrada: positivo, NUMERIC(10, 2)
PositiveAmount = Annotated[
    Decimal,
    Field(gt=0, max_digits=10, decimal_places=2, examples=[100.00]),
]

# Monto de salida: Decimal internamente, número en el JSON
AmountOut = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class ErrorResponse(BaseModel):
    code: str
    message: str


def describe_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Primer error de validación en formato legible ("amount: ...")."""
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc)
        msg = err.get("msg", "invalid value")
        return f"{field}: {msg}" if field else msg
    return "Invalid request"


ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def parse_uuid(raw: Any, label: str = "ID") -> UUID:
    """UUID desde el path/query; ``InvalidIdentifier`` si está mal formado."""
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifier(f"Invalid {label} format")
