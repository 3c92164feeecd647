"""Validator bridge, validated-input sum type and the validation aggregator."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from starlette_request_pipeline.exceptions import ConfigurationError

if TYPE_CHECKING:
    from starlette_request_pipeline.extraction import RawFacts
    from starlette_request_pipeline.route import Route

Part = Literal["body", "query", "params"]


class _NotProvided:
    """Marker for an input part that has no declared schema."""

    _instance: ClassVar[_NotProvided | None] = None

    def __new__(cls) -> _NotProvided:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_PROVIDED"


NOT_PROVIDED: Any = _NotProvided()


@dataclass(frozen=True)
class ValidationError:
    """A single input problem located by part and field path."""

    path: tuple[str | int, ...]
    message: str


@dataclass(frozen=True)
class ParseSuccess:
    data: Any
    ok: ClassVar[Literal[True]] = True


@dataclass(frozen=True)
class ParseFailure:
    errors: tuple[ValidationError, ...]
    ok: ClassVar[Literal[False]] = False


ParseResult = ParseSuccess | ParseFailure


@runtime_checkable
class ValidatorAdapter(Protocol):
    """Capability that checks raw data against an opaque schema object."""

    def parse(self, schema: Any, data: Any, part: Part) -> ParseResult: ...


@dataclass(frozen=True)
class ValidInput:
    """Every declared part validated; undeclared parts are NOT_PROVIDED."""

    body: Any = NOT_PROVIDED
    query: Any = NOT_PROVIDED
    params: Any = NOT_PROVIDED
    ok: ClassVar[Literal[True]] = True


@dataclass(frozen=True)
class InvalidInput:
    """At least one part failed. No validated value is exposed."""

    errors: tuple[ValidationError, ...]
    ok: ClassVar[Literal[False]] = False


ValidatedInput = ValidInput | InvalidInput


@dataclass(frozen=True)
class InputSchemas:
    """Schemas a route declares for its body, query and path params."""

    body: Any = None
    query: Any = None
    params: Any = None

    @property
    def declared(self) -> bool:
        return any(s is not None for s in (self.body, self.query, self.params))

    @property
    def declares_body(self) -> bool:
        return self.body is not None


class PydanticValidator:
    """ValidatorAdapter backed by pydantic models and TypeAdapter-compatible types.

    Error paths are prefixed with the part name, so a failing ``id`` path
    parameter is reported at ``("params", "id")``.
    """

    def __init__(self, *, strict: bool | None = None) -> None:
        self._strict = strict
        self._adapters: dict[Any, TypeAdapter[Any]] = {}

    def _adapter(self, schema: Any) -> TypeAdapter[Any]:
        adapter = self._adapters.get(schema)
        if adapter is None:
            adapter = self._adapters[schema] = TypeAdapter(schema)
        return adapter

    def parse(self, schema: Any, data: Any, part: Part) -> ParseResult:
        try:
            if isinstance(schema, type) and issubclass(schema, BaseModel):
                value = schema.model_validate(data, strict=self._strict)
            else:
                value = self._adapter(schema).validate_python(data, strict=self._strict)
        except PydanticValidationError as exc:
            return ParseFailure(
                tuple(
                    ValidationError(path=(part, *err["loc"]), message=err["msg"])
                    for err in exc.errors()
                )
            )
        return ParseSuccess(value)


def validate_input(
    schemas: InputSchemas,
    raw: RawFacts,
    validator: ValidatorAdapter | None,
    body_errors: Sequence[ValidationError] = (),
) -> ValidatedInput:
    """Run every declared schema and aggregate errors across all parts."""
    if not schemas.declared:
        return ValidInput()

    if validator is None:
        raise ConfigurationError("A validator is required when input schemas are declared")

    errors: list[ValidationError] = []
    validated: dict[str, Any] = {}

    for part, schema, data in (
        ("body", schemas.body, raw.body),
        ("query", schemas.query, raw.query),
        ("params", schemas.params, raw.params),
    ):
        if schema is None:
            validated[part] = NOT_PROVIDED
            continue

        if part == "body" and body_errors:
            # Unparseable body: nothing to hand to the schema
            errors.extend(body_errors)
            continue

        result = validator.parse(schema, data, part)  # type: ignore[arg-type]
        if result.ok:
            validated[part] = result.data
        else:
            errors.extend(result.errors)

    if errors:
        return InvalidInput(tuple(errors))
    return ValidInput(**validated)


def check_validator(routes: Iterable[Route], validator: ValidatorAdapter | None) -> None:
    """Fail at startup when a route declares schemas but no validator is set."""
    if validator is not None:
        return
    for route in routes:
        if route.input.declared:
            raise ConfigurationError(
                f"Route {route.label} declares input schemas but no validator "
                "is configured",
                route=route.label,
            )
