"""Case context parsing from plain structured records.

Records go through the same pydantic schema as the HTTP layer, so
snake_case and camelCase keys are both accepted and the closed enum sets
are enforced in one place. Required sections are never defaulted: a
missing ``speciesFlags``, ``animal`` or ``org`` block is a validation
error, since treating unknown signals as "no risk" is unsafe.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from wildlife_triage.routing.models import AfterHoursRule, CaseContext
from wildlife_triage.schemas.triage import CaseContextRequest


class CaseContextError(ValueError):
    """Raised when a case context record is malformed."""

    pass


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'record'}: {error['msg']}"
        for error in exc.errors()
    )


def parse_after_hours_rule(value: Any) -> AfterHoursRule | str:
    """Parse a configured after-hours rule, keeping unrecognized strings verbatim."""
    if value is None:
        return AfterHoursRule.DEFLECT
    if isinstance(value, AfterHoursRule):
        return value
    try:
        return AfterHoursRule(str(value))
    except ValueError:
        return str(value)


def parse_case_context(data: Mapping[str, Any]) -> CaseContext:
    """Build a CaseContext from a plain mapping.

    Args:
        data: Record with speciesFlags, animal, org and optional exposure
              and explicitDecision

    Returns:
        Frozen CaseContext

    Raises:
        CaseContextError: If a required section is missing or a value is invalid
    """
    try:
        return CaseContextRequest.model_validate(data).to_case_context()
    except ValidationError as exc:
        raise CaseContextError(f"Invalid case context: {_describe(exc)}") from exc


def case_context_to_dict(context: CaseContext) -> dict[str, Any]:
    """Serialize a CaseContext to its camelCase JSON shape."""
    return CaseContextRequest.from_case_context(context).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )
