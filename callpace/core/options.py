"""Option records for throttled and debounced wrappers."""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, StrictBool

OptionsT = TypeVar("OptionsT", bound=BaseModel)


class ThrottleOptions(BaseModel):
    """Edges on which a throttled function may run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    leading: StrictBool = True
    trailing: StrictBool = True


class DebounceOptions(BaseModel):
    """Debounce always fires on the trailing edge; leading is optional."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    leading: StrictBool = False


def coerce_options(
    model: type[OptionsT], options: OptionsT | Mapping[str, Any] | None
) -> OptionsT:
    """Turn None, a mapping, or a record into a validated record.

    Raises:
        pydantic.ValidationError: On unknown keys or non-bool values.
    """
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    return model.model_validate(dict(options))
