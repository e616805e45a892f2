"""Base Pydantic model for authbridge.

All records that cross a module boundary (provider descriptors, grants,
profiles, sessions, configuration) inherit from `BridgeBaseModel` so they
share one configuration:

- Strict field validation (no extra fields allowed)
- Immutable instances, safe to hand between concurrent login attempts

Example:
    >>> from authbridge.models import BridgeBaseModel
    >>>
    >>> class Point(BridgeBaseModel):
    ...     x: int
    ...     y: int = 0
    >>>
    >>> Point(x=1).model_dump()
    {'x': 1, 'y': 0}
"""

from pydantic import BaseModel, ConfigDict


class BridgeBaseModel(BaseModel):
    """Base model for all authbridge Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable

    Configuration models that are adjusted after loading override
    `model_config` with `frozen=False`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
