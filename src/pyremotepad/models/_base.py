"""Base model for pyremotepad wire payloads.

Every payload model inherits from :class:`RemotePadBaseModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys the handheld page
  sends (``joystickX``) map to snake_case fields (``joystick_x``).
* Frozen instances: a decoded payload never changes after validation.
* Rejection of NaN/infinity, which JSON encoders on the client side can
  emit but which can never be a valid joystick axis.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RemotePadBaseModel(BaseModel):
    """Base for payloads received from remote clients."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        allow_inf_nan=False,
    )
