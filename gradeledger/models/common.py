# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and base classes for request/response models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from gradeledger.domains.exceptions import ValidationError


class VerificationState(str, Enum):
    """Adjudication status of an enrollment."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class VerificationDecision(str, Enum):
    """Decision a verifier may record."""

    VERIFIED = "verified"
    REJECTED = "rejected"


class CompletionStatus(str, Enum):
    """Course completion status reported by the student."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    NOT_COMPLETED = "not_completed"


class CreditTransfer(str, Enum):
    """Whether the student asks for the grade to be snapshotted for transfer."""

    YES = "yes"
    NO = "no"


class RequestModel(BaseModel):
    """Base class for inbound payloads.

    Unknown fields are rejected so nothing can be smuggled past the
    fields a request is allowed to carry.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @classmethod
    def parse(cls, data: Any) -> Self:
        """Build the model from a raw payload.

        Args:
            data: Mapping (or model instance) received from the caller.

        Returns:
            Validated model instance.

        Raises:
            ValidationError: If the payload does not match the model.
        """
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            errors = [
                {"field": ".".join(str(part) for part in err["loc"]), "error": err["msg"]}
                for err in e.errors()
            ]
            raise ValidationError(
                f"Invalid {cls.__name__} payload",
                details={"errors": errors},
            ) from e
