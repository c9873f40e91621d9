"""Review states, actor roles and capability results."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel


class ReviewStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# pending is only ever the initial value
REVIEW_TARGETS = frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED})


class Role(str, enum.Enum):
    ADMIN = "admin"
    INSPECTOR = "inspector"


class Actor(BaseModel):
    id: str
    name: str = ""
    role: Role = Role.INSPECTOR

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


T = TypeVar("T")


@dataclass(frozen=True)
class Authorized(Generic[T]):
    value: T


@dataclass(frozen=True)
class Denied:
    reason: str


Capability = Union[Authorized[T], Denied]


@dataclass(frozen=True)
class ReviewTransition:
    record_id: str
    previous: ReviewStatus
    current: ReviewStatus


@dataclass
class BulkReviewResult:
    target: ReviewStatus
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def summary(self) -> Optional[str]:
        if self.ok:
            return None
        return f"{len(self.failed)} of {len(self.succeeded) + len(self.failed)} transitions failed"


class ReviewPayload(BaseModel):
    status: ReviewStatus


class BulkReviewPayload(BaseModel):
    status: ReviewStatus
    record_ids: Optional[list[str]] = None
    # When record_ids is omitted, every record currently in this status is targeted
    source_status: ReviewStatus = ReviewStatus.PENDING
