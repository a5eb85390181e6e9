from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

Status = Literal["success", "error"]


class ErrorKind(str, Enum):
    NOT_IN_FRAME = "not_in_frame"
    NO_GAP_FOUND = "no_gap_found"
    GAP_EXISTS = "gap_exists"
    AMBIGUOUS_STACK_ORDER = "ambiguous_stack_order"
    DEGENERATE_REGION = "degenerate_region"
    INVALID_SELECTION = "invalid_selection"


class NotInFrameError(ValueError):
    def __init__(self, shape_id: str) -> None:
        super().__init__(f"Shape {shape_id} is not placed inside a frame")
        self.shape_id = shape_id


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a geometry operation.

    `kind` is set for every error and for informational successes such as
    `NO_GAP_FOUND`, which succeed with an empty payload.
    """

    status: Status
    payload: T | None = None
    kind: ErrorKind | None = None
    log: str | None = None
    toast: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def found(self) -> bool:
        return self.ok and self.payload is not None

    def unwrap(self) -> T:
        if self.payload is None:
            msg = f"Result has no payload ({self.kind.value if self.kind else self.status})"
            raise ValueError(msg)
        return self.payload

    @classmethod
    def success(
        cls,
        payload: T | None = None,
        *,
        kind: ErrorKind | None = None,
        log: str | None = None,
    ) -> Result[T]:
        return cls(status="success", payload=payload, kind=kind, log=log)

    @classmethod
    def error(cls, kind: ErrorKind, log: str, toast: str | None = None) -> Result[T]:
        return cls(status="error", kind=kind, log=log, toast=toast)


def report_result(result: Result[object], logger: logging.Logger) -> None:
    if not result.log:
        return
    if result.ok:
        logger.info(result.log)
    else:
        logger.warning("%s: %s", result.kind.value if result.kind else "error", result.log)
