"""Explicit view state for the criteria manager.

Both objects are immutable; every transition returns a new instance so the
view never mutates shared fields in place.
"""
from dataclasses import dataclass, replace

DEFAULT_MAX_SCORE = 10

LOADING = "loading"
ERROR = "error"
READY = "ready"

CLOSED = "closed"
CREATE = "create"
EDIT = "edit"


def parse_score(value) -> int:
    """Parse a score field, accepting ints and integer strings only."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid score: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"Invalid score: {value!r}")


@dataclass(frozen=True)
class Criterion:
    criteria_id: int
    criteria_name: str
    max_score: int

    @classmethod
    def from_api(cls, data: dict) -> "Criterion":
        return cls(
            criteria_id=data["criteria_id"],
            criteria_name=data["criteria_name"],
            max_score=data["max_score"],
        )


@dataclass(frozen=True)
class LoadState:
    status: str
    items: tuple[Criterion, ...] = ()
    error: str | None = None

    @classmethod
    def loading(cls) -> "LoadState":
        return cls(LOADING)

    @classmethod
    def failed(cls, message: str) -> "LoadState":
        return cls(ERROR, error=message)

    @classmethod
    def ready(cls, items) -> "LoadState":
        return cls(READY, items=tuple(items))

    def with_items(self, items) -> "LoadState":
        return replace(self, items=tuple(items))


@dataclass(frozen=True)
class Draft:
    criteria_name: str = ""
    max_score: int | str = DEFAULT_MAX_SCORE
    criteria_id: int | None = None


@dataclass(frozen=True)
class ModalState:
    mode: str = CLOSED
    draft: Draft | None = None

    @property
    def is_open(self) -> bool:
        return self.mode != CLOSED

    @property
    def title(self) -> str | None:
        if self.mode == CREATE:
            return "Add New Criteria"
        if self.mode == EDIT:
            return "Edit Criteria"
        return None

    def open_create(self) -> "ModalState":
        self._require_closed()
        return ModalState(CREATE, Draft())

    def open_edit(self, criterion: Criterion) -> "ModalState":
        self._require_closed()
        return ModalState(
            EDIT,
            Draft(
                criteria_name=criterion.criteria_name,
                max_score=criterion.max_score,
                criteria_id=criterion.criteria_id,
            ),
        )

    def close(self) -> "ModalState":
        return ModalState()

    def with_name(self, criteria_name: str) -> "ModalState":
        self._require_open()
        return replace(self, draft=replace(self.draft, criteria_name=criteria_name))

    def with_score(self, max_score: int | str) -> "ModalState":
        self._require_open()
        return replace(self, draft=replace(self.draft, max_score=max_score))

    def _require_open(self) -> None:
        if not self.is_open:
            raise ValueError("The criteria form is not open.")

    def _require_closed(self) -> None:
        if self.is_open:
            raise ValueError("The criteria form is already open.")
