import logging

from client.api import UNEXPECTED_RESPONSE_MESSAGE, ApiError, CriteriaApi
from client.notifications import Notifier
from client.state import (
    CREATE,
    EDIT,
    ERROR,
    LOADING,
    Criterion,
    LoadState,
    ModalState,
    parse_score,
)

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No criteria available for this event."
LOADING_MESSAGE = "Loading criteria..."
INVALID_SCORE_MESSAGE = "Max score must be a whole number."


class CriteriaManager:
    """Criteria list for one event plus the add/edit form that drives it.

    Mutations go to the server first; local state only changes once the
    server accepts them. Every failure becomes a single error notification.
    """

    def __init__(self, api: CriteriaApi, event_id: int, notifier: Notifier | None = None, autoload: bool = True):
        self.api = api
        self.event_id = event_id
        self.notifier = notifier or Notifier()
        self.state = LoadState.loading()
        self.modal = ModalState()
        if autoload:
            self.load()

    @property
    def criteria(self) -> list[Criterion]:
        return list(self.state.items)

    def select_event(self, event_id: int) -> None:
        if event_id == self.event_id:
            return
        self.event_id = event_id
        self.modal = self.modal.close()
        self.load()

    def load(self) -> LoadState:
        self.state = LoadState.loading()
        try:
            records = self.api.list_criteria(self.event_id)
        except ApiError as exc:
            self.state = LoadState.failed(exc.message or "Failed to load criteria.")
            return self.state

        try:
            self.state = LoadState.ready(Criterion.from_api(record) for record in records)
        except (KeyError, TypeError):
            logger.warning("Malformed criteria listing for event %s", self.event_id)
            self.state = LoadState.failed(UNEXPECTED_RESPONSE_MESSAGE)
        return self.state

    def create(self, criteria_name: str, max_score) -> Criterion | None:
        try:
            score = parse_score(max_score)
        except ValueError:
            self.notifier.error(INVALID_SCORE_MESSAGE)
            self.modal = self.modal.close()
            return None

        try:
            data = self.api.create_criteria(self.event_id, criteria_name, score)
        except ApiError as exc:
            if exc.is_network_error:
                self.notifier.error("Failed to add criteria.")
            else:
                self.notifier.error(exc.message or "An error occurred while adding criteria.")
            self.modal = self.modal.close()
            return None

        try:
            added = data["criteria"]
            criterion = Criterion(
                criteria_id=added["id"],
                criteria_name=added["name"],
                max_score=added["max_score"],
            )
        except (KeyError, TypeError):
            self.notifier.error(UNEXPECTED_RESPONSE_MESSAGE)
            self.modal = self.modal.close()
            return None
        self.state = self.state.with_items(self.state.items + (criterion,))
        self.notifier.success(data.get("message") or "Criteria added successfully!")
        self.modal = self.modal.close()
        return criterion

    def update(self, criteria_id: int, criteria_name: str, max_score) -> Criterion | None:
        try:
            score = parse_score(max_score)
        except ValueError:
            self.notifier.error(INVALID_SCORE_MESSAGE)
            return None

        record = {
            "criteria_id": criteria_id,
            "event_id": self.event_id,
            "criteria_name": criteria_name,
            "max_score": score,
        }
        try:
            data = self.api.update_criteria(record)
        except ApiError as exc:
            if exc.is_network_error:
                self.notifier.error("Error occurred while updating criteria.")
            else:
                self.notifier.error("Failed to update criteria.")
            return None

        try:
            updated = Criterion.from_api(data)
        except (KeyError, TypeError):
            self.notifier.error(UNEXPECTED_RESPONSE_MESSAGE)
            return None
        self.state = self.state.with_items(
            Criterion(item.criteria_id, updated.criteria_name, updated.max_score)
            if item.criteria_id == updated.criteria_id else item
            for item in self.state.items
        )
        self.notifier.success("Criteria updated successfully!")
        self.modal = self.modal.close()
        return updated

    def delete(self, criteria_id: int) -> bool:
        try:
            self.api.delete_criteria(criteria_id)
        except ApiError as exc:
            if exc.is_network_error:
                self.notifier.error("Error occurred while deleting criteria.")
            else:
                self.notifier.error("Failed to delete criteria.")
            return False

        self.state = self.state.with_items(
            item for item in self.state.items if item.criteria_id != criteria_id
        )
        self.notifier.success("Criteria deleted successfully!")
        return True

    def open_create(self) -> None:
        self.modal = self.modal.open_create()

    def open_edit(self, criterion: Criterion) -> None:
        self.modal = self.modal.open_edit(criterion)

    def close_modal(self) -> None:
        self.modal = self.modal.close()

    def edit_name(self, criteria_name: str) -> None:
        self.modal = self.modal.with_name(criteria_name)

    def edit_score(self, max_score) -> None:
        self.modal = self.modal.with_score(max_score)

    def submit(self) -> Criterion | None:
        draft = self.modal.draft
        if self.modal.mode == CREATE:
            return self.create(draft.criteria_name, draft.max_score)
        if self.modal.mode == EDIT:
            return self.update(draft.criteria_id, draft.criteria_name, draft.max_score)
        logger.debug("submit() called with the criteria form closed")
        return None

    def render(self) -> str:
        if self.state.status == LOADING:
            return LOADING_MESSAGE
        if self.state.status == ERROR:
            return f"Error: {self.state.error}"
        if not self.state.items:
            return EMPTY_MESSAGE

        rows = [("Criteria ID", "Criteria Name", "Max Score")]
        rows.extend(
            (str(item.criteria_id), item.criteria_name, str(item.max_score))
            for item in self.state.items
        )
        widths = [max(len(row[column]) for row in rows) for column in range(3)]
        return "\n".join(
            "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
            for row in rows
        )
