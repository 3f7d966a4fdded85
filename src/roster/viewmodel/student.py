"""View-model behind the student form and list screens.

Holds the observable ``StudentUiState`` and runs every repository call on the
view-model scope. The list is backed by one live subscription at a time:
either the full list or a search. Starting a new subscription cancels the old
one, and each subscription carries a sequence number so a late emission from
a superseded one can never overwrite newer results.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional, Tuple

from roster.database import DuplicateStudentError, Student, StudentRepository
from roster.logutils import get_logger, with_context

from .scope import ViewModelScope
from .state import ObservableState

logger = get_logger(__name__)

SAVE_FAILED_MESSAGE = "Could not save the student"
UPDATE_FAILED_MESSAGE = "Could not update the student"
DELETE_FAILED_MESSAGE = "Could not delete the student"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


@dataclass(frozen=True)
class StudentUiState:
    students: Tuple[Student, ...] = ()
    is_loading: bool = False
    error_message: Optional[str] = None
    search_query: str = ""


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a write requested by a screen."""

    success: bool
    message: Optional[str] = None
    student_id: Optional[int] = None

    @classmethod
    def ok(cls, student_id: Optional[int] = None) -> "OperationResult":
        return cls(success=True, student_id=student_id)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(success=False, message=message)


class SubscriptionMode(Enum):
    IDLE = "idle"
    LOADING_ALL = "loading_all"
    LOADING_SEARCH = "loading_search"


def _error_text(error: Exception, fallback: str) -> str:
    return str(error) or fallback


class StudentViewModel:
    """State and actions for the student screens.

    Args:
        repository: Student repository
        scope: Scope the view-model's work runs on
    """

    def __init__(self, repository: StudentRepository, scope: ViewModelScope) -> None:
        self._repository = repository
        self._scope = scope
        self._state: ObservableState[StudentUiState] = ObservableState(StudentUiState())
        self._lock = threading.RLock()
        self._generation = 0
        self._subscription: Optional[Future] = None
        self._mode = SubscriptionMode.IDLE
        self._closed = False

        self.load_students()

    @property
    def ui_state(self) -> ObservableState[StudentUiState]:
        return self._state

    @property
    def mode(self) -> SubscriptionMode:
        return self._mode

    # ==================== SUBSCRIPTIONS ====================

    def load_students(self) -> None:
        """Follow the full list, most recent first."""
        self._subscribe(SubscriptionMode.LOADING_ALL, self._repository.observe_all_students)

    def search_students(self, query: str) -> None:
        """Follow the students matching ``query``; a blank query follows the full list."""
        with self._lock:
            self._state.update(search_query=query)
            if not query.strip():
                self.load_students()
                return
            self._subscribe(
                SubscriptionMode.LOADING_SEARCH,
                lambda: self._repository.observe_search_students(query),
            )

    def clear_search(self) -> None:
        with self._lock:
            self._state.update(search_query="")
            self.load_students()

    def _subscribe(self, mode: SubscriptionMode, source: Callable[[], AsyncIterator[List[Student]]]) -> None:
        with self._lock:
            if self._closed:
                return
            self._generation += 1
            generation = self._generation
            if self._subscription is not None:
                self._subscription.cancel()
            self._mode = mode
            self._state.update(is_loading=True)
            self._subscription = self._scope.launch(self._collect(generation, source))

        logger.debug(
            "Subscribed to student list",
            extra={"extra_data": {"mode": mode.value, "sequence": generation}},
        )

    async def _collect(self, generation: int, source: Callable[[], AsyncIterator[List[Student]]]) -> None:
        try:
            async for students in source():
                self._publish(generation, students=tuple(students), is_loading=False, error_message=None)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Student list subscription failed")
            self._publish(generation, is_loading=False, error_message=_error_text(e, UNKNOWN_ERROR_MESSAGE))

    def _publish(self, generation: int, **changes) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._state.update(**changes)

    # ==================== WRITES ====================

    def add_student(self, student: Student) -> Future[OperationResult]:
        """Insert ``student``; a CUI that is already stored is reported, not written."""
        return self._scope.launch(self._add_student(student))

    async def _add_student(self, student: Student) -> OperationResult:
        with with_context(operation="add_student", cui=student.cui, component="viewmodel"):
            try:
                student_id = await asyncio.to_thread(self._repository.insert_student, student)
            except DuplicateStudentError as e:
                return OperationResult.failed(str(e))
            except Exception as e:
                logger.exception("Add student failed")
                return OperationResult.failed(_error_text(e, UNKNOWN_ERROR_MESSAGE))

            if student_id > 0:
                return OperationResult.ok(student_id)
            return OperationResult.failed(SAVE_FAILED_MESSAGE)

    def update_student(self, student: Student) -> Future[OperationResult]:
        """Write ``student`` over the stored row with the same ``id``.

        Fails with ``UPDATE_FAILED_MESSAGE`` when no row has that ``id``; a CUI
        taken by another student fails with the duplicate message.
        """
        return self._scope.launch(self._update_student(student))

    async def _update_student(self, student: Student) -> OperationResult:
        with with_context(operation="update_student", cui=student.cui, component="viewmodel"):
            try:
                updated = await asyncio.to_thread(self._repository.update_student, student)
            except Exception as e:
                logger.exception("Update student failed")
                return OperationResult.failed(_error_text(e, UPDATE_FAILED_MESSAGE))
            if updated:
                return OperationResult.ok(student.id)
            return OperationResult.failed(UPDATE_FAILED_MESSAGE)

    def delete_student(self, student: Student) -> Future[OperationResult]:
        """Delete the stored row with the student's ``id``.

        Fails with ``DELETE_FAILED_MESSAGE`` when no row has that ``id``.
        """
        return self._scope.launch(self._delete_student(student))

    async def _delete_student(self, student: Student) -> OperationResult:
        with with_context(operation="delete_student", cui=student.cui, component="viewmodel"):
            try:
                deleted = await asyncio.to_thread(self._repository.delete_student, student)
            except Exception as e:
                logger.exception("Delete student failed")
                return OperationResult.failed(_error_text(e, DELETE_FAILED_MESSAGE))
            if deleted:
                return OperationResult.ok(student.id)
            return OperationResult.failed(DELETE_FAILED_MESSAGE)

    def get_student_count(self) -> Future[int]:
        return self._scope.launch(asyncio.to_thread(self._repository.get_student_count))

    # ==================== LIFECYCLE ====================

    def close(self) -> None:
        """Stop the live subscription; later subscription requests are ignored."""
        with self._lock:
            self._closed = True
            self._generation += 1
            if self._subscription is not None:
                self._subscription.cancel()
                self._subscription = None
            self._mode = SubscriptionMode.IDLE
