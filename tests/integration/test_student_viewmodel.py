"""Integration tests for StudentViewModel over a real repository."""

import time

import pytest

from roster.database import Database, StudentRepository, observe_query
from roster.viewmodel import StudentViewModel, SubscriptionMode, ViewModelScope
from roster.viewmodel.student import DELETE_FAILED_MESSAGE, UPDATE_FAILED_MESSAGE

WAIT = 5.0

pytestmark = pytest.mark.integration


def wait_for_cuis(vm: StudentViewModel, cuis, **expected):
    """Block until the list shows exactly ``cuis`` (in order) and is not loading."""

    def ready(state):
        if state.is_loading or [s.cui for s in state.students] != list(cuis):
            return False
        return all(getattr(state, key) == value for key, value in expected.items())

    return vm.ui_state.wait_for(ready, timeout=WAIT)


class SlowSearchRepository(StudentRepository):
    """Repository whose search for ``slow_query`` takes ``delay`` seconds per fetch."""

    def __init__(self, dao, slow_query: str, delay: float):
        super().__init__(dao)
        self.slow_query = slow_query
        self.delay = delay

    def observe_search_students(self, query):
        def fetch():
            if query == self.slow_query:
                time.sleep(self.delay)
            return self.search_students(query)

        return observe_query(self.dao.db.changes, "students", fetch)


class TestLoading:
    def test_starts_with_empty_list(self, student_vm: StudentViewModel):
        state = student_vm.ui_state.value
        assert state.students == ()
        assert state.is_loading is False
        assert state.error_message is None
        assert student_vm.mode == SubscriptionMode.LOADING_ALL

    def test_list_follows_inserts_most_recent_first(self, student_vm: StudentViewModel, make_student):
        for cui in ("A1", "B2", "C3"):
            assert student_vm.add_student(make_student(cui=cui)).result(timeout=WAIT).success

        wait_for_cuis(student_vm, ["C3", "B2", "A1"])

    def test_list_follows_external_writes(self, student_vm: StudentViewModel, repository, make_student):
        repository.insert_student(make_student(cui="A1"))
        wait_for_cuis(student_vm, ["A1"])

    def test_subscription_error_is_reported(self, tmp_path, scope, make_student):
        database = Database(tmp_path / "uninitialized.db")
        vm = StudentViewModel(StudentRepository.from_database(database), scope)
        try:
            state = vm.ui_state.wait_for(lambda s: s.error_message is not None, timeout=WAIT)
            assert "no such table" in state.error_message
            assert state.is_loading is False
        finally:
            vm.close()
            database.close()


class TestAdd:
    def test_success_returns_id(self, student_vm: StudentViewModel, make_student):
        result = student_vm.add_student(make_student()).result(timeout=WAIT)
        assert result.success is True
        assert result.student_id > 0
        assert result.message is None

    def test_duplicate_cui_is_rejected(self, student_vm: StudentViewModel, make_student):
        assert student_vm.add_student(make_student(cui="A1")).result(timeout=WAIT).success

        result = student_vm.add_student(make_student(cui="A1", nombres="Eva")).result(timeout=WAIT)

        assert result.success is False
        assert result.message == "A student with CUI A1 already exists"
        state = wait_for_cuis(student_vm, ["A1"])
        assert state.students[0].nombres == "Ana"


class TestSearch:
    @pytest.fixture
    def populated(self, student_vm: StudentViewModel, make_student) -> StudentViewModel:
        student_vm.add_student(make_student(cui="A1", nombres="Ana")).result(timeout=WAIT)
        student_vm.add_student(make_student(cui="B2", nombres="Bruno", apellidos="Diaz")).result(timeout=WAIT)
        wait_for_cuis(student_vm, ["B2", "A1"])
        return student_vm

    def test_single_match(self, populated: StudentViewModel):
        populated.search_students("Bru")
        wait_for_cuis(populated, ["B2"], search_query="Bru")
        assert populated.mode == SubscriptionMode.LOADING_SEARCH

    def test_no_match(self, populated: StudentViewModel):
        populated.search_students("zzz")
        state = wait_for_cuis(populated, [], search_query="zzz")
        assert state.error_message is None

    def test_blank_query_loads_everything(self, populated: StudentViewModel):
        populated.search_students("Bru")
        wait_for_cuis(populated, ["B2"])
        populated.search_students("   ")
        wait_for_cuis(populated, ["B2", "A1"])
        assert populated.mode == SubscriptionMode.LOADING_ALL

    def test_clear_search_restores_full_list(self, populated: StudentViewModel):
        populated.search_students("Ana")
        wait_for_cuis(populated, ["A1"])
        populated.clear_search()
        wait_for_cuis(populated, ["B2", "A1"], search_query="")
        assert populated.mode == SubscriptionMode.LOADING_ALL

    def test_search_follows_writes(self, populated: StudentViewModel, make_student):
        populated.search_students("Lopez")
        wait_for_cuis(populated, ["A1"])
        populated.add_student(make_student(cui="C3", nombres="Carla")).result(timeout=WAIT)
        wait_for_cuis(populated, ["C3", "A1"])

    def test_last_query_wins(self, dao, scope, make_student):
        dao.insert_student(make_student(cui="A1", nombres="Ana"))
        dao.insert_student(make_student(cui="B2", nombres="Bruno", apellidos="Diaz"))
        vm = StudentViewModel(SlowSearchRepository(dao, slow_query="Ana", delay=0.5), scope)
        try:
            wait_for_cuis(vm, ["B2", "A1"])
            vm.search_students("Ana")
            vm.search_students("Bru")
            wait_for_cuis(vm, ["B2"], search_query="Bru")

            # the superseded search finishes its fetch meanwhile
            time.sleep(0.8)
            state = vm.ui_state.value
            assert [s.cui for s in state.students] == ["B2"]
            assert state.search_query == "Bru"
        finally:
            vm.close()


class TestUpdateDelete:
    def test_update(self, student_vm: StudentViewModel, make_student):
        student_id = student_vm.add_student(make_student()).result(timeout=WAIT).student_id
        student = make_student(nombres="Anita").model_copy(update={"id": student_id})

        result = student_vm.update_student(student).result(timeout=WAIT)

        assert result.success is True
        state = wait_for_cuis(student_vm, ["A1"])
        assert state.students[0].nombres == "Anita"

    def test_update_missing_student_fails(self, student_vm: StudentViewModel, make_student):
        result = student_vm.update_student(make_student().model_copy(update={"id": 99})).result(timeout=WAIT)
        assert result.success is False
        assert result.message == UPDATE_FAILED_MESSAGE

    def test_delete(self, student_vm: StudentViewModel, make_student):
        student_id = student_vm.add_student(make_student()).result(timeout=WAIT).student_id
        wait_for_cuis(student_vm, ["A1"])

        result = student_vm.delete_student(make_student().model_copy(update={"id": student_id})).result(timeout=WAIT)

        assert result.success is True
        wait_for_cuis(student_vm, [])

    def test_delete_missing_student_fails(self, student_vm: StudentViewModel, make_student):
        result = student_vm.delete_student(make_student().model_copy(update={"id": 99})).result(timeout=WAIT)
        assert result.success is False
        assert result.message == DELETE_FAILED_MESSAGE

    def test_count(self, student_vm: StudentViewModel, make_student):
        assert student_vm.get_student_count().result(timeout=WAIT) == 0
        student_vm.add_student(make_student()).result(timeout=WAIT)
        assert student_vm.get_student_count().result(timeout=WAIT) == 1


class TestLifecycle:
    def test_close_stops_following(self, student_vm: StudentViewModel, repository, make_student):
        student_vm.close()
        assert student_vm.mode == SubscriptionMode.IDLE

        repository.insert_student(make_student())
        time.sleep(0.2)
        assert student_vm.ui_state.value.students == ()

        student_vm.load_students()  # ignored once closed
        assert student_vm.mode == SubscriptionMode.IDLE

    def test_scope_cancel_ends_subscription(self, repository, make_student):
        scope = ViewModelScope(name="short-lived")
        vm = StudentViewModel(repository, scope)
        vm.ui_state.wait_for(lambda s: not s.is_loading, timeout=WAIT)
        scope.cancel()

        assert repository.dao.db.changes.listener_count == 0
        with pytest.raises(RuntimeError):
            vm.add_student(make_student())
