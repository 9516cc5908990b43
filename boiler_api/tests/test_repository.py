import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from src.core.errors import ConnectionFailure, InvalidOperation, NotFound, QueryAmbiguity
from src.db.models.todo import Priority, Todo
from src.db.session import make_session_factory
from src.repositories.base import Repository
from src.repositories.security import UserAuthRepository
from src.repositories.todo import PriorityRepository, TodoRepository


class TrackingFactory:
    """Connection factory that counts opened and closed sessions."""

    def __init__(self, factory):
        self.factory = factory
        self.opened = 0
        self.closed = 0

    def __call__(self):
        session = self.factory()
        self.opened += 1
        original_close = session.close

        def close():
            self.closed += 1
            original_close()

        session.close = close
        return session


@pytest.fixture
def todos(session_factory, alice):
    return TodoRepository(session_factory, alice)


@pytest.fixture
def priorities(session_factory, alice):
    return PriorityRepository(session_factory, alice)


def test_insert_returns_generated_ids(todos):
    first = todos.insert(Todo(title="one"))
    second = todos.insert(Todo(title="two"))
    assert isinstance(first, int)
    assert second > first >= 1


def test_insert_then_get_by_id_round_trip(todos, priorities):
    pid = priorities.insert(Priority(name="High", rank=10))
    tid = todos.insert(Todo(title="Write report", notes="quarterly", done=False, priority_id=pid))

    todo = todos.get_by_id(tid)
    assert todo.id == tid
    assert todo.title == "Write report"
    assert todo.notes == "quarterly"
    assert todo.done is False
    assert todo.priority_id == pid

    priority = priorities.get_by_id(pid)
    assert (priority.name, priority.rank) == ("High", 10)


def test_get_by_id_loads_relationships(todos, priorities):
    pid = priorities.insert(Priority(name="Normal", rank=20))
    todos.insert(Todo(title="a", priority_id=pid))
    todos.insert(Todo(title="b", priority_id=pid))

    # the session is closed by now; the collection must already be loaded
    priority = priorities.get_by_id(pid)
    assert sorted(t.title for t in priority.todos) == ["a", "b"]

    todo = todos.where_by(title="a")[0]
    assert todos.get_by_id(todo.id).priority.name == "Normal"


def test_get_by_id_missing_returns_none(todos):
    assert todos.get_by_id(999) is None


def test_all_returns_every_row(todos):
    for title in ("a", "b", "c"):
        todos.insert(Todo(title=title))
    assert sorted(t.title for t in todos.all()) == ["a", "b", "c"]


def test_delete_removes_row(todos):
    tid = todos.insert(Todo(title="gone"))
    todos.delete(tid)
    assert todos.get_by_id(tid) is None


def test_delete_missing_row_is_noop(todos):
    todos.insert(Todo(title="stays"))
    todos.delete(12345)
    assert len(todos.all()) == 1


@pytest.mark.parametrize("bad_id", [0, -1, None])
def test_update_without_identity_is_invalid(todos, bad_id):
    with pytest.raises(InvalidOperation):
        todos.update(Todo(id=bad_id, title="x"))


def test_update_missing_row_is_not_found(todos):
    with pytest.raises(NotFound) as exc_info:
        todos.update(Todo(id=42, title="nope"))
    assert exc_info.value.details == {"entity": "Todo", "id": 42}
    assert todos.all() == []


def test_update_applies_given_fields(todos):
    tid = todos.insert(Todo(title="draft", notes="keep me"))
    assert todos.update(Todo(id=tid, title="final", done=True)) == tid

    todo = todos.get_by_id(tid)
    assert todo.title == "final"
    assert todo.done is True
    assert todo.notes == "keep me"


def test_update_with_fetched_instance(priorities):
    pid = priorities.insert(Priority(name="Low", rank=30))
    priority = priorities.get_by_id(pid)
    priority.rank = 5
    priorities.update(priority)
    assert priorities.get_by_id(pid).rank == 5


def test_where_with_expressions(todos):
    todos.insert(Todo(title="a", done=True))
    todos.insert(Todo(title="b", done=False))
    todos.insert(Todo(title="c", done=True))

    done = todos.where(Todo.done.is_(True))
    assert sorted(t.title for t in done) == ["a", "c"]

    assert [t.title for t in todos.where(Todo.done.is_(True), Todo.title == "c")] == ["c"]


def test_where_by_field_equality(todos):
    todos.insert(Todo(title="a", done=True, priority_id=1))
    todos.insert(Todo(title="b", done=True, priority_id=2))
    todos.insert(Todo(title="c", done=False, priority_id=1))

    assert sorted(t.title for t in todos.where_by(done=True)) == ["a", "b"]
    assert [t.title for t in todos.where_by(done=True, priority_id=1)] == ["a"]
    assert todos.where_by(title="zzz") == []


def test_single_returns_only_match(todos):
    todos.insert(Todo(title="a"))
    todos.insert(Todo(title="b"))
    assert todos.single(Todo.title == "b").title == "b"


def test_single_raises_on_zero_or_many(todos):
    todos.insert(Todo(title="dup"))
    todos.insert(Todo(title="dup"))

    with pytest.raises(QueryAmbiguity):
        todos.single(Todo.title == "missing")
    with pytest.raises(QueryAmbiguity):
        todos.single(Todo.title == "dup")


def test_single_or_default(todos):
    todos.insert(Todo(title="dup"))
    todos.insert(Todo(title="dup"))
    todos.insert(Todo(title="one"))

    assert todos.single_or_default(Todo.title == "missing") is None
    assert todos.single_or_default(Todo.title == "dup") is None
    assert todos.single_or_default(Todo.title == "one").title == "one"


def test_single_or_default_swallows_query_errors(todos):
    assert todos.single_or_default(text("no_such_column = 1")) is None


def test_single_propagates_query_errors(todos):
    with pytest.raises(OperationalError):
        todos.single(text("no_such_column = 1"))


def test_connection_failure_propagates(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing-dir' / 'app.db'}")
    repo = Repository(Todo, make_session_factory(engine))

    with pytest.raises(ConnectionFailure):
        repo.all()
    # acquiring the connection is not covered by the default-on-error helper
    with pytest.raises(ConnectionFailure):
        repo.single_or_default(Todo.id == 1)


def test_each_call_releases_its_connection(session_factory):
    factory = TrackingFactory(session_factory)
    repo = TodoRepository(factory)

    tid = repo.insert(Todo(title="x"))
    repo.get_by_id(tid)
    repo.all()
    with pytest.raises(NotFound):
        repo.update(Todo(id=tid + 100, title="y"))
    with pytest.raises(QueryAmbiguity):
        repo.single(Todo.title == "nope")
    repo.delete(tid)

    assert factory.opened == 6
    assert factory.closed == 6


def test_repository_requires_factory():
    with pytest.raises(ValueError):
        Repository(Todo, None)


def _dropped_connection(session_factory):
    """Factory whose sessions lose their connection on the first query."""

    def factory():
        session = session_factory()

        def scalars(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("server closed the connection"), connection_invalidated=True)

        session.scalars = scalars
        return session

    return factory


def test_connection_lost_mid_operation_is_connection_failure(session_factory):
    repo = TodoRepository(_dropped_connection(session_factory))

    with pytest.raises(ConnectionFailure) as exc_info:
        repo.all()
    assert "server closed the connection" in exc_info.value.details["error"]
    with pytest.raises(ConnectionFailure):
        repo.single(Todo.id == 1)


def test_lookup_prefers_username_over_another_rows_email(session_factory, make_user):
    make_user("sam", email="sam@example.com")
    make_user("other", email="SAM")

    users = UserAuthRepository(session_factory)
    assert users.get_by_username_or_email("sam").username == "sam"
    assert users.get_by_username_or_email("Sam").username == "other"
    assert users.get_by_username_or_email("SAM@example.com").username == "sam"
    assert users.get_by_username_or_email("nobody") is None


def test_lookup_propagates_storage_errors():
    # schema never created
    engine = create_engine("sqlite://")
    users = UserAuthRepository(make_session_factory(engine))
    with pytest.raises(OperationalError):
        users.get_by_username_or_email("admin")
    engine.dispose()
