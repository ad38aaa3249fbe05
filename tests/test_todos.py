"""Tests for the todo store and its status machine."""

from datetime import date

import pytest

from conftest import OTHER_OWNER, OWNER, run

from finance_tracker.models import TodoStatus
from finance_tracker.stores import TODOS, NotFoundError, ValidationError


class TestAddTodo:
    """Tests for TodoStore.add."""

    def test_add(self, todos):
        todo = run(todos.add(OWNER, "  Pay rent ", due_date=date(2024, 2, 1), notes="Landlord"))

        assert todo.text == "Pay rent"
        assert todo.status == TodoStatus.PENDING
        assert todo.completed is False
        assert todo.due_date == date(2024, 2, 1)
        assert todo.notes == "Landlord"
        assert len(todo.history) == 1
        assert todo.history[0].note == "Task created"
        assert todo.history[0].updated_by == OWNER

    def test_empty_text_rejected(self, todos, db):
        with pytest.raises(ValidationError):
            run(todos.add(OWNER, "   "))
        assert db.count(TODOS) == 0

    def test_list_newest_first_and_scoped(self, todos):
        first = run(todos.add(OWNER, "First"))
        second = run(todos.add(OWNER, "Second"))
        run(todos.add(OTHER_OWNER, "Not mine"))

        listed = run(todos.list_todos(OWNER))
        assert {t.id for t in listed} == {first.id, second.id}
        assert listed[0].created_at >= listed[1].created_at


class TestStatusMachine:
    """Tests for set_status and toggle_completed."""

    def test_set_status_appends_history(self, todos):
        todo = run(todos.add(OWNER, "Call bank"))
        updated = run(todos.set_status(OWNER, todo.id, "urgent", updated_by="alice"))

        assert updated.status == TodoStatus.URGENT
        assert updated.completed is False
        assert len(updated.history) == 2
        entry = updated.history[-1]
        assert entry.status == TodoStatus.URGENT
        assert entry.note == "Status changed from pending to urgent"
        assert entry.updated_by == "alice"

    def test_same_status_is_noop(self, todos):
        todo = run(todos.add(OWNER, "Call bank"))
        unchanged = run(todos.set_status(OWNER, todo.id, TodoStatus.PENDING))
        assert len(unchanged.history) == 1

    def test_every_status_reachable(self, todos):
        todo = run(todos.add(OWNER, "Cycle"))
        path = [
            TodoStatus.COMPLETED,
            TodoStatus.URGENT,
            TodoStatus.IN_PROGRESS,
            TodoStatus.PENDING,
            TodoStatus.COMPLETED,
            TodoStatus.IN_PROGRESS,
        ]
        for status in path:
            todo = run(todos.set_status(OWNER, todo.id, status))
            assert todo.status == status
            assert todo.completed == (status == TodoStatus.COMPLETED)
        assert len(todo.history) == 1 + len(path)

    def test_unknown_status_rejected(self, todos):
        todo = run(todos.add(OWNER, "Call bank"))
        with pytest.raises(ValidationError):
            run(todos.set_status(OWNER, todo.id, "blocked"))

    @pytest.mark.parametrize(
        "start",
        [TodoStatus.PENDING, TodoStatus.IN_PROGRESS, TodoStatus.URGENT],
    )
    def test_toggle_round_trip(self, todos, start):
        """Test that checking then unchecking restores the prior status."""
        todo = run(todos.add(OWNER, "File taxes"))
        if start != TodoStatus.PENDING:
            todo = run(todos.set_status(OWNER, todo.id, start))
        before = len(todo.history)

        checked = run(todos.toggle_completed(OWNER, todo.id))
        assert checked.completed is True
        assert checked.status == TodoStatus.COMPLETED
        assert checked.prev_status == start
        assert checked.history[-1].note == "Marked as completed"

        unchecked = run(todos.toggle_completed(OWNER, todo.id))
        assert unchecked.completed is False
        assert unchecked.status == start
        assert len(unchecked.history) == before + 2
        assert unchecked.history[-1].note == "Marked as not completed"

    def test_uncheck_without_prev_status_defaults_to_pending(self, todos, db):
        todo = run(todos.add(OWNER, "Legacy"))
        run(db.update(TODOS, todo.id, {"status": "completed", "completed": True, "prev_status": None}))

        unchecked = run(todos.toggle_completed(OWNER, todo.id))
        assert unchecked.status == TodoStatus.PENDING

    def test_history_survives_storage(self, todos):
        todo = run(todos.add(OWNER, "Renew insurance"))
        run(todos.set_status(OWNER, todo.id, TodoStatus.IN_PROGRESS))
        run(todos.toggle_completed(OWNER, todo.id))

        stored = run(todos.get(OWNER, todo.id))
        assert [entry.status for entry in stored.history] == [
            TodoStatus.PENDING,
            TodoStatus.IN_PROGRESS,
            TodoStatus.COMPLETED,
        ]

    def test_other_owner_cannot_change_status(self, todos):
        todo = run(todos.add(OWNER, "Private"))
        with pytest.raises(NotFoundError):
            run(todos.toggle_completed(OTHER_OWNER, todo.id))
        with pytest.raises(NotFoundError):
            run(todos.set_status(OTHER_OWNER, todo.id, "urgent"))


class TestUpdateAndDelete:
    """Tests for TodoStore.update and delete."""

    def test_partial_update(self, todos):
        todo = run(todos.add(OWNER, "Pay rent", due_date=date(2024, 2, 1), notes="Landlord"))
        updated = run(todos.update(OWNER, todo.id, {"notes": "Transfer"}))

        assert updated.notes == "Transfer"
        assert updated.text == "Pay rent"
        assert updated.due_date == date(2024, 2, 1)
        assert updated.history == todo.history

    def test_details_form_payload(self, todos):
        """Saving every detail at once keeps status and history untouched."""
        todo = run(todos.add(OWNER, "Pay rent"))
        run(todos.set_status(OWNER, todo.id, "urgent"))

        updated = run(todos.update(OWNER, todo.id, {
            "text": "Pay rent and water",
            "notes": "Both by transfer",
            "due_date": date(2024, 3, 1),
        }))

        assert (updated.text, updated.notes, updated.due_date) == (
            "Pay rent and water", "Both by transfer", date(2024, 3, 1)
        )
        assert updated.status == TodoStatus.URGENT
        assert len(updated.history) == 2

    def test_clear_due_date(self, todos):
        todo = run(todos.add(OWNER, "Pay rent", due_date=date(2024, 2, 1)))
        updated = run(todos.update(OWNER, todo.id, {"due_date": None}))
        assert updated.due_date is None

    def test_empty_text_rejected(self, todos):
        todo = run(todos.add(OWNER, "Pay rent"))
        with pytest.raises(ValidationError):
            run(todos.update(OWNER, todo.id, {"text": ""}))

    def test_invalid_input_rejected_before_lookup(self, todos):
        with pytest.raises(ValidationError):
            run(todos.update(OWNER, "nope", {"text": ""}))

    def test_delete(self, todos, db):
        todo = run(todos.add(OWNER, "Temporary"))
        run(todos.delete(OWNER, todo.id))
        assert db.count(TODOS) == 0

    def test_other_owner_cannot_delete(self, todos, db):
        todo = run(todos.add(OWNER, "Mine"))
        with pytest.raises(NotFoundError):
            run(todos.delete(OTHER_OWNER, todo.id))
        assert db.count(TODOS) == 1
