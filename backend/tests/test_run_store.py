# backend/tests/test_run_store.py

import threading
from datetime import timedelta

import pytest

from opatlas.runs.checklist import parse_checklist
from opatlas.runs.schemas import (
    CommentCreate,
    RunCreate,
    RunStatus,
    RunStatusFilter,
    RunUpdate,
    UserRef,
)
from opatlas.runs.store import RunStore
from opatlas.storage.errors import NotFoundError, ValidationError

ALICE = UserRef(id="u-1", name="Alice")
BOB = UserRef(id="u-2", name="Bob")


def _start(store: RunStore, **overrides):
    data = {"workspace_id": "ws-1", "playbook_id": "pb-1", "playbook_title": "Churn save"}
    data.update(overrides)
    return store.create(RunCreate(**data), started_by=ALICE)


def test_create_sets_initial_state(clock) -> None:
    store = RunStore(clock=clock)

    run = _start(store, assigned_to=BOB)

    assert run.id == "1"
    assert run.status == RunStatus.IN_PROGRESS
    assert run.started_at == clock.now
    assert run.started_by == ALICE
    assert run.assigned_to == BOB
    assert run.checked_steps == []
    assert run.step_notes == {}
    assert run.comments == []
    assert run.progress == 0
    assert run.completed_at is None
    assert run.duration_ms is None


@pytest.mark.parametrize("missing", ["workspace_id", "playbook_id", "playbook_title"])
def test_create_requires_fields(missing) -> None:
    store = RunStore()

    with pytest.raises(ValidationError):
        _start(store, **{missing: ""})

    assert len(store) == 0


def test_list_newest_first_with_status_filter(clock) -> None:
    store = RunStore(clock=clock)
    first = _start(store)
    clock.advance(minutes=1)
    second = _start(store)
    clock.advance(minutes=1)
    third = _start(store, workspace_id="ws-2")

    store.update(first.id, RunUpdate(status=RunStatus.COMPLETED))

    assert [r.id for r in store.list("ws-1")] == [second.id, first.id]
    assert [r.id for r in store.list("ws-1", RunStatusFilter.ACTIVE)] == [second.id]
    assert [r.id for r in store.list("ws-1", RunStatusFilter.COMPLETED)] == [first.id]
    assert [r.id for r in store.list("ws-2")] == [third.id]


def test_list_all_includes_abandoned() -> None:
    store = RunStore()
    run = _start(store)
    store.update(run.id, RunUpdate(status=RunStatus.ABANDONED))

    assert [r.status for r in store.list("ws-1")] == [RunStatus.ABANDONED]
    assert store.list("ws-1", RunStatusFilter.ACTIVE) == []


def test_update_completion_sets_duration_once(clock) -> None:
    store = RunStore(clock=clock)
    run = _start(store)

    clock.advance(minutes=10)
    completed = store.update(run.id, RunUpdate(status=RunStatus.COMPLETED))
    assert completed.status == RunStatus.COMPLETED
    assert completed.duration_ms == 10 * 60 * 1000
    assert completed.progress == 100

    clock.advance(minutes=10)
    store.update(run.id, RunUpdate(status=RunStatus.IN_PROGRESS))
    clock.advance(minutes=10)
    recompleted = store.update(run.id, RunUpdate(status=RunStatus.COMPLETED))

    assert recompleted.completed_at == completed.completed_at
    assert recompleted.duration_ms == completed.duration_ms


def test_update_merges_step_notes_and_replaces_checked_steps() -> None:
    store = RunStore()
    run = _start(store)

    store.update(
        run.id,
        RunUpdate(checked_steps=["step-1"], step_notes={"step-1": "done", "step-2": "todo"}),
    )
    updated = store.update(
        run.id,
        RunUpdate(checked_steps=["step-2"], step_notes={"step-2": "in review"}, progress=50),
    )

    assert updated.checked_steps == ["step-2"]
    assert updated.step_notes == {"step-1": "done", "step-2": "in review"}
    assert updated.progress == 50


def test_update_appends_comment(clock) -> None:
    store = RunStore(clock=clock)
    run = _start(store)
    clock.advance(seconds=5)

    updated = store.update(
        run.id,
        RunUpdate(comment=CommentCreate(step_id="step-1", text="  Looks good  ")),
        actor=BOB,
    )

    assert len(updated.comments) == 1
    comment = updated.comments[0]
    assert comment.id.startswith("comment-")
    assert comment.step_id == "step-1"
    assert comment.author_id == BOB.id
    assert comment.author_name == BOB.name
    assert comment.text == "Looks good"
    assert comment.created_at == clock.now


def test_update_with_invalid_comment_is_atomic() -> None:
    store = RunStore()
    run = _start(store)

    with pytest.raises(ValidationError):
        store.update(
            run.id,
            RunUpdate(notes="should not persist", comment=CommentCreate(text="   ")),
            actor=BOB,
        )
    with pytest.raises(ValidationError):
        store.update(run.id, RunUpdate(comment=CommentCreate(text="no author")))

    assert store.get(run.id) == run


def test_update_unknown_raises_not_found_and_leaves_store_unchanged() -> None:
    store = RunStore()
    run = _start(store)

    with pytest.raises(NotFoundError):
        store.update("999", RunUpdate(notes="x"))

    assert len(store) == 1
    assert store.get(run.id) == run


def test_toggle_step_recomputes_progress() -> None:
    store = RunStore()
    run = _start(store)
    checklist = parse_checklist("# Steps\n- [ ] a\n- [ ] b")

    toggled = store.toggle_step(run.id, "step-1", checklist)
    assert toggled.checked_steps == ["step-1"]
    assert toggled.progress == 50

    toggled = store.toggle_step(run.id, "step-2", checklist)
    assert toggled.progress == 100

    toggled = store.toggle_step(run.id, "step-1", checklist)
    assert toggled.checked_steps == ["step-2"]
    assert toggled.progress == 50


def test_toggle_step_rejects_unknown_step() -> None:
    store = RunStore()
    run = _start(store)
    checklist = parse_checklist("# Steps\n- [ ] a")

    with pytest.raises(ValidationError):
        store.toggle_step(run.id, "h-0", checklist)
    assert store.get(run.id).checked_steps == []


def test_concurrent_updates_do_not_lose_writes() -> None:
    """
    同じ Run へのコメント追記とステップのトグルを並行に行っても、どちらも失われないこと。
    """
    store = RunStore()
    run = _start(store)
    checklist = parse_checklist("\n".join(f"- [ ] step {i}" for i in range(20)))
    barrier = threading.Barrier(40)

    def add_comment(i: int) -> None:
        barrier.wait()
        store.update(run.id, RunUpdate(comment=CommentCreate(text=f"comment {i}")), actor=BOB)

    def toggle(i: int) -> None:
        barrier.wait()
        store.toggle_step(run.id, f"step-{i}", checklist)

    threads = [threading.Thread(target=add_comment, args=(i,)) for i in range(20)]
    threads += [threading.Thread(target=toggle, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    result = store.get(run.id)
    assert len(result.comments) == 20
    assert sorted(result.checked_steps) == sorted(f"step-{i}" for i in range(20))
    assert result.progress == 100


def test_delete() -> None:
    store = RunStore()
    run = _start(store)

    store.delete(run.id)

    with pytest.raises(NotFoundError):
        store.get(run.id)
    with pytest.raises(NotFoundError):
        store.update(run.id, RunUpdate(notes="x"))


def test_started_at_naive_clock_is_treated_as_utc(clock) -> None:
    naive = clock.now.replace(tzinfo=None)
    store = RunStore(clock=lambda: naive)

    run = _start(store)

    assert run.started_at == clock.now
    assert run.started_at.utcoffset() == timedelta(0)


def test_update_keeps_fields_absent_from_patch() -> None:
    store = RunStore()
    run = _start(store, assigned_to=BOB)
    store.update(run.id, RunUpdate(notes="a"))

    updated = store.update(run.id, RunUpdate(checked_steps=["step-1"]))

    assert updated.notes == "a"
    assert updated.assigned_to == BOB
    assert updated.status == RunStatus.IN_PROGRESS


def test_concurrent_completion_reports_first_completion_once() -> None:
    """
    同じ Run に completed が同時に送られても、初回完了と判定されるのは 1回だけであること。
    """
    store = RunStore()
    run = _start(store)
    barrier = threading.Barrier(10)
    outcomes = []
    outcomes_lock = threading.Lock()

    def complete() -> None:
        barrier.wait()
        _, newly_completed = store.update_with_outcome(
            run.id, RunUpdate(status=RunStatus.COMPLETED)
        )
        with outcomes_lock:
            outcomes.append(newly_completed)

    threads = [threading.Thread(target=complete) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert sorted(outcomes) == [False] * 9 + [True]


def test_update_with_outcome_flags_only_first_completion() -> None:
    store = RunStore()
    run = _start(store)

    _, first = store.update_with_outcome(run.id, RunUpdate(status=RunStatus.COMPLETED))
    store.update(run.id, RunUpdate(status=RunStatus.IN_PROGRESS))
    _, again = store.update_with_outcome(run.id, RunUpdate(status=RunStatus.COMPLETED))
    _, notes_only = store.update_with_outcome(run.id, RunUpdate(notes="x"))

    assert (first, again, notes_only) == (True, False, False)
