# backend/tests/test_activity.py

from opatlas.activity.schemas import ActivityType
from opatlas.activity.service import build_activity_feed
from opatlas.playbooks.schemas import AuthorRef, PlaybookCreate
from opatlas.playbooks.store import PlaybookStore
from opatlas.runs.schemas import CommentCreate, RunCreate, RunStatus, RunUpdate, UserRef
from opatlas.runs.store import RunStore

ALICE = UserRef(id="u-1", name="Alice")
BOB = UserRef(id="u-2", name="Bob")


def test_activity_feed_is_newest_first(clock) -> None:
    playbooks = PlaybookStore(clock=clock)
    runs = RunStore(clock=clock)

    playbook = playbooks.create(
        PlaybookCreate(workspace_id="ws-1", title="Churn save", content_md="- a"),
        author=AuthorRef(id=ALICE.id, name=ALICE.name),
    )
    clock.advance(minutes=1)
    run = runs.create(
        RunCreate(
            workspace_id="ws-1",
            playbook_id=playbook.id,
            playbook_title=playbook.title,
            assigned_to=BOB,
        ),
        started_by=ALICE,
    )
    clock.advance(minutes=1)
    runs.update(run.id, RunUpdate(comment=CommentCreate(text="On it")), actor=BOB)
    clock.advance(minutes=1)
    runs.update(run.id, RunUpdate(status=RunStatus.COMPLETED), actor=BOB)

    feed = build_activity_feed(playbooks.list("ws-1"), runs.list("ws-1"))

    assert [event.type for event in feed] == [
        ActivityType.RUN_COMPLETED,
        ActivityType.COMMENT_ADDED,
        ActivityType.RUN_STARTED,
        ActivityType.RUN_ASSIGNED,
        ActivityType.PLAYBOOK_CREATED,
    ]
    assert feed[1].user_name == "Bob"
    assert feed[1].details == "On it"
    assert feed[3].details == "Bob"
    assert feed[-1].user_name == "Alice"


def test_activity_feed_limit(clock) -> None:
    playbooks = PlaybookStore(clock=clock)
    for i in range(5):
        clock.advance(minutes=1)
        playbooks.create(
            PlaybookCreate(workspace_id="ws-1", title=f"P{i}", content_md="- a"),
            author=AuthorRef(id=ALICE.id, name=ALICE.name),
        )

    feed = build_activity_feed(playbooks.list("ws-1"), [], limit=2)

    assert [event.playbook_title for event in feed] == ["P4", "P3"]
