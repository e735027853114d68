import asyncio
import random
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import update

from documents.application.services import (
    create_document,
    edit_document,
    get_document,
    get_history,
    list_documents,
    lock_document,
    save_document,
    unlock_document,
    verify_document,
    view_version,
)
from documents.infrastructure.document_repository import DbDocumentRepository
from documents.infrastructure.models import DocumentModel
from history.domain.entities import DeleteOp, InsertOp, ReplaceOp
from history.infrastructure.change_log_repository import DbChangeLogRepository
from locking.infrastructure.lock_repository import DbLockRepository
from shared.exceptions import (
    ConflictError,
    LockConflictError,
    MalformedChangeError,
    NotFoundError,
    VersionNotFoundError,
)


@pytest.fixture
def repo(db):
    return DbDocumentRepository(db)


@pytest.fixture
def change_repo(db):
    return DbChangeLogRepository(db)


@pytest.fixture
def lock_repo(db):
    return DbLockRepository(db)


@pytest.fixture
async def doc(repo):
    return await create_document(repo, name="D", initial_content="Hello", created_by="alice")


async def test_create_document(repo):
    doc = await create_document(
        repo, name="Plan", initial_content="Hello", created_by="alice", collaborators=["bob"]
    )
    assert doc.id is not None
    assert doc.name == "Plan"
    assert doc.current_content == "Hello"
    assert doc.version == 0
    assert not doc.is_locked
    assert doc.locked_by is None
    assert doc.comments == []
    assert doc.collaborators == {"alice", "bob"}
    assert doc.created_by == "alice"
    assert doc.created_at is not None


async def test_create_document_has_empty_history(repo, change_repo, doc):
    assert await get_history(repo, change_repo, doc.id) == []


async def test_get_document_not_found(repo):
    with pytest.raises(NotFoundError):
        await get_document(repo, uuid4())


async def test_list_documents(repo):
    await create_document(repo, name="One", initial_content="", created_by="alice")
    await create_document(repo, name="Two", initial_content="", created_by="bob")
    assert {d.name for d in await list_documents(repo)} == {"One", "Two"}


async def test_scenario_lock_then_edit(repo, change_repo, lock_repo, doc):
    assert doc.version == 0
    assert await lock_document(repo, lock_repo, doc.id, "alice") is True

    updated, record = await edit_document(
        repo, change_repo, doc.id, "alice", [ReplaceOp(0, 5, "Hello World")]
    )
    assert updated.version == 1
    assert updated.current_content == "Hello World"
    assert record.version == 1
    assert record.author == "alice"

    assert await lock_document(repo, lock_repo, doc.id, "bob") is False
    assert (await get_document(repo, doc.id)).locked_by == "alice"


async def test_scenario_edit_while_locked_by_other(repo, change_repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "alice")
    await edit_document(repo, change_repo, doc.id, "alice", [ReplaceOp(0, 5, "Hello World")])

    assert await unlock_document(repo, lock_repo, doc.id, "alice") is True
    assert await lock_document(repo, lock_repo, doc.id, "bob") is True

    with pytest.raises(LockConflictError) as excinfo:
        await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(0, "!")])
    assert excinfo.value.locked_by == "bob"


async def test_scenario_view_versions(repo, change_repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "alice")
    await edit_document(repo, change_repo, doc.id, "alice", [ReplaceOp(0, 5, "Hello World")])

    assert await view_version(repo, change_repo, doc.id, 0) == "Hello"
    assert await view_version(repo, change_repo, doc.id, 1) == "Hello World"
    with pytest.raises(VersionNotFoundError):
        await view_version(repo, change_repo, doc.id, 5)
    with pytest.raises(VersionNotFoundError):
        await view_version(repo, change_repo, doc.id, -1)


async def test_edit_unlocked_document_does_not_take_lock(repo, change_repo, doc):
    updated, _ = await edit_document(repo, change_repo, doc.id, "bob", [InsertOp(5, "!")])
    assert updated.current_content == "Hello!"
    assert not updated.is_locked


async def test_edit_increments_version_by_one(repo, change_repo, doc):
    versions = []
    for i in range(3):
        updated, record = await edit_document(
            repo, change_repo, doc.id, "alice", [InsertOp(0, str(i))]
        )
        versions.append(updated.version)
        assert record.version == updated.version
    assert versions == [1, 2, 3]
    history = await get_history(repo, change_repo, doc.id)
    assert [r.version for r in history] == [1, 2, 3]


async def test_edit_updates_timestamp(repo, change_repo, doc):
    updated, _ = await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(0, ">")])
    assert updated.updated_at >= doc.updated_at


async def test_malformed_edit_leaves_document_unchanged(repo, change_repo, doc):
    with pytest.raises(MalformedChangeError):
        await edit_document(
            repo, change_repo, doc.id, "alice", [InsertOp(0, "ok"), DeleteOp(3, 100)]
        )

    unchanged = await get_document(repo, doc.id)
    assert unchanged.current_content == "Hello"
    assert unchanged.version == 0
    assert await get_history(repo, change_repo, doc.id) == []


async def test_lock_conflict_leaves_document_unchanged(repo, change_repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "bob")
    with pytest.raises(LockConflictError):
        await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(0, "x")])

    unchanged = await get_document(repo, doc.id)
    assert unchanged.current_content == "Hello"
    assert unchanged.version == 0
    assert await get_history(repo, change_repo, doc.id) == []


async def test_stale_write_is_rejected(repo, change_repo, doc):
    await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(5, "!")])

    with pytest.raises(ConflictError):
        await repo.apply_edit(doc.id, "bob", expected_version=0, content="stale")

    current = await get_document(repo, doc.id)
    assert current.current_content == "Hello!"
    assert current.version == 1


async def test_lock_taken_between_read_and_write_is_a_lock_conflict(repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "bob")
    with pytest.raises(LockConflictError):
        await repo.apply_edit(doc.id, "alice", expected_version=0, content="sneaky")
    assert (await get_document(repo, doc.id)).current_content == "Hello"


async def test_edit_allowed_once_lease_expires(db, repo, change_repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "bob", lock_ttl_seconds=60)
    await db.execute(
        update(DocumentModel)
        .where(DocumentModel.id == doc.id)
        .values(locked_at=datetime.now(timezone.utc) - timedelta(minutes=5))
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    with pytest.raises(LockConflictError):
        await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(0, "x")])

    updated, _ = await edit_document(
        repo, change_repo, doc.id, "alice", [InsertOp(0, "x")], lock_ttl_seconds=60
    )
    assert updated.current_content == "xHello"


async def test_save_replaces_whole_document(repo, change_repo, doc):
    updated, record = await save_document(repo, change_repo, doc.id, "alice", "Goodbye")
    assert updated.current_content == "Goodbye"
    assert record.ops == (ReplaceOp(0, 5, "Goodbye"),)


class FirstReadHook(DbDocumentRepository):
    """Runs ``hook`` once, right after the first document read."""

    def __init__(self, session, hook):
        super().__init__(session)
        self._hook = hook

    async def get_by_id(self, document_id):
        doc = await super().get_by_id(document_id)
        if self._hook is not None:
            hook, self._hook = self._hook, None
            await hook()
        return doc


async def test_save_rejects_edit_committed_after_its_read(
    db, session_factory, change_repo, doc
):
    async def bob_edits():
        async with session_factory() as session:
            await edit_document(
                DbDocumentRepository(session),
                DbChangeLogRepository(session),
                doc.id,
                "bob",
                [InsertOp(5, " World")],
            )

    racing_repo = FirstReadHook(db, bob_edits)
    with pytest.raises(ConflictError):
        await save_document(racing_repo, change_repo, doc.id, "alice", "Goodbye")

    repo = DbDocumentRepository(db)
    current = await get_document(repo, doc.id)
    assert current.current_content == "Hello World"
    assert current.version == 1
    [record] = await get_history(repo, change_repo, doc.id)
    assert record.author == "bob"


async def test_edit_with_expected_version_rejects_other_version(repo, change_repo, doc):
    await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(5, "!")])

    with pytest.raises(ConflictError):
        await edit_document(
            repo, change_repo, doc.id, "bob", [InsertOp(0, "x")], expected_version=0
        )
    assert (await get_document(repo, doc.id)).current_content == "Hello!"


async def test_concurrent_edits_never_share_a_version(session_factory, doc):
    async def attempt(user_id):
        async with session_factory() as session:
            try:
                updated, record = await edit_document(
                    DbDocumentRepository(session),
                    DbChangeLogRepository(session),
                    doc.id,
                    user_id,
                    [InsertOp(5, f" from {user_id}")],
                )
            except ConflictError:
                return None
            return updated.current_content, record.version

    users = ["alice", "bob", "carol"]
    results = await asyncio.gather(*(attempt(u) for u in users))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    [(content, version)] = winners
    assert version == 1

    async with session_factory() as session:
        repo = DbDocumentRepository(session)
        current = await get_document(repo, doc.id)
        history = await get_history(repo, DbChangeLogRepository(session), doc.id)
    assert current.version == 1
    assert current.current_content == content
    assert [r.version for r in history] == [1]


async def test_lock_missing_document(repo, lock_repo):
    with pytest.raises(NotFoundError):
        await lock_document(repo, lock_repo, uuid4(), "alice")


async def test_unlock_by_non_holder(repo, lock_repo, doc):
    await lock_document(repo, lock_repo, doc.id, "alice")
    assert await unlock_document(repo, lock_repo, doc.id, "bob") is False
    assert (await get_document(repo, doc.id)).locked_by == "alice"


async def test_view_version_missing_document(repo, change_repo):
    with pytest.raises(NotFoundError):
        await view_version(repo, change_repo, uuid4(), 0)


async def test_verify_document(repo, change_repo, doc):
    await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(5, " there")])
    assert await verify_document(repo, change_repo, doc.id) is True


async def test_verify_detects_divergence(db, repo, change_repo, doc):
    await edit_document(repo, change_repo, doc.id, "alice", [InsertOp(5, " there")])
    await db.execute(
        update(DocumentModel)
        .where(DocumentModel.id == doc.id)
        .values(content="tampered")
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    assert await verify_document(repo, change_repo, doc.id) is False


def _random_op(rng: random.Random, text: str):
    kind = rng.choice(["insert", "delete", "replace"])
    position = rng.randint(0, len(text))
    if kind == "insert":
        return InsertOp(position, rng.choice(["a", "bc", " ", "xyz"]))
    length = rng.randint(0, len(text) - position)
    if kind == "delete":
        return DeleteOp(position, length)
    return ReplaceOp(position, length, rng.choice(["", "Q", "rst"]))


async def test_replay_matches_every_version(repo, change_repo, doc):
    rng = random.Random(1234)
    snapshots = {0: doc.current_content}
    text = doc.current_content
    for _ in range(15):
        ops = []
        for _ in range(rng.randint(1, 3)):
            op = _random_op(rng, text)
            ops.append(op)
            text = {
                InsertOp: lambda o: text[: o.position] + o.content + text[o.position:],
                DeleteOp: lambda o: text[: o.position] + text[o.position + o.length:],
                ReplaceOp: lambda o: text[: o.position] + o.content + text[o.position + o.length:],
            }[type(op)](op)
        updated, _ = await edit_document(repo, change_repo, doc.id, "alice", ops)
        assert updated.current_content == text
        snapshots[updated.version] = text

    for version, expected in snapshots.items():
        assert await view_version(repo, change_repo, doc.id, version) == expected
    assert await verify_document(repo, change_repo, doc.id) is True
