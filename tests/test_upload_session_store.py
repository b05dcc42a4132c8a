from __future__ import annotations

from augmet_uploader.domain.entities import UploadSession
from augmet_uploader.infrastructure.transfers.runtime import UploadSessionStore


def test_registered_job_can_continue_and_is_active() -> None:
    store = UploadSessionStore()

    store.register("job-1")

    assert store.can_continue("job-1")
    assert store.is_uploading("job-1")
    assert store.has_active_uploads()
    assert store.uploading_flags() == {"job-1": False}


def test_untracked_job_cannot_continue_or_open_session() -> None:
    store = UploadSessionStore()

    assert not store.can_continue("job-1")
    assert not store.open_session("job-1", UploadSession(key="k", upload_id="u"))
    assert store.stop("job-1") is None
    assert store.forget("job-1") is None


def test_stop_marks_job_terminal_and_keeps_session() -> None:
    store = UploadSessionStore()
    session = UploadSession(key="k", upload_id="u")
    store.register("job-1")
    store.open_session("job-1", session)

    store.stop("job-1")

    assert not store.can_continue("job-1")
    assert not store.is_uploading("job-1")
    assert store.session("job-1") == session
    assert not store.has_active_uploads()


def test_close_session_returns_the_detached_session() -> None:
    store = UploadSessionStore()
    session = UploadSession(key="k", upload_id="u")
    store.register("job-1")
    store.open_session("job-1", session)

    assert store.close_session("job-1") == session
    assert store.close_session("job-1") is None
    assert store.open_sessions() == {}


def test_arm_keeps_known_session_when_none_given() -> None:
    store = UploadSessionStore()
    session = UploadSession(key="k", upload_id="u")
    store.register("job-1")
    store.open_session("job-1", session)
    store.stop("job-1")

    state = store.arm("job-1")

    assert state.session == session
    assert store.can_continue("job-1")
    assert store.is_uploading("job-1")


def test_snapshot_is_not_affected_by_later_writes() -> None:
    store = UploadSessionStore()
    store.register("job-1")
    before = store.snapshot()

    store.stop("job-1")
    store.register("job-2")

    assert before["job-1"].continuation is True
    assert "job-2" not in before
    assert store.snapshot()["job-1"].continuation is False


def test_open_sessions_lists_only_jobs_with_a_session() -> None:
    store = UploadSessionStore()
    session = UploadSession(key="k", upload_id="u")
    store.register("job-1")
    store.register("job-2")
    store.open_session("job-2", session)

    assert store.open_sessions() == {"job-2": session}

    store.forget("job-2")
    assert store.open_sessions() == {}
    assert store.get("job-2") is None
