"""Copy-on-write per-job state: continuation/terminal flags and remote sessions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType

from augmet_uploader.domain.entities import JobState, UploadSession


class UploadSessionStore:
    """Map from job id to an immutable ``JobState`` record.

    Every write builds a new mapping from the current snapshot and swaps the
    reference, so a reader holding ``snapshot()`` never sees a torn update.
    Readers that need current state must call back into the store instead of
    keeping an old snapshot around.

    A job carries a session iff its remote multipart session is still open.
    """

    def __init__(self) -> None:
        self._states: Mapping[str, JobState] = MappingProxyType({})

    def snapshot(self) -> Mapping[str, JobState]:
        """Return the current read-only snapshot."""

        return self._states

    def get(self, job_id: str) -> JobState | None:
        return self._states.get(job_id)

    def register(self, job_id: str) -> JobState:
        """Track a freshly queued job: not terminal, eligible to continue."""

        state = JobState(terminal=False, continuation=True)
        self._write(job_id, state)
        return state

    def arm(self, job_id: str, session: UploadSession | None = None) -> JobState:
        """Re-arm a job for resumption, keeping any known session."""

        current = self._states.get(job_id)
        known_session = session or (current.session if current is not None else None)
        state = JobState(terminal=False, continuation=True, session=known_session)
        self._write(job_id, state)
        return state

    def stop(self, job_id: str) -> JobState | None:
        """Turn continuation off and mark the job terminal."""

        current = self._states.get(job_id)
        if current is None:
            return None
        state = replace(current, continuation=False, terminal=True)
        self._write(job_id, state)
        return state

    def open_session(self, job_id: str, session: UploadSession) -> bool:
        """Attach a remote session; False when the job is no longer tracked."""

        current = self._states.get(job_id)
        if current is None:
            return False
        self._write(job_id, replace(current, session=session))
        return True

    def session(self, job_id: str) -> UploadSession | None:
        current = self._states.get(job_id)
        return None if current is None else current.session

    def close_session(self, job_id: str) -> UploadSession | None:
        """Detach and return the session once the remote side is finished."""

        current = self._states.get(job_id)
        if current is None or current.session is None:
            return None
        self._write(job_id, replace(current, session=None))
        return current.session

    def forget(self, job_id: str) -> JobState | None:
        """Drop all bookkeeping for a job."""

        current = self._states.get(job_id)
        if current is None:
            return None
        states = dict(self._states)
        del states[job_id]
        self._states = MappingProxyType(states)
        return current

    def can_continue(self, job_id: str) -> bool:
        current = self._states.get(job_id)
        return current is not None and current.continuation

    def is_uploading(self, job_id: str) -> bool:
        """True while the job is tracked and has not reached a terminal outcome."""

        current = self._states.get(job_id)
        return current is not None and not current.terminal

    def uploading_flags(self) -> dict[str, bool]:
        """Return job id -> terminal flag, the view a host checks before exiting."""

        return {job_id: state.terminal for job_id, state in self._states.items()}

    def open_sessions(self) -> dict[str, UploadSession]:
        return {
            job_id: state.session
            for job_id, state in self._states.items()
            if state.session is not None
        }

    def has_active_uploads(self) -> bool:
        return any(not state.terminal for state in self._states.values())

    def _write(self, job_id: str, state: JobState) -> None:
        states = dict(self._states)
        states[job_id] = state
        self._states = MappingProxyType(states)


__all__ = ["UploadSessionStore"]
