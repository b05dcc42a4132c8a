from __future__ import annotations

from pathlib import Path

from augmet_uploader.domain.entities import LocalFile, TransferJob
from augmet_uploader.infrastructure.transfers.runtime import TransferQueue


def _job(job_id: str) -> TransferJob:
    return TransferJob(
        file=LocalFile(path=Path(f"/data/{job_id}.bam"), name=f"{job_id}.bam", size=1),
        job_id=job_id,
        file_name=f"{job_id}.bam",
    )


def test_queue_is_fifo() -> None:
    queue = TransferQueue()
    for job_id in ("a", "b", "c"):
        queue.enqueue(_job(job_id))

    assert queue.peek() is not None and queue.peek().job_id == "a"
    assert [queue.dequeue().job_id for _ in range(3)] == ["a", "b", "c"]
    assert queue.dequeue() is None
    assert queue.is_empty


def test_remove_by_keeps_order_of_remaining_jobs() -> None:
    queue = TransferQueue()
    for job_id in ("a", "b", "a", "c"):
        queue.enqueue(_job(job_id))

    removed = queue.remove_by(lambda job: job.job_id == "a")

    assert removed == 2
    assert [job.job_id for job in queue.to_list()] == ["b", "c"]
    assert len(queue) == 2


def test_remove_by_without_match_is_a_no_op() -> None:
    queue = TransferQueue()
    queue.enqueue(_job("a"))

    assert queue.remove_by(lambda job: job.job_id == "missing") == 0
    assert [job.job_id for job in queue.to_list()] == ["a"]


def test_clear_empties_queue() -> None:
    queue = TransferQueue()
    queue.enqueue(_job("a"))
    queue.enqueue(_job("b"))

    queue.clear()

    assert queue.is_empty
    assert queue.peek() is None
    assert queue.to_list() == []
