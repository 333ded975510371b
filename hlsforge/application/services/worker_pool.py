"""Bounded in-memory transcode queue with a fixed pool of workers."""

import asyncio

from hlsforge.application.services.transcode import TranscodeService
from hlsforge.commons.telemetry import LogContext, get_logger, set_correlation_id
from hlsforge.domain.models import TranscodeTask


class TranscodeWorkerPool:
    """FIFO queue of transcode tasks drained by ``worker_count`` workers.

    ``submit`` suspends the caller while the queue is full. Workers are
    started once, outside any request, so a transcode keeps running when
    the uploading client goes away. Nothing is persisted: tasks still
    queued on ``close`` are dropped and their videos stay processing.
    """

    def __init__(
        self,
        transcoder: TranscodeService,
        worker_count: int = 1,
        queue_size: int = 50,
    ) -> None:
        """Initialize the pool.

        Args:
            transcoder: Service running one task end to end.
            worker_count: Number of concurrent workers.
            queue_size: Maximum number of pending tasks.
        """
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self._transcoder = transcoder
        self._worker_count = worker_count
        self._queue: asyncio.Queue[TranscodeTask] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False
        self._logger = get_logger(__name__)

    @property
    def is_running(self) -> bool:
        return bool(self._workers) and not self._closed

    @property
    def pending(self) -> int:
        """Number of tasks waiting for a worker."""
        return self._queue.qsize()

    def start(self) -> None:
        """Start the workers. Calling it again is a no-op."""
        if self._closed:
            raise RuntimeError("Worker pool is closed")
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(n), name=f"transcode-worker-{n}")
            for n in range(1, self._worker_count + 1)
        ]
        self._logger.info(
            "Transcode workers started",
            extra={
                "worker_count": self._worker_count,
                "queue_size": self._queue.maxsize,
            },
        )

    async def submit(self, task: TranscodeTask) -> None:
        """Queue a task, waiting for a free slot if the queue is full.

        Raises:
            RuntimeError: If the pool is closed, including while waiting.
        """
        if self._closed:
            raise RuntimeError("Worker pool is closed")
        if self._queue.full():
            self._logger.warning(
                "Transcode queue full, waiting for a free slot",
                extra={"video_id": task.video_id},
            )
        await self._queue.put(task)
        if self._closed:
            # close() drained the queue while this put was waiting
            self._drop_pending()
            raise RuntimeError("Worker pool closed while waiting for a queue slot")
        self._logger.info(
            "Transcode task queued",
            extra={"video_id": task.video_id, "pending": self._queue.qsize()},
        )

    async def join(self) -> None:
        """Wait until every queued task has been processed."""
        await self._queue.join()

    async def close(self) -> None:
        """Stop the workers and drop queued tasks."""
        if self._closed:
            return
        self._closed = True

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        self._drop_pending()
        await self._transcoder.aclose()
        self._logger.info("Transcode workers stopped")

    def _drop_pending(self) -> None:
        dropped: list[int] = []
        while not self._queue.empty():
            dropped.append(self._queue.get_nowait().video_id)
            self._queue.task_done()
        if dropped:
            self._logger.warning(
                "Dropped queued transcode tasks on shutdown",
                extra={"video_ids": dropped},
            )

    async def _worker(self, worker_id: int) -> None:
        while True:
            task = await self._queue.get()
            try:
                set_correlation_id(f"transcode-{task.video_id}")
                with LogContext(worker_id=worker_id):
                    await self._process(task)
            finally:
                self._queue.task_done()

    async def _process(self, task: TranscodeTask) -> None:
        self._logger.info(
            "Transcode started",
            extra={"video_id": task.video_id, "fingerprint": task.fingerprint},
        )
        try:
            await self._transcoder.transcode(task)
        except Exception as e:
            # Status and cleanup are handled by the transcoder; keep draining
            self._logger.error(
                "Transcode task failed",
                extra={"video_id": task.video_id, "error": str(e)},
            )
        else:
            self._logger.info(
                "Transcode task completed",
                extra={"video_id": task.video_id},
            )
