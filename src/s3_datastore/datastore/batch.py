"""Best-effort batched writes."""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Optional

from s3_datastore.core import get_logger, get_tracer, settings
from s3_datastore.core.exceptions import BatchCommittedError
from s3_datastore.key import Key

from .interface import Batch

if TYPE_CHECKING:
    from .s3 import S3Datastore

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class S3Batch(Batch):
    """Buffers puts and deletes and commits them concurrently.

    Commit fans every buffered operation out to a thread pool with no
    ordering between them: a put and a delete of the same key race. The
    commit fails with the first error observed, but operations that already
    succeeded stay applied.

    A batch commits once. Using it again afterwards raises
    ``BatchCommittedError``.
    """

    def __init__(self, store: "S3Datastore", max_workers: Optional[int] = None):
        self.store = store
        self.max_workers = max_workers or settings.batch_max_workers
        self.puts: list[tuple[Key, bytes]] = []
        self.deletes: list[Key] = []
        self.committed = False

    def put(self, key: Key, value: bytes) -> None:
        self._check_open()
        self.puts.append((key, value))

    def delete(self, key: Key) -> None:
        self._check_open()
        self.deletes.append(key)

    def commit(self) -> None:
        """Apply every buffered operation.

        Raises:
            WriteFailedError: If a buffered put fails
            DeleteFailedError: If a buffered delete fails
        """
        self._check_open()
        self.committed = True

        total = len(self.puts) + len(self.deletes)
        if total == 0:
            return

        logger.debug("Committing batch", puts=len(self.puts), deletes=len(self.deletes))

        with tracer.start_as_current_span("s3_datastore.batch.commit") as span:
            span.set_attribute("batch.puts", len(self.puts))
            span.set_attribute("batch.deletes", len(self.deletes))

            first_error: Optional[BaseException] = None
            failures = 0

            with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as executor:
                futures: list[Future] = [
                    executor.submit(self.store.put, key, value)
                    for key, value in self.puts
                ]
                futures.extend(
                    executor.submit(self.store.delete, key) for key in self.deletes
                )

                for future in as_completed(futures):
                    error = future.exception()
                    if error is None:
                        continue
                    failures += 1
                    if first_error is None:
                        first_error = error

            if first_error is not None:
                logger.error(
                    "Batch commit failed",
                    failed=failures,
                    total=total,
                    error=str(first_error),
                )
                raise first_error

        logger.debug("Batch committed", total=total)

    def _check_open(self) -> None:
        if self.committed:
            raise BatchCommittedError("Batch has already been committed")
