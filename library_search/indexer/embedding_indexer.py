"""
Embedding indexer for catalog books.

Builds the text each book is embedded from, requests embeddings in
batches and stores them on the books table. Books that cannot be
embedded are logged to embedding_errors and left for the next run.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from ..core import get_config, get_logger, DatabaseError, EmbeddingProviderError
from ..database import init_schema
from ..database.catalog_repository import CatalogEntry, CatalogRepository
from ..database.vector_repository import VectorRepository
from ..search.embedding_service import EmbeddingService, get_embedding_service

logger = get_logger(__name__)


UNKNOWN_TITLE = "Unbekannter Titel"


def prepare_vector_source(entry: CatalogEntry) -> str:
    """
    Build the text a book is embedded from.

    Empty parts are skipped; a missing title becomes a placeholder.

    Args:
        entry: Catalog entry.

    Returns:
        Labelled fields joined with ". ".
    """
    parts = [
        entry.title or UNKNOWN_TITLE,
        f"Autor: {entry.author}" if entry.author else "",
        f"Fach: {entry.subject}" if entry.subject else "",
        f"Stufe: {entry.level}" if entry.level else "",
        f"Jahr: {entry.year}" if entry.year else "",
        f"Typ: {entry.type}" if entry.type else "",
        f"Verlag: {entry.publisher}" if entry.publisher else "",
        entry.description or ""
    ]
    return ". ".join(part for part in parts if part)


@dataclass
class EmbeddingIndexingStats:
    """Statistics from an embedding run."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "errors": list(self.errors)
        }


class EmbeddingIndexer:
    """
    Fills in missing book embeddings.

    A batch is embedded in one provider call. If that call fails, the
    books of the batch are retried one by one so a single bad record
    does not cost the whole batch.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService = None,
        catalog_repo: CatalogRepository = None,
        vector_repo: VectorRepository = None,
        batch_size: int = None,
        progress_callback: Callable[[int, int, str], None] = None
    ):
        """
        Initialize the embedding indexer.

        Args:
            embedding_service: Embedding client; defaults to the singleton.
            catalog_repo: Catalog access; defaults to a new repository.
            vector_repo: Embedding storage; defaults to a new repository.
            batch_size: Books per provider call. Defaults to config value.
            progress_callback: Optional callback(current, total, message).
        """
        self.embedding_service = embedding_service or get_embedding_service()
        self.catalog_repo = catalog_repo or CatalogRepository()
        self.vector_repo = vector_repo or VectorRepository()
        self.batch_size = batch_size or get_config().embedding.batch_size
        self.progress_callback = progress_callback

    def index_missing(self, book_ids: Optional[Iterable[str]] = None) -> EmbeddingIndexingStats:
        """
        Embed books and store the vectors.

        Args:
            book_ids: Books to (re-)embed. If empty or None, every book
                without an embedding is processed.

        Returns:
            EmbeddingIndexingStats for the run.
        """
        init_schema()

        ids = list(book_ids) if book_ids else []
        if ids:
            books = self.catalog_repo.get_by_ids(ids)
        else:
            books = self.catalog_repo.get_missing_embeddings()

        stats = EmbeddingIndexingStats()

        if not books:
            logger.info("No books need embeddings")
            return stats

        logger.info(f"{len(books)} books need embeddings")

        for book in books:
            if not book.vector_source:
                book.vector_source = prepare_vector_source(book)
                self.catalog_repo.update_vector_source(book.id, book.vector_source)

        total = len(books)
        batch_count = (total + self.batch_size - 1) // self.batch_size

        for i in range(0, total, self.batch_size):
            batch = books[i:i + self.batch_size]
            batch_num = i // self.batch_size + 1

            if self.progress_callback:
                self.progress_callback(min(i + len(batch), total), total, f"Batch {batch_num}/{batch_count}")

            logger.debug(f"Embedding batch {batch_num}/{batch_count}")
            self._index_batch(batch, stats)

        logger.info(
            f"Embedding run complete: {stats.succeeded}/{stats.processed} books, "
            f"{stats.failed} failures"
        )

        return stats

    def _index_batch(self, batch: List[CatalogEntry], stats: EmbeddingIndexingStats) -> None:
        """Embed and store one batch, falling back to single books on failure."""
        texts = [book.vector_source for book in batch]

        try:
            embeddings = self.embedding_service.embed_passages(texts)
            self.vector_repo.store_embeddings_batch(
                [(book.id, embedding) for book, embedding in zip(batch, embeddings)]
            )
        except (EmbeddingProviderError, DatabaseError) as e:
            logger.warning(f"Batch embedding failed ({e.message}), retrying books individually")
            for book in batch:
                self._index_single(book, stats)
            return

        stats.processed += len(batch)
        stats.succeeded += len(batch)

    def _index_single(self, book: CatalogEntry, stats: EmbeddingIndexingStats) -> None:
        stats.processed += 1

        try:
            embedding = self.embedding_service.embed_passages([book.vector_source])[0]
            self.vector_repo.store_embedding(book.id, embedding)
        except (EmbeddingProviderError, DatabaseError) as e:
            stats.failed += 1
            stats.errors.append(f"{book.id}: {e.message}")
            logger.error(f"Failed to embed book {book.id}: {e.message}")
            self.catalog_repo.record_embedding_error(book.id, e.message)
            return

        stats.succeeded += 1
