import asyncio
import logging

from helpdesk.logging_utils import log_usage
from helpdesk.models import Ticket

from .embedder import Embedder, ticket_document
from .vector_store import EmbeddingRecord, VectorStore

logger = logging.getLogger(__name__)


async def index_ticket(ticket: Ticket, store: VectorStore, embedder: Embedder) -> EmbeddingRecord:
    vector = await embedder.embed(ticket_document(ticket))
    return store.upsert(ticket.id, vector, ticket.metadata_snapshot())


async def index_tickets(
    tickets: list[Ticket],
    store: VectorStore,
    embedder: Embedder,
    *,
    concurrency: int = 8,
) -> list[EmbeddingRecord]:
    """Embed and upsert a training corpus. Re-indexing a ticket overwrites its record."""
    sem = asyncio.Semaphore(concurrency)

    async def _one(ticket: Ticket) -> EmbeddingRecord:
        async with sem:
            return await index_ticket(ticket, store, embedder)

    records = await asyncio.gather(*(_one(t) for t in tickets))
    log_usage("embed", n_tickets=len(tickets), n_records=len(store))
    logger.info("Indexed %d tickets (%d records in store)", len(records), len(store))
    return list(records)
