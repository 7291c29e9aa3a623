import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv
load_dotenv(ROOT / ".env")

import config
from helpdesk.logging_utils import log_result
from helpdesk.prep import load_tickets
from helpdesk.rag import Embedder, VectorStore, index_tickets


async def main(csv_path: Path | None = None) -> None:
    tickets = load_tickets(csv_path)
    store = VectorStore.load(config.ARTIFACTS_DIR)
    before = len(store)
    await index_tickets(tickets, store, Embedder())
    path = store.save(config.ARTIFACTS_DIR)
    log_result(
        {"n_tickets": len(tickets), "n_records": len(store), "storage_mode": store.storage_mode, "path": path},
        config.OUTPUTS / "index_runs.jsonl",
    )
    print(
        f"Indexed {len(tickets)} tickets: {before} -> {len(store)} records "
        f"({store.storage_mode} mode) in {path}"
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(main(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
