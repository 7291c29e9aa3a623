import os
from pathlib import Path

ROOT = Path(__file__).resolve().parent
DATA_RAW = ROOT / "data" / "raw"
OUTPUTS = ROOT / "outputs"
ARTIFACTS_DIR = OUTPUTS / "artifacts"
TICKETS_CSV_FILENAME = os.getenv("TICKETS_CSV_FILENAME", "tickets.csv")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY") or None
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL") or None
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.1-8b-instant")
LLM_CALL_TIMEOUT_SEC = float(os.getenv("LLM_CALL_TIMEOUT_SEC", "30"))

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")
EMBEDDING_DIM = int(os.getenv("EMBEDDING_DIM", "1536"))

MODELS_DIR = ROOT / os.getenv("MODELS_DIR", "models")
LLAMA_MODEL_PATH = os.getenv("LLAMA_MODEL_PATH") or None
LLAMA_N_CTX = int(os.getenv("LLAMA_N_CTX", "4096"))
LLAMA_N_GPU_LAYERS = int(os.getenv("LLAMA_N_GPU_LAYERS", "-1"))
LLAMA_HF_REPO = os.getenv("LLAMA_HF_REPO", "bartowski/Meta-Llama-3.1-8B-Instruct-GGUF")
LLAMA_HF_FILENAME = os.getenv("LLAMA_HF_FILENAME", "Meta-Llama-3.1-8B-Instruct-Q4_K_M.gguf")

EVALUATOR_PRECEDENT_K = int(os.getenv("EVALUATOR_PRECEDENT_K", "5"))
DRAFT_PRECEDENT_K = int(os.getenv("DRAFT_PRECEDENT_K", "3"))
DRAFT_MAX_ATTEMPTS = int(os.getenv("DRAFT_MAX_ATTEMPTS", "3"))
DRAFT_IMPROVEMENT_BONUS = 10

DEFAULT_DEPARTMENT = os.getenv("DEFAULT_DEPARTMENT", "IT Support")
DEPARTMENT_ID_PATTERN = os.getenv(
    "DEPARTMENT_ID_PATTERN",
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
)
UNRESOLVED_DEPARTMENT_PENALTY = int(os.getenv("UNRESOLVED_DEPARTMENT_PENALTY", "20"))

VECTOR_STORE_MAX_BYTES = int(os.getenv("VECTOR_STORE_MAX_BYTES", str(5 * 1024 * 1024)))
VECTOR_STORE_TRUNCATED_DIM = int(os.getenv("VECTOR_STORE_TRUNCATED_DIM", "100"))

LOG_DISPLAY = os.getenv("LOG_DISPLAY", "0") == "1"

_CHARS_PER_TOKEN = 3
_RESERVED_PROMPT_TOKENS = 1500
TICKET_MAX_CHARS = int(
    os.getenv("TICKET_MAX_CHARS")
    or ((LLAMA_N_CTX - _RESERVED_PROMPT_TOKENS) * _CHARS_PER_TOKEN)
)

for d in (DATA_RAW, OUTPUTS, ARTIFACTS_DIR):
    d.mkdir(parents=True, exist_ok=True)
