import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./billing.db")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    CREATE_TABLES_ON_STARTUP = bool(data.get("CREATE_TABLES_ON_STARTUP", 1))

    # Batch job queue
    BATCH_JOB_ATTEMPTS = data.get("BATCH_JOB_ATTEMPTS", 3)
    BATCH_JOB_BACKOFF_MS = data.get("BATCH_JOB_BACKOFF_MS", 2000)  # Doubles on each attempt

    # Billing batch worker
    WORKER_POLL_INTERVAL_SECONDS = data.get("WORKER_POLL_INTERVAL_SECONDS", 2)
    WORKER_BATCH_SIZE = data.get("WORKER_BATCH_SIZE", 10)  # Jobs per polling cycle

    # ERP integration ("simulated" or "http")
    ERP_MODE = data.get("ERP_MODE", "simulated")
    ERP_URL = data.get("ERP_URL", None)
    ERP_TIMEOUT_SECONDS = data.get("ERP_TIMEOUT_SECONDS", 10)
    ERP_SIMULATED_SUCCESS_RATE = data.get("ERP_SIMULATED_SUCCESS_RATE", 0.9)
    ERP_SIMULATED_LATENCY_SECONDS = data.get("ERP_SIMULATED_LATENCY_SECONDS", 0.1)
