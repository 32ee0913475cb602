"""Billing batch service entry point

    uvicorn api:app --port 8000

The billing batch worker runs as a separate process:

    python -m src.worker.billing_batch_worker --continuous
"""

import uvicorn
from config import ApplicationConfig
from src.api.app import create_app

app = create_app(ApplicationConfig)

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
