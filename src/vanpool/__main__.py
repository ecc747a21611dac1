"""Vanpool entrypoint.

Run with:
  python -m vanpool
"""

import os
import uvicorn

from vanpool.logging_config import get_logging_config

def main() -> None:
    host = os.getenv("VANPOOL_HOST", "0.0.0.0")
    port = int(os.getenv("VANPOOL_PORT", "8000"))
    reload = os.getenv("VANPOOL_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run(
        "vanpool.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=get_logging_config(),
    )

if __name__ == "__main__":
    main()
