"""Run the API server: ``python -m app``."""

import uvicorn

from app.config import settings


def main() -> None:
    # uvicorn stops accepting connections on SIGINT/SIGTERM, waits for
    # in-flight requests, then runs the lifespan shutdown
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_config=None,
        timeout_graceful_shutdown=settings.graceful_shutdown_seconds,
    )


if __name__ == "__main__":
    main()
