"""Run the trailer channel with ``python -m tmdb_trailers``."""

from __future__ import annotations

import uvicorn

from app.config import Settings, get_settings


def main(settings: Settings | None = None) -> None:
    """Serve ``app.main:app`` on the configured host and port."""

    settings = settings or get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
