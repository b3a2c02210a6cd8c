"""
Entrypoint: ``python -m bibliocore.main`` or ``uvicorn bibliocore.main:app``.
"""

import uvicorn

from bibliocore.config import get_settings
from bibliocore.factory import create_app

settings = get_settings()
app = create_app(settings)


def run() -> None:
    """Serve the application on BIND_HOST:BIND_PORT."""
    uvicorn.run(
        app,
        host=settings.BIND_HOST,
        port=settings.BIND_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
