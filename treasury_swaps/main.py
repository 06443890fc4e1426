from __future__ import annotations

from treasury_swaps.logging.logger import init_logging

init_logging()

import uvicorn

from treasury_swaps.configuration.config import settings


def run() -> None:
    uvicorn.run(
        "treasury_swaps.api.app:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    run()
