from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from treasury_swaps.api.http.http_api import router as http_router
from treasury_swaps.configuration.config import settings
from treasury_swaps.core.errors import InternalError, InvalidArgumentError, QuotingError, QuotingErrorKind
from treasury_swaps.core.swaps.quote_aggregator import QuoteAggregator
from treasury_swaps.integrations.covalent.covalent_client import BalanceProvider, CovalentClient, PriceOracle
from treasury_swaps.integrations.cow.cow_client import CowClient, QuoteGateway
from treasury_swaps.logging.logger import get_logger

log = get_logger(__name__)

_QUOTING_ERROR_MESSAGES = {
    QuotingErrorKind.SELL_AMOUNT_DOES_NOT_COVER_FEE: "sell amount is lower than the fee",
}


def _parse_allowed_origins(env_value: str) -> List[str]:
    """Parse a comma-separated CORS origins string into a clean list."""
    return [origin.strip() for origin in env_value.split(",") if origin.strip()]


async def _on_invalid_argument(_: Request, error: InvalidArgumentError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(error)})


async def _on_quoting_error(_: Request, error: QuotingError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": _QUOTING_ERROR_MESSAGES.get(error.kind, error.kind.value), "errorType": error.kind.value},
    )


async def _on_internal_error(_: Request, error: InternalError) -> JSONResponse:
    log.error("[HTTP][ERROR] Internal failure: %s", error)
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


def create_app(
        quote_gateway: Optional[QuoteGateway] = None,
        price_oracle: Optional[PriceOracle] = None,
        balance_provider: Optional[BalanceProvider] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators default to the real CoW and Covalent clients; tests pass fakes.
    """
    app = FastAPI(title="Treasury Swaps API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_allowed_origins(settings.CORS_ORIGINS),
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    covalent_client = CovalentClient() if price_oracle is None or balance_provider is None else None
    app.state.quote_gateway = quote_gateway or CowClient()
    app.state.balance_provider = balance_provider or covalent_client
    app.state.quote_aggregator = QuoteAggregator(app.state.quote_gateway, price_oracle or covalent_client)

    app.add_exception_handler(InvalidArgumentError, _on_invalid_argument)
    app.add_exception_handler(QuotingError, _on_quoting_error)
    app.add_exception_handler(InternalError, _on_internal_error)

    app.include_router(http_router)

    log.info("Treasury swaps API ready.")
    return app
