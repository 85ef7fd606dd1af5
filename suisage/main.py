import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import health, llm, query
from .config import settings
from .core.agent import SuiSageAgent
from .core.symbols import SymbolResolver
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .providers import AftermathProvider
from .providers.llm import get_llm_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the providers and the agent once, and close them on shutdown."""
    if getattr(app.state, "agent", None) is not None:
        yield
        return

    setup_logging()
    market = AftermathProvider(
        mainnet_url=settings.aftermath_mainnet_url,
        testnet_url=settings.aftermath_testnet_url,
        timeout=settings.aftermath_timeout_seconds,
    )
    app.state.market = market
    app.state.llm = None

    try:
        llm_provider = get_llm_provider()
    except ValueError as exc:
        logger.warning(f"Query service disabled: {exc}")
    else:
        app.state.llm = llm_provider
        symbols = SymbolResolver.from_file(settings.symbols_file)
        app.state.agent = SuiSageAgent.build(
            llm_provider,
            market,
            symbols,
            default_network=settings.default_network,
        )
        logger.info(
            f"SuiSage ready: llm={llm_provider.name}/{llm_provider.model}, "
            f"{len(symbols)} symbols"
        )

    try:
        yield
    finally:
        await market.close()
        if app.state.llm is not None:
            await app.state.llm.close()


def create_app(agent: Optional[SuiSageAgent] = None) -> FastAPI:
    """Create the API. Passing an agent skips provider construction at startup."""
    app = FastAPI(
        title="SuiSage API",
        description="Natural-language questions about Sui DeFi markets",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=_lifespan,
    )
    app.state.agent = agent
    app.state.query_timeout = settings.query_timeout_seconds

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(query.router, tags=["Query"])
    app.include_router(llm.router, tags=["LLM"])

    @app.get("/")
    async def root():
        """Root endpoint with basic info"""
        return {
            "name": "SuiSage API",
            "version": __version__,
            "description": "Natural-language questions about Sui DeFi markets",
            "docs": "/docs",
            "health": "/healthz",
            "query": "/api/query",
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn
    uvicorn.run(
        "suisage.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
