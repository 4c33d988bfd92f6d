"""
TIPSY API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from tipsy_shared.config.settings import settings
from tipsy_shared.infrastructure.correlation import CorrelationIdMiddleware
from tipsy_shared.security.rate_limit import limiter
from tipsy_api.core import (
    configure_cors,
    lifespan,
    register_exception_handlers,
    register_middlewares,
)
from tipsy_api.routers import api_router


app = FastAPI(
    title="TIPSY API",
    description="Digital tipping and reviews for restaurant workers",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter

register_exception_handlers(app)

# Registration order is the reverse of execution order: CORS wraps everything
register_middlewares(app)
app.add_middleware(CorrelationIdMiddleware)
configure_cors(app)

app.include_router(api_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tipsy_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
