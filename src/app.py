"""Distribution FastAPI application.

Web server that processes order, product and staff commands synchronously
via HTTP. Each request runs inside the distribution domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in the UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
from distribution.domain import distribution  # noqa: E402
from distribution.realtime import configure_broadcaster
from distribution.realtime.memory import InMemoryBroadcaster
from distribution.utils.logging import clear_context, configure_logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

configure_logging()
distribution.init()

# Replaced by a socket transport where one is deployed
configure_broadcaster(InMemoryBroadcaster())

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Distribution API",
    description="Orders, stock and staff for a distribution business",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the distribution domain context for each request."""
    clear_context()
    with distribution.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from distribution.api import order_router, product_router, staff_router  # noqa: E402

app.include_router(order_router)
app.include_router(product_router)
app.include_router(staff_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": distribution.name})
