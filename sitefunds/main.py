from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sitefunds.config import settings
from sitefunds.routers import (
    auth_routes,
    projects,
    fund_allocations,
    transactions,
    fund_transfers,
    analytics,
    audit_logs,
    users,
    companies,
    permissions,
)

app = FastAPI(title="Sitefunds", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid4())
    )
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

app.include_router(auth_routes.router)
app.include_router(projects.router)
app.include_router(fund_allocations.router)
app.include_router(transactions.router)
app.include_router(fund_transfers.router)
app.include_router(analytics.router)
app.include_router(audit_logs.router)
app.include_router(users.router)
app.include_router(companies.router)
app.include_router(permissions.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "sitefunds"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
