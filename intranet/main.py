from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from intranet.api.aliases import router as aliases_router
from intranet.api.auth import router as auth_router
from intranet.api.dashboard import router as dashboard_router
from intranet.api.deps import require_module, require_user_auth
from intranet.api.directory import router as directory_router
from intranet.api.documents import router as documents_router
from intranet.api.hr import router as hr_router
from intranet.api.logs import router as logs_router
from intranet.api.messages import router as messages_router
from intranet.api.modules import router as modules_router
from intranet.api.permissions import router as permissions_router
from intranet.api.restrictions import router as restrictions_router
from intranet.config import settings
from intranet.db import SessionLocal
from intranet.errors import register_error_handlers
from intranet.logging import configure_logging
from intranet.observability import ObservabilityMiddleware
from intranet.services.seed import seed_defaults


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()
    yield


app = FastAPI(title="Obsidian Intranet API", lifespan=lifespan)

configure_logging()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api", dependencies=dependencies)


def _authenticated(module: str | None = None):
    dependencies = [Depends(require_user_auth)]
    if module:
        dependencies.append(Depends(require_module(module)))
    return dependencies


_include_api_router(auth_router)
_include_api_router(documents_router, dependencies=_authenticated("documents"))
_include_api_router(messages_router, dependencies=_authenticated("messagerie"))
_include_api_router(aliases_router, dependencies=_authenticated("messagerie"))
_include_api_router(restrictions_router, dependencies=_authenticated("messagerie"))
_include_api_router(hr_router, dependencies=_authenticated("rh"))
_include_api_router(directory_router, dependencies=_authenticated("annuaire"))
_include_api_router(modules_router, dependencies=_authenticated())
_include_api_router(permissions_router, dependencies=_authenticated())
_include_api_router(logs_router, dependencies=_authenticated())
_include_api_router(dashboard_router, dependencies=_authenticated())


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
