from fastapi import Depends, FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.activity import router as activity_router
from app.api.deps import require_user_auth
from app.api.pdfs import router as pdfs_router
from app.api.stats import router as stats_router
from app.api.upload import router as upload_router
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.observability import ObservabilityMiddleware
from app.telemetry import setup_otel

app = FastAPI(title="NeoPDF API")

configure_logging()
setup_otel(app)
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(upload_router, dependencies=[Depends(require_user_auth)])
_include_api_router(pdfs_router, dependencies=[Depends(require_user_auth)])
_include_api_router(activity_router, dependencies=[Depends(require_user_auth)])
_include_api_router(stats_router, dependencies=[Depends(require_user_auth)])


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
