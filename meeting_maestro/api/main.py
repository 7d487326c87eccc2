from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meeting_maestro.api.errors import install_error_handlers
from meeting_maestro.api.models import HealthResponse
from meeting_maestro.api.routes.documents import router as documents_router
from meeting_maestro.api.routes.extraction import router as extraction_router
from meeting_maestro.api.routes.summary import router as summary_router
from meeting_maestro.config import settings
from meeting_maestro.llm.credentials import validate_api_key
from meeting_maestro.log_config import AccessLogMiddleware, setup_logging

setup_logging(settings.log_level)

app = FastAPI(
    title="Meeting Maestro API",
    description="Streaming meeting summaries and action-item extraction",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)
install_error_handlers(app)

app.include_router(summary_router)
app.include_router(extraction_router)
app.include_router(documents_router)


@app.get("/", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    api_key = settings.api_key_for(settings.llm_provider)
    validation = validate_api_key(api_key, settings.llm_provider)
    return HealthResponse(
        status="healthy",
        message="Meeting Maestro backend is running",
        provider=settings.llm_provider.value,
        api_key_set=bool(api_key),
        api_key_validation=validation.to_dict(),
    )
