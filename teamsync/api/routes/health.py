# teamsync/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from teamsync.core.config import get_settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(
        ...,
        description="'ok' when data is loaded, 'degraded' when the initial load failed.",
        examples=["ok"],
    )
    app_name: str = Field(..., description="Name of the running application.", examples=["TeamSync"])
    environment: str = Field(..., description="Deployment environment (local/dev/stage/prod).", examples=["local"])
    data_loaded: bool = Field(..., description="Whether the workspace finished its initial load.")
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) of this health check.",
        examples=["2025-01-01T10:30:00Z"],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check for the TeamSync service",
    description=(
        "Lightweight endpoint to verify that the backend is up.\n\n"
        "It never touches the persistence backend; a failed initial load is "
        "reported as `degraded` instead of an error."
    ),
    responses={
        200: {
            "description": "Service is responding.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "ok",
                        "app_name": "TeamSync",
                        "environment": "local",
                        "data_loaded": True,
                        "timestamp_utc": "2025-01-01T10:30:00Z",
                    }
                }
            },
        }
    },
)
async def health_check(request: Request) -> HealthResponse:
    settings = get_settings()
    loaded = (
        getattr(request.app.state, "workspace", None) is not None
        and getattr(request.app.state, "bootstrap_error", None) is None
    )
    return HealthResponse(
        status="ok" if loaded else "degraded",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        data_loaded=loaded,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
