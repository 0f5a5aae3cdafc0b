"""Health check endpoint for load balancers and monitoring."""

from fastapi import APIRouter, Depends

from eswriter import __version__
from eswriter.api.dependencies import get_context
from eswriter.api.schemas import HealthStatus
from eswriter.context import ServiceContext

router = APIRouter()


@router.get("", response_model=HealthStatus)
async def health_check(context: ServiceContext = Depends(get_context)):
    """Liveness probe; does not call the completion provider."""
    return HealthStatus(status="healthy", version=__version__, provider=context.provider)
