# station_zones/main.py
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from station_zones.api.routes_basic import router as basic_router
from station_zones.api.routes_partition import router as partition_router
from station_zones.config import get_settings
from station_zones.geometry.errors import GeometryError
from station_zones.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)
logger = structlog.get_logger()

app = FastAPI(
    title="Station Zones Backend",
    description="Constrained Voronoi service areas for stations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins or ["*"],
    allow_credentials=False,  # no cookies with a "*" origin
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GeometryError)
async def geometry_error_handler(request: Request, exc: GeometryError):
    logger.warning("api.geometry_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Routers
app.include_router(basic_router)
app.include_router(partition_router, prefix="/api")

logger.info(
    "api.ready",
    apply_constraints=settings.apply_constraints,
    stations_csv=str(settings.stations_csv),
)
