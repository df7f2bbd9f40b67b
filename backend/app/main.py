import logging, time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from data_simulator.utils import utc_now

from app.config import Settings
from app.models.solar import HealthResponse
from app.routes import solar
from app.services.simulation import SimulationContext

logger = logging.getLogger(__name__)


SECURE_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
}


class SecureHeadersMiddleware(BaseHTTPMiddleware):
    """Adds SECURE_HEADERS to every response unless a route already set them."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        for name, value in SECURE_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        line = f"{request.method} {request.url.path} - {response.status_code} - {elapsed_ms:.2f}ms"
        # Event streams: timing covers the headers only
        if response.headers.get("content-type", "").startswith("text/event-stream"):
            line += " (stream opened)"
        logger.info(line)
        return response


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_banner(settings: Settings, sim: SimulationContext) -> None:
    base = f"http://localhost:{settings.port}/api"
    logger.info(f"Solar Panel Digital Twin API ready with {sim.panel_count} panels")
    logger.info(f"Stream endpoint: {base}/solar/stream")
    logger.info(f"Control endpoints: POST {base}/solar/start, POST {base}/solar/stop, GET {base}/solar/status")
    if not sim.playback.has_data:
        logger.warning(
            f"No playback data loaded. Place the CSV at {settings.data_csv} "
            f"(or set SOLAR_DATA_CSV) and restart to enable streaming."
        )


def create_app(settings: Optional[Settings] = None, simulation: Optional[SimulationContext] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sim = simulation or SimulationContext.from_settings(settings)
        sim.ensure_fleet()
        app.state.simulation = sim
        log_banner(settings, sim)
        yield
        logger.info("Shutting down server...")
        await sim.streamer.shutdown()

    app = FastAPI(
        title="Solar Panel Digital Twin API",
        description="Simulated telemetry for a small solar panel fleet, polled or streamed",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Enable CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Add secure headers
    app.add_middleware(SecureHeadersMiddleware)

    # Add request logging middleware
    app.add_middleware(LoggingMiddleware)

    app.include_router(solar.router, prefix="/api", tags=["solar"])

    @app.get("/")
    async def read_root():
        return {"message": "Welcome to the Solar Panel Digital Twin API", "docs": "/docs"}

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(request: Request):
        sim: SimulationContext = request.app.state.simulation
        return HealthResponse(
            status="OK",
            timestamp=utc_now().isoformat(),
            panel_count=len(sim.fleet),
            data_loaded=sim.playback.has_data,
            data_points=len(sim.playback),
        )

    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
