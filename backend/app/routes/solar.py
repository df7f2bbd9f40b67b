from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from app.models.solar import ControlResponse, SampleResponse, StatusResponse
from app.services.simulation import SimulationContext, handle_poll
from app.services.streaming import NoPlaybackDataError, event_stream

router = APIRouter()

SAMPLE_SIZE = 5


def get_simulation(request: Request) -> SimulationContext:
    return request.app.state.simulation


# All handlers are async so state changes stay on the event loop thread.

@router.get("/solar/live-panels")
async def live_panels(sim: SimulationContext = Depends(get_simulation)):
    """Advance the fleet one tick and return panels, metrics and the next playback record."""
    return handle_poll(sim)


@router.get("/solar/stream")
async def stream(request: Request, sim: SimulationContext = Depends(get_simulation)):
    """
    Server-Sent Events stream of playback records.
    First event is `connected`; then `data` each tick while running, and
    `stopped` when the simulation is stopped.
    """
    return StreamingResponse(
        event_stream(request, sim.streamer),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/solar/start", response_model=ControlResponse)
async def start_simulation(sim: SimulationContext = Depends(get_simulation)):
    try:
        started = sim.streamer.start()
    except NoPlaybackDataError:
        raise HTTPException(
            status_code=400,
            detail="No data loaded. Please ensure the playback CSV file is in place.",
        )
    message = "Simulation started" if started else "Simulation already running"
    return ControlResponse(message=message, is_running=True)


@router.post("/solar/stop", response_model=ControlResponse)
async def stop_simulation(sim: SimulationContext = Depends(get_simulation)):
    stopped = sim.streamer.stop()
    message = "Simulation stopped" if stopped else "Simulation not running"
    return ControlResponse(message=message, is_running=False)


@router.get("/solar/status", response_model=StatusResponse)
async def simulation_status(sim: SimulationContext = Depends(get_simulation)):
    return sim.status()


@router.get("/solar/sample", response_model=SampleResponse)
async def sample_data(sim: SimulationContext = Depends(get_simulation)):
    if not sim.playback.has_data:
        raise HTTPException(status_code=404, detail="No data loaded")
    return SampleResponse(sample_data=sim.playback.sample(SAMPLE_SIZE), total_points=len(sim.playback))
