"""FastAPI server with REST API and WebSocket frame streaming.

Provides:
- WebSocket /ws/frames: Stream Frame objects at ~10 FPS
- REST API for world state, node inspection and run statistics
- Control endpoints: play, pause, single step, speed, reset
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, Field

from dtnsim.config import get_simulation_config
from dtnsim.engine.stats import summarize
from dtnsim.projection.projector import Frame, frame_to_dict, project
from dtnsim.scenario import create_simulation

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from dtnsim.agent.carry_only import CarryOnlyAgent
    from dtnsim.config import SimulationConfig
    from dtnsim.engine.scheduler import Scheduler

logger = logging.getLogger(__name__)

FRAME_INTERVAL = 0.1  # seconds between streamed frames

T = TypeVar("T")


class SimulationState:
    """Thread-safe simulation state manager.

    Owns the scheduler and serializes ticks from the background thread with
    reads from REST and WebSocket handlers. A whole tick runs under the lock,
    so no handler ever sees a half-built grid or an unmerged tick.
    """

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self._config = config
        self._scheduler = create_simulation(self._config)
        self._running = False
        self._speed = 1.0
        self._paused = True  # Start paused
        self._lock = threading.Lock()
        self._latest_frame: Frame | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def scheduler(self) -> Scheduler:
        with self._lock:
            return self._scheduler

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        with self._lock:
            self._paused = value

    @property
    def speed(self) -> float:
        with self._lock:
            return self._speed

    @speed.setter
    def speed(self, value: float) -> None:
        """Set simulation speed (clamped to 0.1-10.0)."""
        with self._lock:
            self._speed = max(0.1, min(10.0, value))

    @property
    def latest_frame(self) -> Frame | None:
        with self._lock:
            return self._latest_frame

    def tick(self) -> int:
        """Execute one simulation tick and refresh the frame."""
        with self._lock:
            handoffs = self._scheduler.step()
            self._latest_frame = project(self._scheduler)
            return handoffs

    def snapshot(self) -> Frame:
        """Project the current state without advancing."""
        with self._lock:
            return project(self._scheduler)

    def read(self, reader: Callable[[Scheduler], T]) -> T:
        """Run ``reader`` against the scheduler while holding the lock.

        Responses built inside ``reader`` never see a half-finished tick.
        """
        with self._lock:
            return reader(self._scheduler)

    def reset(self) -> None:
        """Rebuild the scenario from the configuration."""
        with self._lock:
            self._scheduler = create_simulation(self._config)
            self._latest_frame = None

    def start(self) -> None:
        """Start the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._simulation_loop, daemon=True)
        self._thread.start()
        logger.info("Simulation thread started")

    def stop(self) -> None:
        """Stop the background simulation thread."""
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
        logger.info("Simulation thread stopped")

    def _simulation_loop(self) -> None:
        """Background loop at ~30 ticks/second times the speed multiplier."""
        target_fps = 30.0
        while self._running and not self._stop_event.is_set():
            if not self.paused:
                try:
                    self.tick()
                except Exception:
                    logger.exception("Simulation tick failed; pausing")
                    self.paused = True

            effective_speed = self.speed if not self.paused else 1.0
            self._stop_event.wait(timeout=1.0 / (target_fps * effective_speed))


_sim_state: SimulationState | None = None


def get_sim_state() -> SimulationState:
    """Get or create the global simulation state."""
    global _sim_state
    if _sim_state is None:
        _sim_state = SimulationState(get_simulation_config())
    return _sim_state


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: start/stop simulation thread."""
    sim = get_sim_state()
    sim.start()
    yield
    sim.stop()


app = FastAPI(
    title="dtnsim",
    description="Carry-only delay-tolerant network simulator",
    version="0.1.0",
    lifespan=lifespan,
)


# Pydantic models for REST responses


class WorldStateResponse(BaseModel):
    """Response model for world state summary."""

    tick: int = Field(description="Current simulation tick")
    time: float = Field(description="Elapsed simulation time")
    speed: float = Field(description="Simulation speed")
    paused: bool = Field(description="Whether simulation is paused")
    node_count: int = Field(description="Number of nodes")
    message_count: int = Field(description="Number of injected messages")
    grid_cells: int = Field(description="Occupied grid cells in the current index")


class NodeResponse(BaseModel):
    """Response model for a node."""

    id: int = Field(description="Node ID")
    x: float = Field(description="X position")
    y: float = Field(description="Y position")
    range: float = Field(description="Communication range")
    cell: tuple[int, int] = Field(description="Grid cell (column, row)")
    carrying: list[str] = Field(description="Messages carried for other nodes")
    accepted: list[str] = Field(description="Messages received as destination")
    pending_merge: int = Field(description="Copies received this tick, not yet merged")
    neighbors: list[int] = Field(description="Neighbor ids as of the last query")
    tx_count: int = Field(description="Messages sent")
    rx_count: int = Field(description="Messages received")
    dup_count: int = Field(description="Duplicate receptions")


class StatsResponse(BaseModel):
    """Response model for run statistics."""

    tick: int
    time: float
    node_count: int
    injected: int = Field(description="Distinct messages injected")
    delivered: int = Field(description="Messages held by their destination")
    in_transit: int = Field(description="Messages still carried toward a destination")
    tx_count: int
    rx_count: int
    dup_count: int
    delivery_ratio: float = Field(description="delivered / injected")


class ControlCommandResponse(BaseModel):
    """Response for control commands."""

    success: bool = Field(description="Whether command succeeded")
    message: str = Field(description="Status message")


def _node_response(agent: CarryOnlyAgent) -> NodeResponse:
    x, y = agent.position
    return NodeResponse(
        id=agent.id,
        x=x,
        y=y,
        range=agent.range,
        cell=agent.cell(x, y),
        carrying=[m.encode() for m in sorted(agent.pending_messages())],
        accepted=[m.encode() for m in sorted(agent.accepted_messages())],
        pending_merge=sum(agent.pending_merge.values()),
        neighbors=[n.id for n in agent.last_neighbors],
        tx_count=agent.tx_count,
        rx_count=agent.rx_count,
        dup_count=agent.dup_count,
    )


# REST endpoints


@app.get("/api/world", response_model=WorldStateResponse, tags=["world"])
async def get_world() -> WorldStateResponse:
    """Get current world state summary."""
    sim = get_sim_state()
    speed = sim.speed
    paused = sim.paused

    def build(scheduler: Scheduler) -> WorldStateResponse:
        grid = scheduler.grid_index
        return WorldStateResponse(
            tick=scheduler.tick,
            time=scheduler.time,
            speed=speed,
            paused=paused,
            node_count=len(scheduler.agents),
            message_count=len(scheduler.messages),
            grid_cells=len(grid.cells()) if grid is not None else 0,
        )

    return sim.read(build)


@app.get("/api/nodes", response_model=list[NodeResponse], tags=["nodes"])
async def get_nodes() -> list[NodeResponse]:
    """Get list of all nodes."""
    return get_sim_state().read(
        lambda scheduler: [_node_response(agent) for agent in scheduler.agents]
    )


@app.get("/api/nodes/{node_id}", response_model=NodeResponse, tags=["nodes"])
async def get_node(node_id: int) -> NodeResponse:
    """Get a specific node by ID."""

    def build(scheduler: Scheduler) -> NodeResponse | None:
        agent = scheduler.find(node_id)
        return _node_response(agent) if agent is not None else None

    node = get_sim_state().read(build)
    if node is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Node '{node_id}' not found",
        )
    return node


@app.get("/api/stats", response_model=StatsResponse, tags=["world"])
async def get_stats() -> StatsResponse:
    """Get delivery statistics for the current run."""
    stats = get_sim_state().read(summarize)
    return StatsResponse(**stats.as_dict())


@app.post("/api/world/step", response_model=ControlCommandResponse, tags=["world"])
def step_world(ticks: int = 1) -> ControlCommandResponse:
    """Advance the simulation by a number of ticks.

    Args:
        ticks: Ticks to run (1-10000, default: 1).
    """
    if not 1 <= ticks <= 10000:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"ticks must be between 1 and 10000, got {ticks}",
        )
    sim = get_sim_state()
    handoffs = sum(sim.tick() for _ in range(ticks))
    return ControlCommandResponse(
        success=True,
        message=f"Advanced {ticks} tick(s), {handoffs} hand-off(s)",
    )


@app.post("/api/world/reset", response_model=ControlCommandResponse, tags=["world"])
async def reset_world() -> ControlCommandResponse:
    """Reset world to initial state."""
    get_sim_state().reset()
    logger.info("World reset to initial state")
    return ControlCommandResponse(success=True, message="World reset to initial state")


@app.post("/api/world/pause", response_model=ControlCommandResponse, tags=["world"])
async def pause_simulation() -> ControlCommandResponse:
    """Pause the simulation."""
    get_sim_state().paused = True
    return ControlCommandResponse(success=True, message="Simulation paused")


@app.post("/api/world/play", response_model=ControlCommandResponse, tags=["world"])
async def play_simulation() -> ControlCommandResponse:
    """Resume the simulation."""
    get_sim_state().paused = False
    return ControlCommandResponse(success=True, message="Simulation playing")


@app.post("/api/world/speed", response_model=ControlCommandResponse, tags=["world"])
async def set_speed(speed: float = 1.0) -> ControlCommandResponse:
    """Set simulation speed multiplier (0.1-10.0)."""
    sim = get_sim_state()
    sim.speed = speed
    return ControlCommandResponse(success=True, message=f"Speed set to {sim.speed}")


@app.websocket("/ws/frames")
async def websocket_frames(websocket: WebSocket) -> None:
    """Stream projected frames.

    Sends a fresh snapshot when no tick has run yet.
    """
    await websocket.accept()
    sim = get_sim_state()
    logger.info("Frame client connected")

    try:
        while True:
            frame = sim.latest_frame or sim.snapshot()
            frame_data: dict[str, Any] = frame_to_dict(frame)
            await websocket.send_json(frame_data)
            await asyncio.sleep(FRAME_INTERVAL)
    except WebSocketDisconnect:
        logger.info("Frame client disconnected")
    except Exception as e:
        logger.error("Frame streaming error: %s", str(e))


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
