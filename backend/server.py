import asyncio
import logging
import sys
import os

# Add current directory to path so we can import backend modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError, confloat, conint

from config import CONFIG, load_config
from economy import WorldEconomy
from randomness import RandomSource

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="MacroSim Backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_PLAYER = CONFIG.player

# ---------- Request Models ----------

class SetupRequest(BaseModel):
    seed: Optional[int] = None
    term_length: Optional[confloat(gt=0)] = None
    country: Optional[str] = None

class SpeedRequest(BaseModel):
    speed: confloat(gt=0)

class PlayerRequest(BaseModel):
    country: str

class ControlsRequest(BaseModel):
    rate_override_bps: Optional[conint(ge=-_PLAYER.max_rate_override_bps, le=_PLAYER.max_rate_override_bps)] = None
    fiscal_balance: Optional[confloat(ge=_PLAYER.min_fiscal_balance, le=_PLAYER.max_fiscal_balance)] = None
    tariff_level: Optional[confloat(ge=_PLAYER.min_tariff_level, le=_PLAYER.max_tariff_level)] = None


class SimulationManager:
    def __init__(self):
        self.economy: Optional[WorldEconomy] = None
        self.active_websocket: Optional[WebSocket] = None
        self.loop_task: Optional[asyncio.Task] = None

    def initialize(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}
        request = SetupRequest(**config)

        sim_config = load_config()
        if request.term_length is not None:
            sim_config.outcome.term_length = request.term_length
        seed = request.seed if request.seed is not None else sim_config.seed

        logger.info(f"Initializing world economy (seed={seed}, term={sim_config.outcome.term_length} days)")
        self.economy = WorldEconomy(config=sim_config, rng=RandomSource(seed))
        if request.country is not None and not self.economy.select_player_country(request.country):
            raise ValueError(f"Unknown country: {request.country}")
        logger.info("World economy initialized")

    def require_economy(self) -> WorldEconomy:
        if self.economy is None:
            self.initialize()
        return self.economy

    def apply_controls(self, controls: ControlsRequest) -> Dict[str, float]:
        economy = self.require_economy()
        if economy.player_country is None:
            raise ValueError("Select a player country before changing policy")
        economy.apply_policy({
            "rate_override": controls.rate_override_bps / 100 if controls.rate_override_bps is not None else None,
            "fiscal_balance": round(controls.fiscal_balance, 1) if controls.fiscal_balance is not None else None,
            "tariff_level": controls.tariff_level,
        })
        return economy.player_controls.to_dict()

    def build_state(self, include_history: bool = True) -> Dict[str, Any]:
        """Snapshot for clients; the outcome is handed out exactly once."""
        economy = self.require_economy()
        state = economy.snapshot(include_history=include_history)
        outcome = economy.pop_outcome()
        state["outcome"] = outcome.to_dict() if outcome is not None else None
        return state

    async def run_loop(self):
        if not self.economy:
            logger.warning("Attempted to run loop without economy. Waiting for SETUP.")
            return

        logger.info("Starting simulation loop")
        loop = asyncio.get_event_loop()
        try:
            while self.economy.running and self.active_websocket:
                self.economy.clock.advance_to(loop.time())
                await self.active_websocket.send_json({"type": "STATE", "state": self.build_state()})
                await asyncio.sleep(CONFIG.server.frame_interval)

            # Flush the final frame so a terminal outcome reaches the client
            if self.active_websocket and self.economy.is_finished:
                await self.active_websocket.send_json({"type": "STATE", "state": self.build_state()})
        except Exception as e:
            logger.error(f"Simulation loop error: {e}")
            self.economy.pause()
            if self.active_websocket:
                await self.active_websocket.send_json({"error": str(e)})

    def ensure_loop(self):
        if self.loop_task is None or self.loop_task.done():
            self.loop_task = asyncio.create_task(self.run_loop())


manager = SimulationManager()

# ---------- REST Endpoints ----------

@app.get("/state")
async def get_state(history: bool = True):
    return manager.build_state(include_history=history)

@app.get("/countries")
async def get_countries():
    economy = manager.require_economy()
    return {name: c.to_dict() for name, c in economy.countries.items()}

@app.get("/history/{country}")
async def get_history(country: str):
    economy = manager.require_economy()
    if country not in economy.countries:
        raise HTTPException(status_code=404, detail=f"Unknown country: {country}")
    return economy.history.to_dict(country)

@app.post("/setup")
async def setup(req: SetupRequest):
    try:
        manager.initialize(req.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"type": "SETUP_COMPLETE"}

@app.post("/start")
async def start():
    economy = manager.require_economy()
    if not economy.start():
        raise HTTPException(status_code=400, detail="Simulation has ended. Reset to play again.")
    return {"running": economy.running}

@app.post("/pause")
async def pause():
    economy = manager.require_economy()
    economy.pause()
    return {"running": economy.running}

@app.post("/reset")
async def reset():
    economy = manager.require_economy()
    economy.reset()
    return {"type": "RESET", "time": economy.time}

@app.post("/speed")
async def set_speed(req: SpeedRequest):
    economy = manager.require_economy()
    return {"speed": economy.set_speed(req.speed)}

@app.post("/player")
async def select_player(req: PlayerRequest):
    economy = manager.require_economy()
    if not economy.select_player_country(req.country):
        raise HTTPException(status_code=404, detail=f"Unknown country: {req.country}")
    return {"player_country": economy.player_country, "controls": economy.player_controls.to_dict()}

@app.post("/controls")
async def set_controls(req: ControlsRequest):
    try:
        return manager.apply_controls(req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ---------- WebSocket ----------

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    manager.active_websocket = websocket
    logger.info("WebSocket connected")

    try:
        while True:
            data = await websocket.receive_json()
            command = data.get("command")

            try:
                if command == "SETUP":
                    manager.initialize(data.get("config", {}))
                    await websocket.send_json({"type": "SETUP_COMPLETE"})
                elif command == "START":
                    economy = manager.require_economy()
                    if economy.start():
                        manager.ensure_loop()
                    else:
                        await websocket.send_json({"error": "Simulation has ended. Reset to play again."})
                elif command == "PAUSE":
                    manager.require_economy().pause()
                elif command == "RESET":
                    economy = manager.require_economy()
                    economy.reset()
                    await websocket.send_json({"type": "RESET", "time": economy.time})
                elif command == "SPEED":
                    speed = manager.require_economy().set_speed(SpeedRequest(**data).speed)
                    await websocket.send_json({"type": "SPEED", "speed": speed})
                elif command == "SELECT_COUNTRY":
                    economy = manager.require_economy()
                    if economy.select_player_country(data.get("country", "")):
                        await websocket.send_json({"type": "PLAYER", "player_country": economy.player_country})
                    else:
                        await websocket.send_json({"error": f"Unknown country: {data.get('country')}"})
                elif command == "CONTROLS":
                    controls = manager.apply_controls(ControlsRequest(**data.get("controls", {})))
                    await websocket.send_json({"type": "CONTROLS", "controls": controls})
                elif command == "STATE":
                    await websocket.send_json({"type": "STATE", "state": manager.build_state()})
                else:
                    await websocket.send_json({"error": f"Unknown command: {command}"})
            except (ValidationError, ValueError) as e:
                await websocket.send_json({"error": str(e)})

    except WebSocketDisconnect:
        if manager.economy:
            manager.economy.pause()
        manager.active_websocket = None
        logger.info("Client disconnected")


if __name__ == "__main__":
    import uvicorn

    settings = load_config().server
    uvicorn.run(app, host=settings.host, port=settings.port)
