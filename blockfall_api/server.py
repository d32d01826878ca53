"""FastAPI WebSocket server for Blockfall."""

import json
import asyncio
import logging
from dataclasses import asdict
from typing import Any, Callable, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from blockfall_core.config import EngineConfig, ServerSettings
from blockfall_core.difficulty import Difficulty, parse_difficulty
from blockfall_core.game import Game, GameSnapshot, GameSummary
from blockfall_core.scheduler import AsyncioDropScheduler
from blockfall_core.scores import ScoreStore
from blockfall_api.protocol import (
    HelloRequest,
    HelloResponse,
    NewGameRequest,
    CommandRequest,
    StateResponse,
    AckResponse,
    GameOverResponse,
    ErrorResponse,
    ErrorCode,
    parse_message,
    to_dict,
)

settings = ServerSettings.from_env()

app = FastAPI(title="Blockfall API", version="0.1.0")
app.state.score_store = ScoreStore(settings.scores_path)

# Enable CORS for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GameSession:
    """Manages the game of a single WebSocket connection.

    Engine listeners run synchronously inside game operations, so they only
    enqueue messages; a sender task writes them to the socket in order.
    """

    def __init__(self, websocket: WebSocket, score_store: ScoreStore):
        self.websocket = websocket
        self.score_store = score_store
        self.game: Optional[Game] = None
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.sender_task: Optional[asyncio.Task] = None
        self._unsubscribe: List[Callable[[], None]] = []

    def start_sender(self) -> None:
        self.sender_task = asyncio.create_task(self._send_loop())

    async def _send_loop(self) -> None:
        while True:
            message = await self.outbox.get()
            try:
                await self.websocket.send_text(json.dumps(message))
            except Exception as e:
                # Client is gone; the receive loop handles the disconnect
                logger.warning(f"[Session] Send failed, stopping sender: {e}")
                return

    def send(self, message: Any) -> None:
        """Queue a protocol dataclass for delivery."""
        self.outbox.put_nowait(to_dict(message))

    def new_game(
        self, difficulty: str, seed: Optional[int] = None, randomizer: str = "uniform"
    ) -> Game:
        """Replace the current game with a fresh one.

        Raises:
            ValueError: If difficulty or randomizer is unknown
        """
        game = Game(
            difficulty,
            config=EngineConfig(randomizer=randomizer),
            scheduler=AsyncioDropScheduler(),
            seed=seed,
        )
        self.close_game()
        self.game = game
        self._unsubscribe = [
            game.on_state_change(self._on_state_change),
            game.on_game_over(self._on_game_over),
        ]
        logger.info(f"[Session] New game: difficulty={game.difficulty.value}, seed={seed}")
        self.send(StateResponse(data=game.snapshot().to_dict()))
        return game

    def command(self, command: str) -> bool:
        """Apply a command to the current game.

        Raises:
            ValueError: If the command is unknown
        """
        accepted = self.game.execute(command)
        self.send(AckResponse(command=command, accepted=accepted))
        return accepted

    def _on_state_change(self, snapshot: GameSnapshot) -> None:
        self.send(StateResponse(data=snapshot.to_dict()))

    def _on_game_over(self, summary: GameSummary) -> None:
        self.score_store.record(summary)
        self.send(
            GameOverResponse(
                difficulty=summary.difficulty.value,
                score=summary.score,
                level=summary.level,
                lines=summary.lines,
            )
        )

    def close_game(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self.game is not None:
            self.game.close()
            self.game = None

    def close(self) -> None:
        """Release the game timer and the sender task."""
        self.close_game()
        if self.sender_task and not self.sender_task.done():
            self.sender_task.cancel()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "blockfall-api", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/scores")
async def all_scores():
    """High scores for every difficulty."""
    table = app.state.score_store.get_all()
    return {key: [asdict(e) for e in entries] for key, entries in table.items()}


@app.get("/scores/{difficulty}")
async def difficulty_scores(difficulty: str):
    """High scores for one difficulty."""
    try:
        entries = app.state.score_store.get_scores(difficulty)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [asdict(e) for e in entries]


@app.delete("/scores")
async def clear_scores():
    """Remove all high scores."""
    app.state.score_store.clear()
    return {"status": "cleared"}


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for game communication."""
    await websocket.accept()
    session = GameSession(websocket, app.state.score_store)
    session.start_sender()

    try:
        while True:
            # Receive message
            data = await websocket.receive_text()

            try:
                message_dict = json.loads(data)
                message = parse_message(message_dict)

                if isinstance(message, HelloRequest):
                    session.send(HelloResponse())

                elif isinstance(message, NewGameRequest):
                    try:
                        parse_difficulty(message.difficulty)
                    except ValueError as e:
                        session.send(
                            ErrorResponse(
                                code=ErrorCode.INVALID_DIFFICULTY,
                                message=str(e),
                                details={"valid": [d.value for d in Difficulty]},
                            )
                        )
                        continue
                    session.new_game(message.difficulty, message.seed, message.randomizer)

                elif isinstance(message, CommandRequest):
                    if session.game is None:
                        session.send(
                            ErrorResponse(
                                code=ErrorCode.GAME_NOT_INITIALIZED,
                                message="Game not initialized. Send new_game first.",
                            )
                        )
                        continue
                    try:
                        session.command(message.command)
                    except ValueError as e:
                        session.send(ErrorResponse(code=ErrorCode.INVALID_COMMAND, message=str(e)))

            except json.JSONDecodeError as e:
                session.send(
                    ErrorResponse(code=ErrorCode.INVALID_MESSAGE, message=f"Invalid JSON: {str(e)}")
                )

            except ValueError as e:
                session.send(ErrorResponse(code=ErrorCode.INVALID_MESSAGE, message=str(e)))

    except WebSocketDisconnect:
        logger.info("[WS] Client disconnected")
    finally:
        session.close()


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
