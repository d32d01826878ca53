"""Protocol data classes for WebSocket communication."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Literal
from enum import Enum

PROTOCOL_VERSION = "b1.0.0"


class MessageType(str, Enum):
    """WebSocket message types."""
    HELLO = "hello"
    NEW_GAME = "new_game"
    COMMAND = "command"
    STATE = "state"
    ACK = "ack"
    GAME_OVER = "game_over"
    ERROR = "error"


@dataclass
class HelloRequest:
    """Client hello message."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION


@dataclass
class HelloResponse:
    """Server hello response."""
    type: Literal["hello"] = "hello"
    version: str = PROTOCOL_VERSION
    server: str = "blockfall-py"


@dataclass
class NewGameRequest:
    """Request to create a game session."""
    difficulty: str = "medium"
    seed: Optional[int] = None
    randomizer: str = "uniform"  # "uniform" or "bag"
    type: Literal["new_game"] = "new_game"

    def __post_init__(self):
        if not isinstance(self.difficulty, str):
            raise ValueError(f"difficulty must be a string, got {self.difficulty!r}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ValueError(f"seed must be an integer, got {self.seed!r}")
        if not isinstance(self.randomizer, str):
            raise ValueError(f"randomizer must be a string, got {self.randomizer!r}")


@dataclass
class CommandRequest:
    """Request to apply a game command."""
    command: str  # moveLeft, moveRight, moveDown, rotate, hardDrop, pause, resume, start, reset
    type: Literal["command"] = "command"

    def __post_init__(self):
        if not isinstance(self.command, str):
            raise ValueError(f"command must be a string, got {self.command!r}")


@dataclass
class StateResponse:
    """Game state snapshot pushed after every change."""
    data: Dict[str, Any]  # Snapshot dict from GameSnapshot.to_dict()
    type: Literal["state"] = "state"


@dataclass
class AckResponse:
    """Result of a command."""
    command: str
    accepted: bool
    type: Literal["ack"] = "ack"


@dataclass
class GameOverResponse:
    """Final result of a game."""
    difficulty: str
    score: int
    level: int
    lines: int
    type: Literal["game_over"] = "game_over"


@dataclass
class ErrorResponse:
    """Error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    type: Literal["error"] = "error"


class ErrorCode:
    """Standard error codes."""
    INVALID_MESSAGE = "INVALID_MESSAGE"
    INVALID_COMMAND = "INVALID_COMMAND"
    INVALID_DIFFICULTY = "INVALID_DIFFICULTY"
    GAME_NOT_INITIALIZED = "GAME_NOT_INITIALIZED"


def parse_message(data: Dict[str, Any]) -> Any:
    """Parse incoming WebSocket message.

    Args:
        data: JSON message dict

    Returns:
        Parsed message object

    Raises:
        ValueError: If message type or fields are invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object")

    msg_type = data.get("type")

    try:
        if msg_type == MessageType.HELLO:
            return HelloRequest(**data)
        elif msg_type == MessageType.NEW_GAME:
            return NewGameRequest(**data)
        elif msg_type == MessageType.COMMAND:
            return CommandRequest(**data)
    except TypeError as e:
        raise ValueError(f"Invalid {msg_type} message: {e}")

    raise ValueError(f"Unknown message type: {msg_type}")


def to_dict(obj: Any) -> Dict[str, Any]:
    """Convert dataclass to dict for JSON serialization.

    Args:
        obj: Dataclass instance

    Returns:
        Dictionary representation
    """
    return asdict(obj)
