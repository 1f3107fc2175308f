from .audio import AudioOutput, AudioSynthesizer
from .config import DEFAULT_CONFIG, GameConfig
from .difficulty import DifficultyController
from .feedback import FeedbackFactory
from .field import NoteField
from .game import Game
from .mapping import compute_parameters
from .motion import MotionSensor

__all__ = [
    "AudioOutput",
    "AudioSynthesizer",
    "DEFAULT_CONFIG",
    "DifficultyController",
    "FeedbackFactory",
    "Game",
    "GameConfig",
    "MotionSensor",
    "NoteField",
    "compute_parameters",
]
