# Zentrale Datenbankmodelle für BuddyLifts
from .user import User
from .training import Exercise, Training
from .session import ExerciseProgress, SessionParticipant, TrainingSession
from .friend import Friend

__all__ = [
    "User",
    "Training",
    "Exercise",
    "TrainingSession",
    "SessionParticipant",
    "ExerciseProgress",
    "Friend",
]
