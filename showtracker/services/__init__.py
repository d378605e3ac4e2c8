from showtracker.services.change_recorder import ChangeRecorder
from showtracker.services.status_calculator import StatusCalculator
from showtracker.services.watch_status_engine import WatchStatusEngine
from showtracker.services.watch_status_service import WatchStatusService

__all__ = [
    "ChangeRecorder",
    "StatusCalculator",
    "WatchStatusEngine",
    "WatchStatusService",
]
