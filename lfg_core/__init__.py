from .models import InstanceState, ManagerState, PartyRecipe, PARTY_RECIPE, Instance
from .config import Config, ConfigError, ConfigLoader, MAX_CLEAR_TIME
from .timers import ClearTimer, TimerFactory
from .queues import RoleQueue
from .instances import InstancePool
from .runner import PartyRunner
from .records import PartyRecord
from .scheduler import QueueManager, DungeonQueueSystem, RunResult
from .reporter import Reporter
