from threading import Lock
from typing import Tuple

from .models import PARTY_RECIPE, PartyRecipe


class RoleQueue:
    """
    职业队列：维护坦克、治疗、输出三类玩家的剩余数量。
    检查与扣减在同一把锁内完成，任何调用方都看不到中间状态。
    """

    def __init__(self, tanks: int, healers: int, dps: int, recipe: PartyRecipe = PARTY_RECIPE):
        if min(tanks, healers, dps) < 0:
            raise ValueError("role counts must not be negative")
        self.recipe = recipe
        self._tanks = tanks
        self._healers = healers
        self._dps = dps
        self._lock = Lock()

    def _can_form(self) -> bool:
        # 调用方需持有 self._lock
        return (
            self._tanks >= self.recipe.tanks
            and self._healers >= self.recipe.healers
            and self._dps >= self.recipe.dps
        )

    def try_form_party(self) -> bool:
        """
        人数足够时原子地扣除一支队伍的玩家并返回 True，否则返回 False 且计数不变。
        """
        with self._lock:
            if not self._can_form():
                return False
            self._tanks -= self.recipe.tanks
            self._healers -= self.recipe.healers
            self._dps -= self.recipe.dps
            return True

    def can_form_party(self) -> bool:
        with self._lock:
            return self._can_form()

    def snapshot(self) -> Tuple[int, int, int]:
        with self._lock:
            return self._tanks, self._healers, self._dps

    def max_formable_parties(self) -> int:
        """
        按当前剩余人数最多还能组成的队伍数，仅用于统计展示。
        """
        with self._lock:
            return min(
                self._tanks // self.recipe.tanks,
                self._healers // self.recipe.healers,
                self._dps // self.recipe.dps,
            )

    def total_remaining(self) -> int:
        with self._lock:
            return self._tanks + self._healers + self._dps
