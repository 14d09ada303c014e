import random
import time
from typing import Callable, Optional


class ClearTimer:
    """
    通关计时器：为单支队伍随机生成通关时间（秒，闭区间），并按时间倍率模拟等待。
    每个计时器持有独立的随机数生成器，线程之间不共享。
    """

    def __init__(
        self,
        min_time: int,
        max_time: int,
        seconds_per_unit: float = 1.0,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if seconds_per_unit < 0:
            raise ValueError("seconds_per_unit must not be negative")
        self.min_time = min_time
        self.max_time = max_time
        self.seconds_per_unit = seconds_per_unit
        self._rng = rng if rng is not None else random.Random()
        self._sleep = sleep

    def draw(self) -> int:
        return self._rng.randint(self.min_time, self.max_time)

    def wait(self, clear_time: int) -> None:
        self._sleep(clear_time * self.seconds_per_unit)


class TimerFactory:
    """
    为每支队伍创建计时器。种子来自进程级的种子源，只在管理线程中取用。
    """

    def __init__(
        self,
        min_time: int,
        max_time: int,
        seconds_per_unit: float = 1.0,
        seed: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if seconds_per_unit < 0:
            raise ValueError("seconds_per_unit must not be negative")
        self.min_time = min_time
        self.max_time = max_time
        self.seconds_per_unit = seconds_per_unit
        self._seed_source = random.Random(seed)
        self._sleep = sleep

    def create_timer(self) -> ClearTimer:
        return ClearTimer(
            self.min_time,
            self.max_time,
            seconds_per_unit=self.seconds_per_unit,
            rng=random.Random(self._seed_source.getrandbits(64)),
            sleep=self._sleep,
        )
