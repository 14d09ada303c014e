import time
from dataclasses import dataclass
from threading import Thread
from typing import Callable, List, Optional

from .config import Config
from .instances import InstancePool
from .models import ManagerState
from .queues import RoleQueue
from .records import PartyRecord
from .runner import PartyListener, PartyRunner
from .timers import TimerFactory

DEFAULT_POLL_INTERVAL = 0.1


@dataclass
class RunResult:
    parties_formed: int
    state: ManagerState


class QueueManager:
    """
    队列管理器：单一控制线程，反复尝试组队并分配副本，队伍在各自线程中运行。

    状态流转：
    - RUNNING：组队成功后认领副本，没有空闲副本时在副本池的条件变量上等待
    - DRAINING：已无法组队，但仍有副本在运行
    - TERMINATED：无法组队且没有活动副本，等待所有队伍线程结束后返回
    """

    def __init__(
        self,
        role_queue: RoleQueue,
        pool: InstancePool,
        timers: TimerFactory,
        records: Optional[PartyRecord] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.role_queue = role_queue
        self.pool = pool
        self.timers = timers
        self.records = records
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.state = ManagerState.RUNNING
        self.parties_formed = 0
        self.runners: List[PartyRunner] = []
        self._runner_threads: List[Thread] = []
        self._on_enter: List[PartyListener] = []
        self._on_complete: List[PartyListener] = []
        self._thread: Optional[Thread] = None
        self._result: Optional[RunResult] = None

    def add_listener(
        self,
        on_enter: Optional[PartyListener] = None,
        on_complete: Optional[PartyListener] = None,
    ) -> None:
        """
        注册展示回调，回调在队伍线程中执行，参数为 (instance_id, clear_time)。
        """
        if on_enter is not None:
            self._on_enter.append(on_enter)
        if on_complete is not None:
            self._on_complete.append(on_complete)

    # ---------- 控制循环 ----------
    def run(self) -> RunResult:
        self.state = ManagerState.RUNNING
        while self.state is not ManagerState.TERMINATED:
            self.step()
        self.join_runners()
        self._result = RunResult(parties_formed=self.parties_formed, state=self.state)
        return self._result

    def step(self) -> ManagerState:
        """
        执行一次循环迭代并返回新的状态。
        """
        if self.role_queue.try_form_party():
            # 玩家已被扣除，必须等到有副本可用，不会退回队列
            self.parties_formed += 1
            instance_id = self._claim_slot()
            self._launch(instance_id)
            self.state = ManagerState.RUNNING
            return self.state

        self._sleep(self.poll_interval)
        # 顺序不可调换：先检查能否组队，再检查是否有活动副本
        if self.role_queue.can_form_party():
            return self.state
        if self.pool.any_active():
            self.state = ManagerState.DRAINING
            return self.state
        if not self.role_queue.can_form_party():
            self.state = ManagerState.TERMINATED
        return self.state

    def _claim_slot(self) -> int:
        instance_id = self.pool.try_claim_idle_slot()
        while instance_id is None:
            self.pool.await_idle_slot()
            instance_id = self.pool.try_claim_idle_slot()
        return instance_id

    def _launch(self, instance_id: int) -> None:
        runner = PartyRunner(
            instance_id=instance_id,
            pool=self.pool,
            timer=self.timers.create_timer(),
            records=self.records,
            on_enter=self._on_enter,
            on_complete=self._on_complete,
        )
        thread = Thread(
            target=runner.run,
            name=f"party-{self.parties_formed}-instance-{instance_id}",
        )
        self.runners.append(runner)
        self._runner_threads.append(thread)
        thread.start()

    def join_runners(self) -> None:
        for thread in self._runner_threads:
            thread.join()

    # ---------- 后台运行 ----------
    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("queue manager already started")
        self._thread = Thread(target=self.run, name="queue-manager")
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> Optional[RunResult]:
        if self._thread is not None:
            self._thread.join(timeout)
        return self._result


class DungeonQueueSystem:
    """
    对外的系统封装：根据 Config 创建职业队列、副本池、详单和队列管理器。
    """

    def __init__(
        self,
        config: Config,
        seconds_per_unit: float = 1.0,
        seed: Optional[int] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        records: Optional[PartyRecord] = None,
    ):
        self.config = config
        self.role_queue = RoleQueue(config.tanks, config.healers, config.dps)
        self.pool = InstancePool(config.max_instances)
        self.records = records if records is not None else PartyRecord()
        self.timers = TimerFactory(
            config.min_time,
            config.max_time,
            seconds_per_unit=seconds_per_unit,
            seed=seed,
        )
        self.manager = QueueManager(
            role_queue=self.role_queue,
            pool=self.pool,
            timers=self.timers,
            records=self.records,
            poll_interval=poll_interval,
        )

    def run(self) -> RunResult:
        return self.manager.run()
