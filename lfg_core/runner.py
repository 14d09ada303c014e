from datetime import datetime
from typing import Callable, List, Optional

from .instances import InstancePool
from .records import PartyRecord
from .timers import ClearTimer

PartyListener = Callable[[int, int], None]


class PartyRunner:
    """
    副本运行对象：负责一支已分配副本的队伍从进入到通关的全过程，不做组队与调度。
    无论回调或详单是否出错，副本槽位都只释放一次。
    """

    def __init__(
        self,
        instance_id: int,
        pool: InstancePool,
        timer: ClearTimer,
        records: Optional[PartyRecord] = None,
        on_enter: Optional[List[PartyListener]] = None,
        on_complete: Optional[List[PartyListener]] = None,
    ):
        self.instance_id = instance_id
        self.pool = pool
        self.timer = timer
        self.records = records
        self.on_enter = list(on_enter or [])
        self.on_complete = list(on_complete or [])
        self.clear_time: Optional[int] = None
        self.record_id: Optional[int] = None

    def run(self) -> None:
        clear_time = self.timer.draw()
        self.clear_time = clear_time
        try:
            self._open_record(clear_time)
            try:
                for listener in self.on_enter:
                    listener(self.instance_id, clear_time)
                # 模拟通关过程，此时不持有任何共享锁
                self.timer.wait(clear_time)
            finally:
                # 详单先于槽位释放结束，回调出错时同样补上结束时间
                self._close_record()
        finally:
            self.pool.release(self.instance_id, clear_time)
        for listener in self.on_complete:
            listener(self.instance_id, clear_time)

    def _open_record(self, clear_time: int) -> None:
        if self.records is None:
            return
        try:
            self.record_id = self.records.create_record(
                instance_id=self.instance_id,
                clear_time=clear_time,
                start_time=self._now_str(),
            )
        except Exception as e:
            # 详单失败不影响队伍通关
            print(f"Error creating record for instance {self.instance_id}: {e}")

    def _close_record(self) -> None:
        if self.records is None or self.record_id is None:
            return
        try:
            self.records.complete_record(self.record_id, end_time=self._now_str())
        except Exception as e:
            print(f"Error completing record {self.record_id} for instance {self.instance_id}: {e}")

    @staticmethod
    def _now_str() -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
