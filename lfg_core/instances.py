from threading import Condition, Lock
from typing import List, Optional, Tuple

from .models import Instance, InstanceRepository


class InstancePool:
    """
    副本池：固定数量的副本槽位。
    认领、释放和等待空闲槽位都基于同一把锁，等待使用该锁上的条件变量。
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.instances = InstanceRepository(capacity)
        self._lock = Lock()
        self._slot_freed = Condition(self._lock)

    def _has_idle(self) -> bool:
        # 调用方需持有 self._lock
        return any(not inst.active for inst in self.instances.all())

    def try_claim_idle_slot(self) -> Optional[int]:
        """
        按编号顺序找到第一个空闲副本并标记为活动，返回其编号；全部占用时返回 None。
        """
        with self._lock:
            for inst in self.instances.all():
                if not inst.active:
                    inst.active = True
                    return inst.instance_id
            return None

    def release(self, instance_id: int, elapsed: int) -> None:
        """
        队伍完成副本：置为空闲、累计统计，然后唤醒所有等待空闲槽位的线程。
        """
        with self._lock:
            if instance_id not in self.instances.instances:
                raise ValueError(f"unknown instance {instance_id}")
            inst = self.instances.get(instance_id)
            if not inst.active:
                raise ValueError(f"instance {instance_id} is not active")
            inst.active = False
            inst.parties_served += 1
            inst.total_time_served += elapsed
            self._slot_freed.notify_all()

    def await_idle_slot(self, timeout: Optional[float] = None) -> bool:
        """
        阻塞直到至少有一个空闲槽位。谓词在锁内检查，不会错过检查与等待之间的唤醒。
        返回是否存在空闲槽位（仅在超时的情况下可能为 False）。
        """
        with self._slot_freed:
            return self._slot_freed.wait_for(self._has_idle, timeout=timeout)

    def any_active(self) -> bool:
        with self._lock:
            return any(inst.active for inst in self.instances.all())

    def active_count(self) -> int:
        with self._lock:
            return sum(1 for inst in self.instances.all() if inst.active)

    def slot_states(self) -> List[Tuple[int, bool]]:
        with self._lock:
            return [(inst.instance_id, inst.active) for inst in self.instances.all()]

    def slot_stats(self) -> List[Tuple[int, int, int]]:
        with self._lock:
            return [
                (inst.instance_id, inst.parties_served, inst.total_time_served)
                for inst in self.instances.all()
            ]

    def all(self) -> List[Instance]:
        """
        返回副本状态的拷贝，调用方修改不会影响池内状态。
        """
        with self._lock:
            return [
                Instance(
                    instance_id=inst.instance_id,
                    active=inst.active,
                    parties_served=inst.parties_served,
                    total_time_served=inst.total_time_served,
                )
                for inst in self.instances.all()
            ]
