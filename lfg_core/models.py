import enum
from dataclasses import dataclass
from typing import Dict, List


class InstanceState(enum.Enum):
    EMPTY = "empty"    # 空闲，可分配给新队伍
    ACTIVE = "active"  # 有队伍正在副本中


class ManagerState(enum.Enum):
    RUNNING = "running"        # 仍可组队
    DRAINING = "draining"      # 无法再组队，等待副本中的队伍完成
    TERMINATED = "terminated"  # 无法组队且没有活动副本


@dataclass(frozen=True)
class PartyRecipe:
    """
    一支队伍的固定职业构成。
    """
    tanks: int = 1
    healers: int = 1
    dps: int = 3

    @property
    def size(self) -> int:
        return self.tanks + self.healers + self.dps


PARTY_RECIPE = PartyRecipe()


@dataclass
class Instance:
    instance_id: int
    active: bool = False

    # 统计相关（累计，单位：模拟秒）
    parties_served: int = 0
    total_time_served: int = 0


class InstanceRepository:
    """
    副本存储（内存版），编号从 1 开始，运行期间数量固定。
    """

    def __init__(self, instance_count: int):
        self.instances: Dict[int, Instance] = {}
        for i in range(1, instance_count + 1):
            self.instances[i] = Instance(instance_id=i)

    def get(self, instance_id: int) -> Instance:
        return self.instances[instance_id]

    def all(self) -> List[Instance]:
        return [self.instances[i] for i in sorted(self.instances.keys())]
