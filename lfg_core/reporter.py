from threading import Lock
from typing import Any, Dict, List, Optional, TextIO

from .config import Config
from .instances import InstancePool
from .models import InstanceState
from .queues import RoleQueue
from .records import PartyRecord

SEPARATOR = "==============================="


class Reporter:
    """
    展示对象：读取副本池和职业队列的快照，输出状态与最终汇总。
    队伍线程会并发调用回调，所有输出经过同一把锁，避免行交错。
    """

    def __init__(
        self,
        pool: InstancePool,
        role_queue: RoleQueue,
        records: Optional[PartyRecord] = None,
        out: Optional[TextIO] = None,
        show_events: bool = True,
    ):
        self.pool = pool
        self.role_queue = role_queue
        self.records = records
        self.out = out
        self.show_events = show_events
        self._print_lock = Lock()

    def _emit(self, text: str) -> None:
        with self._print_lock:
            print(text, file=self.out, flush=True)

    # ---------- 快照 ----------
    def status_snapshot(self) -> Dict[str, Any]:
        tanks, healers, dps = self.role_queue.snapshot()
        return {
            "instances": [
                {
                    "instance_id": instance_id,
                    "state": (InstanceState.ACTIVE if active else InstanceState.EMPTY).value,
                }
                for instance_id, active in self.pool.slot_states()
            ],
            "queue": {"tanks": tanks, "healers": healers, "dps": dps},
        }

    def summary_snapshot(self) -> Dict[str, Any]:
        instances: List[Dict[str, int]] = [
            {
                "instance_id": instance_id,
                "parties_served": parties_served,
                "total_time_served": total_time,
            }
            for instance_id, parties_served, total_time in self.pool.slot_stats()
        ]
        tanks, healers, dps = self.role_queue.snapshot()
        max_formable = self.role_queue.max_formable_parties()
        leftover_total = tanks + healers + dps
        if max_formable > 0:
            leftover_reason = "instances"
        elif leftover_total > 0:
            leftover_reason = "role_imbalance"
        else:
            leftover_reason = "none"

        summary = {
            "instances": instances,
            "total_parties": sum(i["parties_served"] for i in instances),
            "total_time": sum(i["total_time_served"] for i in instances),
            "leftover": {"tanks": tanks, "healers": healers, "dps": dps},
            "max_formable_parties": max_formable,
            "leftover_reason": leftover_reason,
        }
        if self.records is not None:
            summary["records"] = self.records.get_summary()
        return summary

    # ---------- 文本渲染 ----------
    @staticmethod
    def render_inputs(config: Config) -> str:
        return "\n".join([
            "",
            "Input Values:",
            f"Maximum number of concurrent instances (n): {config.max_instances}",
            f"Number of tank players in the queue (t): {config.tanks}",
            f"Number of healer players in the queue (h): {config.healers}",
            f"Number of DPS players in the queue (d): {config.dps}",
            f"Minimum time before an instance is finished (t1): {config.min_time}",
            f"Maximum time before an instance is finished (t2): {config.max_time}",
        ])

    def render_status(self, snapshot: Optional[Dict[str, Any]] = None) -> str:
        snapshot = snapshot or self.status_snapshot()
        lines = ["", "===== Current Instance Status ====="]
        for inst in snapshot["instances"]:
            lines.append(f"Instance {inst['instance_id']}: {inst['state']}")
        queue = snapshot["queue"]
        lines.extend([
            "",
            "Queue Status:",
            f"Tanks: {queue['tanks']}",
            f"Healers: {queue['healers']}",
            f"DPS: {queue['dps']}",
            SEPARATOR,
        ])
        return "\n".join(lines)

    def render_summary(self, snapshot: Optional[Dict[str, Any]] = None) -> str:
        snapshot = snapshot or self.summary_snapshot()
        lines = ["", "===== Instance Summary ====="]
        for inst in snapshot["instances"]:
            lines.append(f"Instance {inst['instance_id']}:")
            lines.append(f"  Parties served: {inst['parties_served']}")
            lines.append(f"  Total time served: {inst['total_time_served']} seconds")

        lines.extend([
            "",
            "Overall Summary:",
            f"  Total parties served: {snapshot['total_parties']}",
            f"  Total time served across all instances: {snapshot['total_time']} seconds",
        ])

        leftover = snapshot["leftover"]
        lines.extend([
            "",
            "Leftover Players:",
            f"  Tanks: {leftover['tanks']}",
            f"  Healers: {leftover['healers']}",
            f"  DPS: {leftover['dps']}",
        ])
        reason = snapshot["leftover_reason"]
        if reason == "instances":
            lines.append(f"  Note: {snapshot['max_formable_parties']} more parties could have been formed,")
            lines.append("        but there weren't enough instances available.")
        elif reason == "role_imbalance":
            lines.append("  These players couldn't form complete parties due to role imbalance.")
        else:
            lines.append("  No leftover players - all players were assigned to parties.")

        records = snapshot.get("records")
        if records is not None:
            lines.append("")
            lines.append(f"Party records: {records['completed_parties']} completed")
        lines.append(SEPARATOR)
        return "\n".join(lines)

    # ---------- 输出 ----------
    def show_inputs(self, config: Config) -> None:
        self._emit(self.render_inputs(config))

    def show_status(self) -> None:
        self._emit(self.render_status())

    def show_summary(self) -> None:
        self._emit(self.render_summary())

    def party_entered(self, instance_id: int, clear_time: int) -> None:
        if not self.show_events:
            return
        # 事件行与状态在同一次输出中，保证连续
        self._emit(f"\n> Party entering Instance {instance_id}\n{self.render_status()}")

    def party_completed(self, instance_id: int, clear_time: int) -> None:
        if not self.show_events:
            return
        self._emit(
            f"\n> Party completed Instance {instance_id} in {clear_time} seconds\n{self.render_status()}"
        )
