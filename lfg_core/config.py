import os
from dataclasses import dataclass
from typing import Callable, Dict, Optional, TextIO

MAX_CLEAR_TIME = 15


@dataclass(eq=False)
class ConfigError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class Config:
    """
    一次运行的全部输入，构造后不可修改。
    """
    max_instances: int
    tanks: int
    healers: int
    dps: int
    min_time: int
    max_time: int

    def __post_init__(self):
        for name in ("max_instances", "tanks", "healers", "dps", "min_time", "max_time"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be greater than 0")
        if self.min_time >= self.max_time:
            raise ConfigError("min_time must be less than max_time")
        if self.max_time > MAX_CLEAR_TIME:
            raise ConfigError(f"max_time must not exceed {MAX_CLEAR_TIME}")


# 配置文件键 -> (Config 字段, 交互提示, 错误提示)
CONFIG_KEYS = [
    ("max-num-instances", "max_instances",
     "Enter maximum number of concurrent instances (n, must be > 0): ",
     "Error: n must be greater than 0."),
    ("num-tank", "tanks",
     "Enter number of tank players in the queue (t, must be > 0): ",
     "Error: t must be greater than 0."),
    ("num-healer", "healers",
     "Enter number of healer players in the queue (h, must be > 0): ",
     "Error: h must be greater than 0."),
    ("num-dps", "dps",
     "Enter number of DPS players in the queue (d, must be > 0): ",
     "Error: d must be greater than 0."),
    ("min-time", "min_time",
     "Enter minimum time before an instance is finished (t1, must be > 0): ",
     f"Error: t1 must be greater than 0 and less than {MAX_CLEAR_TIME}."),
    ("max-time", "max_time",
     "Enter maximum time before an instance is finished (t2, must be > t1): ",
     "Error: t2 must be greater than t1 ({min_time})."),
]


class ConfigLoader:
    """
    配置加载：先读取 key value 格式的配置文件，缺失或无效的值再通过交互输入补齐。
    - 无效值（非整数、<= 0）视为缺失并给出警告
    - min-time >= max-time 时丢弃 max-time
    - max-time 超过 15 时截断为 15
    """

    def __init__(
        self,
        path: str = "config.txt",
        input_fn: Optional[Callable[[str], str]] = None,
        out: Optional[TextIO] = None,
    ):
        self.path = path
        self.input_fn = input_fn
        self.out = out

    def _warn(self, message: str) -> None:
        print(f"[WARN] {message}", file=self.out)

    def read_file(self) -> Dict[str, int]:
        """
        读取配置文件，只返回有效的值（字段名 -> 值）。
        """
        values: Dict[str, int] = {}
        if not os.path.exists(self.path):
            self._warn(f"Could not open config file {self.path}, all values will be prompted for.")
            return values

        fields = {key: field for key, field, _, _ in CONFIG_KEYS}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            self._warn(f"Could not read config file {self.path} ({e}), all values will be prompted for.")
            return values

        for line in lines:
            parts = line.split()
            if not parts or parts[0] not in fields:
                continue
            key = parts[0]
            try:
                value = int(parts[1])
            except (IndexError, ValueError):
                self._warn(f"Invalid value for {key} in config file. Must be an integer > 0.")
                values.pop(fields[key], None)
                continue
            if value <= 0:
                self._warn(f"Invalid value for {key} in config file. Must be > 0.")
                values.pop(fields[key], None)
                continue
            values[fields[key]] = value

        min_time = values.get("min_time")
        if min_time is not None and min_time >= MAX_CLEAR_TIME:
            self._warn(f"min-time must be less than {MAX_CLEAR_TIME} in config file.")
            values.pop("min_time")
            min_time = None
        max_time = values.get("max_time")
        if min_time is not None and max_time is not None and min_time >= max_time:
            self._warn("min-time must be less than max-time in config file.")
            values.pop("max_time")
        return values

    def _prompt_int(self, prompt: str, error: str, accept: Callable[[int], bool]) -> int:
        while True:
            try:
                raw = (self.input_fn or input)(prompt)
            except EOFError:
                raise ConfigError("input ended before all configuration values were provided")
            try:
                value = int(raw.strip())
            except ValueError:
                value = None
            if value is not None and accept(value):
                return value
            print(error, file=self.out)

    def load(self) -> Config:
        values = self.read_file()

        for _, field, prompt, error in CONFIG_KEYS:
            if field == "max_time":
                min_time = values["min_time"]
                current = values.get("max_time")
                if current is not None and current <= min_time:
                    values.pop("max_time")
                if "max_time" not in values:
                    values["max_time"] = self._prompt_int(
                        prompt, error.format(min_time=min_time), lambda v: v > min_time
                    )
                continue
            if field in values:
                continue
            if field == "min_time":
                values[field] = self._prompt_int(prompt, error, lambda v: 0 < v < MAX_CLEAR_TIME)
            else:
                values[field] = self._prompt_int(prompt, error, lambda v: v > 0)

        if values["max_time"] > MAX_CLEAR_TIME:
            self._warn(
                f"t2 exceeds maximum allowed value ({MAX_CLEAR_TIME}). Setting t2 to {MAX_CLEAR_TIME}."
            )
            values["max_time"] = MAX_CLEAR_TIME

        return Config(**values)
