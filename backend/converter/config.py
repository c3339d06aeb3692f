from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Literal

RaiseAmounts = Literal["to", "increment"]

DEFAULT_EPSILON = Decimal("0.01")


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and ((value[0] == "'" and value[-1] == "'") or (value[0] == '"' and value[-1] == '"')):
        return value[1:-1]
    return value


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        env_key = key.strip()
        env_value = _strip_quotes(value.strip())
        if not env_key:
            continue

        # Shell/exported env vars win over file values.
        os.environ.setdefault(env_key, env_value)


def load_environment() -> None:
    backend_root = Path(__file__).resolve().parents[1]
    project_root = backend_root.parent

    _load_env_file(project_root / ".env")
    _load_env_file(backend_root / ".env")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ConverterSettings:
    rounding_epsilon: Decimal = DEFAULT_EPSILON
    raise_amounts: RaiseAmounts = "to"
    show_all_hole_cards: bool = False
    batch_workers: int = 1
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ConverterSettings":
        try:
            epsilon = Decimal(os.getenv("OHH_ROUNDING_EPSILON", str(DEFAULT_EPSILON)))
        except InvalidOperation as exc:
            raise ValueError("OHH_ROUNDING_EPSILON must be a decimal number.") from exc
        if epsilon < 0:
            raise ValueError("OHH_ROUNDING_EPSILON must not be negative.")

        raise_amounts = os.getenv("OHH_RAISE_AMOUNTS", "to").strip().lower()
        if raise_amounts not in {"to", "increment"}:
            raise ValueError("OHH_RAISE_AMOUNTS must be 'to' or 'increment'.")

        return cls(
            rounding_epsilon=epsilon,
            raise_amounts=raise_amounts,  # type: ignore[arg-type]
            show_all_hole_cards=_env_flag("OHH_SHOW_ALL_HOLE_CARDS", False),
            batch_workers=max(1, int(os.getenv("OHH_BATCH_WORKERS", "1"))),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )
