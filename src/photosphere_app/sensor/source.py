"""Sensor sample sources.

The capture core never talks to a platform sensor manager directly; it is
handed a :class:`SensorSource` that can register one listener per stream.
:class:`ReplaySensorSource` feeds recorded or synthetic samples, which is how
the command-line replay and the tests drive a session.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import csv
import math
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from loguru import logger

SampleListener = Callable[[Tuple[float, ...]], None]


class SampleKind(Enum):
    ROTATION = "rotation"
    ACCELERATION = "acceleration"


@dataclass(slots=True, frozen=True)
class SensorSample:
    """One raw reading from either sensor stream."""

    timestamp_sec: float
    kind: SampleKind
    values: Tuple[float, ...]


class SensorSource(Protocol):
    """Anything that can deliver rotation and acceleration samples."""

    def register(self, on_rotation: SampleListener, on_acceleration: SampleListener) -> None:
        ...

    def unregister(self) -> None:
        ...


class ReplaySensorSource:
    """Deliver a fixed sequence of samples in timestamp order."""

    def __init__(self, samples: Iterable[SensorSample]) -> None:
        self._samples: List[SensorSample] = sorted(samples, key=lambda item: item.timestamp_sec)
        self._on_rotation: Optional[SampleListener] = None
        self._on_acceleration: Optional[SampleListener] = None
        self._position = 0

    @property
    def registered(self) -> bool:
        return self._on_rotation is not None

    @property
    def remaining(self) -> int:
        return len(self._samples) - self._position

    def register(self, on_rotation: SampleListener, on_acceleration: SampleListener) -> None:
        self._on_rotation = on_rotation
        self._on_acceleration = on_acceleration

    def unregister(self) -> None:
        self._on_rotation = None
        self._on_acceleration = None

    def step(self) -> Optional[SensorSample]:
        """Deliver the next sample; returns ``None`` once exhausted or unregistered."""
        if not self.registered or self._position >= len(self._samples):
            return None
        sample = self._samples[self._position]
        self._position += 1
        if sample.kind is SampleKind.ROTATION and self._on_rotation is not None:
            self._on_rotation(sample.values)
        elif sample.kind is SampleKind.ACCELERATION and self._on_acceleration is not None:
            self._on_acceleration(sample.values)
        return sample

    def run(self, limit: Optional[int] = None) -> int:
        """Deliver samples until exhausted, unregistered or ``limit`` reached."""
        delivered = 0
        while limit is None or delivered < limit:
            if self.step() is None:
                break
            delivered += 1
        return delivered


_REQUIRED_COLUMNS = {"timestamp_sec", "kind", "x", "y", "z"}


def load_sensor_log(path: Path) -> List[SensorSample]:
    """Parse a CSV sensor log.

    Columns ``timestamp_sec, kind, x, y, z`` are required; ``w`` is optional
    and only meaningful for rotation rows. ``kind`` is ``rotation`` or
    ``acceleration``.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the header or any row is malformed.
    """
    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Sensor log does not exist: {resolved}")

    samples: List[SensorSample] = []
    with resolved.open("r", encoding="utf-8", newline="") as stream:
        reader = csv.DictReader(stream)
        header = set(reader.fieldnames or [])
        missing = sorted(_REQUIRED_COLUMNS - header)
        if missing:
            raise ValueError(f"{resolved.name} is missing required columns: {', '.join(missing)}")

        for line_no, row in enumerate(reader, start=2):
            raw_kind = (row.get("kind") or "").strip().lower()
            try:
                kind = SampleKind(raw_kind)
            except ValueError as exc:
                raise ValueError(f"{resolved.name}:{line_no} has unknown sample kind {raw_kind!r}") from exc

            values = [_to_float(row, key, resolved, line_no) for key in ("x", "y", "z")]
            w_raw = (row.get("w") or "").strip()
            if kind is SampleKind.ROTATION and w_raw:
                values.append(_to_float(row, "w", resolved, line_no))

            samples.append(
                SensorSample(
                    timestamp_sec=_to_float(row, "timestamp_sec", resolved, line_no),
                    kind=kind,
                    values=tuple(values),
                )
            )

    logger.info("Loaded {} sensor samples from {}", len(samples), resolved)
    return samples


def _to_float(row: dict[str, str], key: str, source: Path, line_no: int) -> float:
    raw = (row.get(key) or "").strip()
    if not raw:
        raise ValueError(f"{source.name}:{line_no} has empty value for {key}")
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{source.name}:{line_no} has invalid float for {key}: {raw}") from exc
    if not math.isfinite(value):
        raise ValueError(f"{source.name}:{line_no} has non-finite value for {key}: {raw}")
    return value
