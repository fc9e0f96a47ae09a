"""
Detector Registry — Runs every registered detector for one input, concurrently.

Detectors are pure functions (sync or async) of their input plus read-only
configuration. Each runs under its own timeout and all of them under the
assessment deadline. A detector that raises or times out contributes no
signals and is traced as unavailable; it never affects the others.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Union

from threatscope.core.errors import DetectorUnavailable
from threatscope.models.signal_models import DetectorStatus, DetectorTrace, Signal

logger = logging.getLogger("threatscope.detectors")

# Type for a detector: input -> signals (or an awaitable of signals)
DetectorFn = Callable[[Any], Union[Iterable[Signal], None, Awaitable[Union[Iterable[Signal], None]]]]


@dataclass
class DetectionResult:
    """Signals in registration order plus one trace entry per detector."""

    signals: list[Signal] = field(default_factory=list)
    traces: list[DetectorTrace] = field(default_factory=list)

    @property
    def unavailable(self) -> list[str]:
        return [t.detector for t in self.traces if t.status is DetectorStatus.UNAVAILABLE]


def _is_async(fn: Callable) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )


class DetectorRegistry:
    """
    Ordered collection of detectors for one input type.

    Registration order fixes the order of signals in the verdict, independent
    of which detector finishes first.
    """

    def __init__(
        self,
        detectors: dict[str, DetectorFn] | None = None,
        detector_timeout: float = 3.0,
    ) -> None:
        self.detectors: dict[str, DetectorFn] = dict(detectors or {})
        self.detector_timeout = detector_timeout

    def register(self, name: str, detector: DetectorFn) -> None:
        if name in self.detectors:
            raise ValueError(f"Detector already registered: {name}")
        self.detectors[name] = detector

    @property
    def names(self) -> list[str]:
        return list(self.detectors)

    async def _invoke(self, name: str, detector: DetectorFn, subject: Any) -> list[Signal]:
        if _is_async(detector):
            produced = await detector(subject)
        else:
            # Sync detectors run off the loop so a slow one cannot stall the others
            produced = await asyncio.to_thread(detector, subject)

        signals = list(produced or [])
        for s in signals:
            if not isinstance(s, Signal):
                raise TypeError(f"Detector '{name}' returned {type(s).__name__}, expected Signal")
        return [s if s.source else s.model_copy(update={"source": name}) for s in signals]

    async def _run_one(self, name: str, detector: DetectorFn, subject: Any) -> tuple[list[Signal], DetectorTrace]:
        start = time.monotonic()
        try:
            signals = await asyncio.wait_for(
                self._invoke(name, detector, subject), timeout=self.detector_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Detector '{name}' timed out after {self.detector_timeout}s")
            return [], DetectorTrace(
                detector=name,
                status=DetectorStatus.UNAVAILABLE,
                error=f"timed out after {self.detector_timeout}s",
            )
        except DetectorUnavailable as e:
            logger.info(f"Detector '{name}' unavailable: {e.reason}")
            return [], DetectorTrace(detector=name, status=DetectorStatus.UNAVAILABLE, error=e.reason)
        except Exception as e:
            # Detector failures must not abort the assessment
            logger.warning(f"Detector '{name}' failed: {type(e).__name__}: {e}")
            return [], DetectorTrace(
                detector=name,
                status=DetectorStatus.UNAVAILABLE,
                error=f"{type(e).__name__}: {e}",
            )

        elapsed = (time.monotonic() - start) * 1000
        logger.debug(f"Detector '{name}' produced {len(signals)} signals ({elapsed:.1f}ms)")
        return signals, DetectorTrace(
            detector=name, status=DetectorStatus.OK, signal_count=len(signals)
        )

    async def run(self, subject: Any, deadline: float | None = None) -> DetectionResult:
        """
        Run all detectors against one subject.

        Args:
            subject: The validated input.
            deadline: Seconds the whole fan-out may take. Detectors still
                pending when it expires are cancelled and traced unavailable.

        Returns:
            DetectionResult with signals in registration order.
        """
        tasks = {
            name: asyncio.create_task(self._run_one(name, fn, subject))
            for name, fn in self.detectors.items()
        }
        if not tasks:
            return DetectionResult()

        _, pending = await asyncio.wait(tasks.values(), timeout=deadline)
        for task in pending:
            task.cancel()
        if pending:
            # Let cancellations settle before building the result
            await asyncio.gather(*pending, return_exceptions=True)

        result = DetectionResult()
        for name, task in tasks.items():
            if task in pending:
                logger.warning(f"Detector '{name}' abandoned at assessment deadline ({deadline}s)")
                result.traces.append(
                    DetectorTrace(
                        detector=name,
                        status=DetectorStatus.UNAVAILABLE,
                        error=f"abandoned at deadline ({deadline}s)",
                    )
                )
                continue
            signals, trace = task.result()
            result.signals.extend(signals)
            result.traces.append(trace)
        return result
