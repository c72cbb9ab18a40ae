"""Work unit results and the default statistics snapshot."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Any, Optional, Sequence
from hdrh.histogram import HdrHistogram


class TxStatusCode(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class TxResult:
    """Outcome of one submitted transaction."""
    tx_id: str
    status: TxStatusCode = TxStatusCode.SUCCESS
    create_time: float = field(default_factory=time.time)
    final_time: float = 0.0
    error: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.status == TxStatusCode.SUCCESS

    @property
    def delay(self) -> float:
        """Seconds from creation to final status."""
        return max(0.0, self.final_time - self.create_time)

    def mark_success(self, final_time: Optional[float] = None) -> "TxResult":
        self.status = TxStatusCode.SUCCESS
        self.final_time = final_time if final_time is not None else time.time()
        return self

    def mark_failed(self, error: Any, final_time: Optional[float] = None) -> "TxResult":
        self.status = TxStatusCode.FAILED
        self.error = str(error)
        self.final_time = final_time if final_time is not None else time.time()
        return self


@dataclass
class TxStats:
    """Aggregate over a batch of TxResults.

    Times are epoch seconds. Creation bounds cover every result; final time
    and delay fields cover committed results only. ``histogram_data`` holds a
    base64 encoded HdrHistogram of commit delays in microseconds so merged
    snapshots keep exact percentile accuracy.
    """
    succ: int = 0
    fail: int = 0
    create_min: float = 0.0
    create_max: float = 0.0
    final_min: float = 0.0
    final_max: float = 0.0
    final_last: float = 0.0
    delay_min: float = 0.0
    delay_max: float = 0.0
    delay_sum: float = 0.0
    histogram_data: Optional[str] = None
    # Raw per-result delays, only kept for detailed snapshots
    delays: List[float] = field(default_factory=list)

    HIGHEST_TRACKABLE_MICROS = 60 * 60 * 1_000_000  # 1 hour

    @property
    def length(self) -> int:
        return self.succ + self.fail

    @property
    def avg_delay(self) -> float:
        return self.delay_sum / self.succ if self.succ else 0.0

    @property
    def throughput(self) -> float:
        """Committed results per second over the batch's time window."""
        if not self.succ:
            return 0.0
        window = self.final_max - self.create_min
        return self.succ / window if window > 0 else float(self.succ)

    def delay_percentile(self, percentile: float) -> float:
        """Commit delay at the given percentile in seconds."""
        histogram = self._histogram()
        if histogram is None or histogram.get_total_count() == 0:
            return 0.0
        return histogram.get_value_at_percentile(percentile) / 1_000_000

    def _histogram(self) -> Optional[HdrHistogram]:
        if not self.histogram_data:
            return None
        return HdrHistogram.decode(self.histogram_data.encode('ascii'))

    @classmethod
    def null(cls) -> "TxStats":
        """Snapshot standing for a tick or run without accepted results."""
        return cls()

    @classmethod
    def from_results(cls, results: Sequence[TxResult], detailed: bool = False) -> "TxStats":
        stats = cls()
        if not results:
            return stats

        histogram = HdrHistogram(1, cls.HIGHEST_TRACKABLE_MICROS, 3)
        creates = [r.create_time for r in results]
        stats.create_min = min(creates)
        stats.create_max = max(creates)

        committed = [r for r in results if r.committed]
        stats.succ = len(committed)
        stats.fail = len(results) - stats.succ
        if committed:
            finals = [r.final_time for r in committed]
            delays = [r.delay for r in committed]
            stats.final_min = min(finals)
            stats.final_max = max(finals)
            stats.final_last = finals[-1]
            stats.delay_min = min(delays)
            stats.delay_max = max(delays)
            stats.delay_sum = sum(delays)
            for delay in delays:
                histogram.record_value(min(cls.HIGHEST_TRACKABLE_MICROS, max(1, int(delay * 1_000_000))))
            stats.histogram_data = histogram.encode().decode('ascii')
            if detailed:
                stats.delays = delays
        return stats

    @classmethod
    def merge(cls, snapshots: Sequence["TxStats"]) -> "TxStats":
        """Combine chronologically ordered snapshots into one."""
        merged = cls()
        for snapshot in snapshots:
            merged = merged._combine(snapshot)
        return merged

    def _combine(self, later: "TxStats") -> "TxStats":
        out = TxStats(succ=self.succ + later.succ, fail=self.fail + later.fail)

        sides = [s for s in (self, later) if s.length]
        if sides:
            out.create_min = min(s.create_min for s in sides)
            out.create_max = max(s.create_max for s in sides)

        committed = [s for s in (self, later) if s.succ]
        if committed:
            out.final_min = min(s.final_min for s in committed)
            out.final_max = max(s.final_max for s in committed)
            out.final_last = committed[-1].final_last
            out.delay_min = min(s.delay_min for s in committed)
            out.delay_max = max(s.delay_max for s in committed)
            out.delay_sum = self.delay_sum + later.delay_sum

        histograms = [h for h in (self._histogram(), later._histogram()) if h is not None]
        if histograms:
            combined = histograms[0]
            for other in histograms[1:]:
                combined.add(other)
            out.histogram_data = combined.encode().decode('ascii')

        out.delays = self.delays + later.delays
        return out
