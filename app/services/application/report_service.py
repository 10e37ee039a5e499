"""
Misting Report Service
======================

Daily, monthly and yearly summaries of misting sessions, the livestock
comfort index and CSV export. Aggregation is done with pandas over the
sessions that started inside the requested (local-time) period.
"""
from __future__ import annotations

import io
import logging
import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Iterable, Optional, TYPE_CHECKING

import pandas as pd

from app.domain.misting import MistingSession
from app.enums import PumpMode, ReportType
from app.schemas.reports import ReportQuery
from app.utils.psychrometrics import heat_stress_zone

if TYPE_CHECKING:
    from infrastructure.database.repositories.misting import MistingLogRepository

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_COLUMNS = [
    "id",
    "started_at",
    "ended_at",
    "mode",
    "start_temperature",
    "start_humidity",
    "start_heat_index",
    "start_water_level",
    "end_temperature",
    "end_water_level",
    "duration_min",
]
_NUMERIC = [c for c in _COLUMNS if c.startswith(("start_", "end_")) or c == "duration_min"]


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def _local_start(day: date, tz: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def period_bounds(query: ReportQuery, tz: tzinfo | None = None, today: date | None = None) -> tuple[datetime, datetime]:
    """UTC ``[start, end)`` of the report period, with day boundaries in local time."""
    tz = tz or local_timezone()
    today = today or datetime.now(tz).date()

    if query.type == ReportType.DAILY:
        day = query.date or today
        return _local_start(day, tz), _local_start(day + timedelta(days=1), tz)

    if query.type == ReportType.MONTHLY:
        first = date(query.year, query.month, 1)
        following = date(query.year + (query.month == 12), query.month % 12 + 1, 1)
        return _local_start(first, tz), _local_start(following, tz)

    return _local_start(date(query.year, 1, 1), tz), _local_start(date(query.year + 1, 1, 1), tz)


def sessions_frame(sessions: Iterable[MistingSession]) -> pd.DataFrame:
    records = []
    for s in sessions:
        duration = s.duration_seconds
        records.append(
            {
                "id": s.id,
                "started_at": s.started_at,
                "ended_at": s.ended_at,
                "mode": s.mode.value,
                "start_temperature": s.start_metrics.temperature,
                "start_humidity": s.start_metrics.humidity,
                "start_heat_index": s.start_metrics.heat_index,
                "start_water_level": s.start_metrics.water_level,
                "end_temperature": s.end_metrics.temperature if s.end_metrics else None,
                "end_water_level": s.end_metrics.water_level if s.end_metrics else None,
                "duration_min": duration / 60 if duration is not None else None,
            }
        )
    df = pd.DataFrame.from_records(records, columns=_COLUMNS)
    df["started_at"] = pd.to_datetime(df["started_at"], utc=True)
    for column in _NUMERIC:
        df[column] = pd.to_numeric(df[column], errors="coerce")
    return df


def _round(value: Any, digits: int = 1) -> Optional[float]:
    if value is None:
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return round(number, digits)


def _mean(series: pd.Series, digits: int = 1) -> Optional[float]:
    clean = series.dropna()
    if clean.empty:
        return None
    return _round(clean.mean(), digits)


def zone_counts(temperatures: pd.Series) -> dict[str, int]:
    counts = {"safe": 0, "warning": 0, "danger": 0}
    for zone, count in temperatures.dropna().map(heat_stress_zone).value_counts().items():
        counts[zone] = int(count)
    return counts


def summarize(df: pd.DataFrame, tz: tzinfo | None = None) -> dict[str, Any]:
    """Headline statistics for the sessions in *df*."""
    tz = tz or local_timezone()
    temps = df["start_temperature"]

    water_usage = (df["start_water_level"] - df["end_water_level"]).dropna()
    reduction = (df["start_temperature"] - df["end_temperature"]).dropna()
    durations = df["duration_min"].dropna()

    timed = df[(df["duration_min"] > 0) & df["start_temperature"].notna() & df["end_temperature"].notna()]
    efficiency = (timed["start_temperature"] - timed["end_temperature"]) / timed["duration_min"]

    most_active_hour = None
    if not df.empty:
        hours = df["started_at"].dt.tz_convert(tz).dt.hour.value_counts()
        top = int(hours[hours == hours.max()].index.min())
        most_active_hour = f"{top:02d}:00"

    return {
        "total_events": int(len(df)),
        "auto_events": int((df["mode"] == PumpMode.AUTO.value).sum()),
        "manual_events": int((df["mode"] == PumpMode.MANUAL.value).sum()),
        "avg_temperature": _mean(temps),
        "avg_humidity": _mean(df["start_humidity"]),
        "avg_heat_index": _mean(df["start_heat_index"]),
        "avg_water_usage": _mean(water_usage),
        "total_duration_min": _round(durations.sum()) if not durations.empty else 0.0,
        "avg_duration_min": _mean(durations),
        "avg_temp_reduction": _mean(reduction),
        "peak_temperature": _round(temps.max()) if temps.notna().any() else None,
        "lowest_temperature": _round(temps.min()) if temps.notna().any() else None,
        "zones": zone_counts(temps),
        "most_active_hour": most_active_hour,
        "efficiency_c_per_min": _mean(efficiency, 2),
    }


def daily_breakdown(df: pd.DataFrame, tz: tzinfo | None = None) -> list[dict[str, Any]]:
    if df.empty:
        return []
    tz = tz or local_timezone()
    local_day = df["started_at"].dt.tz_convert(tz).dt.date
    grouped = (
        df.assign(day=local_day)
        .groupby("day")
        .agg(
            events=("id", "count"),
            avg_temperature=("start_temperature", "mean"),
            avg_humidity=("start_humidity", "mean"),
            total_duration_min=("duration_min", "sum"),
        )
        .sort_index()
    )
    return [
        {
            "date": day.isoformat(),
            "events": int(row.events),
            "avg_temperature": _round(row.avg_temperature),
            "avg_humidity": _round(row.avg_humidity),
            "total_duration_min": _round(row.total_duration_min),
        }
        for day, row in grouped.iterrows()
    ]


class ReportService:
    def __init__(self, misting_repo: "MistingLogRepository"):
        self._repo = misting_repo

    def summary(self, query: ReportQuery) -> dict[str, Any]:
        tz = local_timezone()
        start, end = period_bounds(query, tz)
        df = sessions_frame(self._repo.started_between(start, end))
        report: dict[str, Any] = {
            "type": query.type.value,
            "period": {"start": start.isoformat(), "end": end.isoformat()},
            "stats": summarize(df, tz),
        }
        if query.type != ReportType.DAILY:
            report["daily_breakdown"] = daily_breakdown(df, tz)
        logger.debug("Built %s report over %d sessions", query.type.value, len(df))
        return report

    def comfort_index(self, month: int | None = None, year: int | None = None) -> dict[str, Any]:
        """Share of sessions that started in each heat-stress zone."""
        tz = local_timezone()
        if month is not None:
            query = ReportQuery(type=ReportType.MONTHLY, month=month, year=year or datetime.now(tz).year)
            start, end = period_bounds(query, tz)
        elif year is not None:
            start, end = period_bounds(ReportQuery(type=ReportType.YEARLY, year=year), tz)
        else:
            start, end = _EPOCH, None

        df = sessions_frame(self._repo.started_between(start, end))
        counts = zone_counts(df["start_temperature"])
        total = len(df)
        percentages = {zone: round(count * 100 / total) if total else 0 for zone, count in counts.items()}
        return {"total": total, "counts": counts, "percentages": percentages}

    def export_csv(self, query: ReportQuery) -> str:
        report = self.summary(query)
        stats = dict(report["stats"])
        zones = stats.pop("zones")
        stats.update({f"{zone}_events": count for zone, count in zones.items()})

        buffer = io.StringIO()
        buffer.write(f"# AgriCool {report['type']} misting report\n")
        buffer.write(f"# period,{report['period']['start']},{report['period']['end']}\n")
        pd.DataFrame({"metric": list(stats.keys()), "value": list(stats.values())}).to_csv(buffer, index=False)
        breakdown = report.get("daily_breakdown")
        if breakdown:
            buffer.write("\n")
            pd.DataFrame(breakdown).to_csv(buffer, index=False)
        return buffer.getvalue()
