"""Pydantic models matching the dashboard page's JSON schema."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


# ── Agent models ────────────────────────────────────────────────────

class AgentTask(BaseModel):
    title: str = ""
    source: str = ""


class AgentRecord(BaseModel):
    name: str
    state: str = "Idle"  # "Active" | "Idle"
    sessions: int = 0
    tokens: int | float = 0
    cost: float = 0.0
    model: str = ""
    tasks: list[AgentTask] = Field(default_factory=list)


# ── Project board models ────────────────────────────────────────────

class ProjectItem(BaseModel):
    name: str
    status: str = ""
    owner: str = ""


class ActivityEntry(BaseModel):
    type: str = ""
    label: str = ""
    detail: str = ""
    timestamp: str = ""
    source: str = ""


class ProjectsSection(BaseModel):
    status: str = "unavailable"  # "available" | "unavailable"
    active: list[ProjectItem] = Field(default_factory=list)
    recentActivity: list[ActivityEntry] = Field(default_factory=list)
    activityLog: list[str] = Field(default_factory=list)


# ── Trading models ──────────────────────────────────────────────────

class QualifiedHorse(BaseModel):
    name: str
    race: str = ""
    value: str = "n/a"
    note: str = ""
    date: Optional[str] = None


class TradingStatus(BaseModel):
    dailyStatus: str = "Red"
    statusNote: str = ""
    completionStatus: str = ""


class TradingStats(BaseModel):
    matchedRaces: int = 0
    unmatched: int = 0
    profit: float = 0
    liability: float = 0


class PipelineStage(BaseModel):
    name: str
    label: str = ""
    completed: bool = False
    note: str = ""


class TradingSection(BaseModel):
    availability: str = "unavailable"
    status: TradingStatus = Field(default_factory=TradingStatus)
    qualifiedHorses: list[QualifiedHorse] = Field(default_factory=list)
    tradingStats: TradingStats = Field(default_factory=TradingStats)
    pipelineStages: list[PipelineStage] = Field(default_factory=list)


# ── Cron models ─────────────────────────────────────────────────────

class CronJob(BaseModel):
    name: str
    status: str = "unknown"
    nextRun: str = "Unknown"
    lastRun: str = "Unknown"


class CronSection(BaseModel):
    status: str = "unavailable"
    jobs: list[CronJob] = Field(default_factory=list)


# ── Placeholder-only sections ───────────────────────────────────────

class CalendarEvent(BaseModel):
    title: str
    time: str = ""
    detail: str = ""


class CalendarSection(BaseModel):
    status: str = "unavailable"
    events: list[CalendarEvent] = Field(default_factory=list)


class ContentItem(BaseModel):
    title: str
    status: str = ""
    channel: str = ""


class ContentSection(BaseModel):
    status: str = "unavailable"
    items: list[ContentItem] = Field(default_factory=list)


class FileActivityEntry(BaseModel):
    path: str
    action: str = ""
    timestamp: str = ""


class FileActivitySection(BaseModel):
    status: str = "unavailable"
    files: list[FileActivityEntry] = Field(default_factory=list)


# ── Snapshot models ─────────────────────────────────────────────────

class SnapshotMetadata(BaseModel):
    generatedAt: str = ""
    generatedBy: str = ""
    source: str = ""
    isFallback: bool = False
    details: str = ""


class DashboardSnapshot(BaseModel):
    agents: list[AgentRecord] = Field(default_factory=list)
    projects: ProjectsSection = Field(default_factory=ProjectsSection)
    trading: TradingSection = Field(default_factory=TradingSection)
    crons: CronSection = Field(default_factory=CronSection)
    calendar: CalendarSection = Field(default_factory=CalendarSection)
    content: ContentSection = Field(default_factory=ContentSection)
    fileActivity: FileActivitySection = Field(default_factory=FileActivitySection)
    metadata: Optional[SnapshotMetadata] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_meta_key(cls, data: Any) -> Any:
        # Older generated files only carry the "__meta" copy of the envelope.
        if isinstance(data, dict) and not data.get("metadata") and isinstance(data.get("__meta"), dict):
            data = {**data, "metadata": data["__meta"]}
        return data

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire / snapshot file; metadata is written under both keys."""
        payload = self.model_dump(exclude={"metadata"})
        if self.metadata is not None:
            meta = self.metadata.model_dump()
            payload["metadata"] = meta
            payload["__meta"] = dict(meta)
        return payload


# ── Debug / data-status models ──────────────────────────────────────

class DataFileStatus(BaseModel):
    name: str
    path: str
    exists: bool = False
    size: Optional[int] = None
    modifiedAt: Optional[str] = None
    valid: Optional[bool] = None
    error: Optional[str] = None
    isFallback: Optional[bool] = None
    generatedAt: Optional[str] = None
    ageHours: Optional[float] = None
    stale: Optional[bool] = None
    rejectionReason: Optional[str] = None


class CliStatus(BaseModel):
    available: bool = False
    path: str = ""


class DataStatusReport(BaseModel):
    timestamp: str
    environment: dict[str, str] = Field(default_factory=dict)
    openClaw: CliStatus = Field(default_factory=CliStatus)
    maxAgeHours: float = 24.0
    dataFiles: list[DataFileStatus] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
