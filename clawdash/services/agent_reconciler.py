"""Reconcile CLI agents with session usage and discovered sub-agents."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from clawdash import config
from clawdash.config import DashboardPolicy
from clawdash.models import AgentRecord

logger = logging.getLogger("clawdash.reconciler")

SUBAGENT_KEY_RE = re.compile(r"^agent:main:subagent:([a-f0-9-]+)")


def session_tokens(session: dict[str, Any]) -> int | float:
    """``totalTokens`` when numeric, else ``outputTokens``; non-numeric counts as 0."""
    total = session.get("totalTokens")
    value = total if _is_number(total) else session.get("outputTokens")
    if value is None:
        return 0
    if _is_number(value):
        return value if math.isfinite(value) else 0
    try:
        coerced = float(str(value).strip())
    except ValueError:
        return 0
    if not math.isfinite(coerced):
        return 0
    return int(coerced) if coerced.is_integer() else coerced


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def display_name_for_folder(folder: str) -> str:
    """``research-assistant`` -> ``Research Assistant``."""
    return " ".join(word[:1].upper() + word[1:] for word in folder.split("-"))


@dataclass
class _SubagentUsage:
    model: str
    sessions: int = 0
    tokens: int | float = 0


class AgentReconciler:
    def __init__(self, policy: DashboardPolicy, default_model: str = config.DEFAULT_AGENT_MODEL):
        self.policy = policy
        self.default_model = default_model

    def cost_for(self, tokens: int | float) -> float:
        return round(tokens * self.policy.token_cost_rate, 4)

    def reconcile(
        self,
        agents: list[dict[str, Any]] | None,
        sessions: list[dict[str, Any]] | None,
        known_subagents: list[str] | None = None,
    ) -> Optional[list[AgentRecord]]:
        """Primary agents first, then sub-agents; ``None`` when there are no primary agents."""
        if not agents:
            logger.warning("No primary agents to reconcile")
            return None

        session_rows = [s for s in (sessions or []) if isinstance(s, dict)]
        primary = [self._primary_record(agent, session_rows) for agent in agents]
        secondary = self._secondary_records(session_rows, list(known_subagents or []))

        total_tokens = sum(record.tokens for record in primary + secondary)
        logger.info(
            "Reconciled %s agents (%s main + %s sub), totalTokens=%s",
            len(primary) + len(secondary),
            len(primary),
            len(secondary),
            total_tokens,
        )
        return primary + secondary

    def _primary_record(self, agent: dict[str, Any], sessions: list[dict[str, Any]]) -> AgentRecord:
        prefix = f"agent:{agent.get('id') or ''}:"
        # Sub-agent sessions also start with "agent:main:"; they belong to the secondary records only.
        owned = [
            s
            for s in sessions
            if isinstance(s.get("key"), str) and s["key"].startswith(prefix) and not SUBAGENT_KEY_RE.match(s["key"])
        ]
        tokens = sum((session_tokens(s) for s in owned), 0)
        return AgentRecord(
            name=agent.get("identityName") or agent.get("id") or "Unknown",
            state="Active" if owned else "Idle",
            sessions=len(owned),
            tokens=tokens,
            cost=self.cost_for(tokens),
            model=agent.get("model") or self.default_model,
            tasks=[],
        )

    def discover_subagents(self, sessions: list[dict[str, Any]]) -> dict[str, _SubagentUsage]:
        """Group sub-agent sessions by id, in first-seen order."""
        groups: dict[str, _SubagentUsage] = {}
        for session in sessions:
            match = SUBAGENT_KEY_RE.match(str(session.get("key") or ""))
            if not match:
                continue
            subagent_id = match.group(1)
            usage = groups.get(subagent_id)
            if usage is None:
                usage = groups[subagent_id] = _SubagentUsage(model=session.get("model") or self.default_model)
                logger.debug("Discovered sub-agent %s...", subagent_id[:8])
            usage.sessions += 1
            usage.tokens += session_tokens(session)
        return groups

    def _secondary_records(self, sessions: list[dict[str, Any]], known: list[str]) -> list[AgentRecord]:
        # Sub-agent ids carry no name. The i-th id seen in the session list is
        # paired with the i-th known folder (lexical order); this is positional,
        # not a stable id-to-name binding.
        groups = self.discover_subagents(sessions)
        records: list[AgentRecord] = []

        for index, (subagent_id, usage) in enumerate(groups.items()):
            if index < len(known):
                name = display_name_for_folder(known[index])
            else:
                name = f"Sub-agent {index + 1}"
            logger.debug("Mapping sub-agent %s... -> %s", subagent_id[:8], name)
            records.append(
                AgentRecord(
                    name=name,
                    state="Active",
                    sessions=usage.sessions,
                    tokens=usage.tokens,
                    cost=self.cost_for(usage.tokens),
                    model=usage.model,
                    tasks=[],
                )
            )

        for folder in known[len(groups):]:
            records.append(
                AgentRecord(
                    name=display_name_for_folder(folder),
                    state="Idle",
                    sessions=0,
                    tokens=0,
                    cost=0,
                    model=self.default_model,
                    tasks=[],
                )
            )
        return records
