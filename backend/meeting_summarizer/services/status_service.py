"""
Meeting Summarizer — Provider Status Aggregator
================================================

What:  Point-in-time health snapshot across every registered provider.
Why:   Health endpoints need to show which providers are configured, which
       answer, and which are down, without touching the summarization path.
How:   One check_health() coroutine per configured adapter, run concurrently
       with asyncio.gather and each bounded by that adapter's own health
       timeout. Unconfigured adapters are reported without a network call.

The report is rebuilt on every call and never cached; nothing here marks a
provider as permanently down or changes the registry.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from meeting_summarizer.services.llm_base import ProviderAdapter
from meeting_summarizer.services.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNREACHABLE = "unreachable"
    UNCONFIGURED = "unconfigured"
    ERROR = "error"


@dataclass(frozen=True)
class ProviderHealth:
    configured: bool
    reachable: bool
    status: HealthStatus
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "configured": self.configured,
            "reachable": self.reachable,
            "status": self.status.value,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class HealthReport:
    """Provider name → health entry, in registry order."""

    providers: Dict[str, ProviderHealth]
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def any_configured(self) -> bool:
        return any(p.configured for p in self.providers.values())

    @property
    def healthy_providers(self) -> List[str]:
        return [
            name for name, p in self.providers.items() if p.status is HealthStatus.HEALTHY
        ]

    @property
    def overall(self) -> str:
        """healthy / degraded / unhealthy, as shown by /health."""
        if not self.any_configured:
            return "unhealthy"
        if self.healthy_providers:
            return "healthy"
        return "degraded"


class StatusAggregator:
    """Concurrent health checks over a ProviderRegistry."""

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry

    async def gather_status(self) -> HealthReport:
        adapters = self.registry.all()
        entries = await asyncio.gather(*(self._check_one(a) for a in adapters))
        report = HealthReport(
            providers={adapter.name: entry for adapter, entry in zip(adapters, entries)}
        )
        logger.debug(
            "Provider status gathered: %s",
            {name: p.status.value for name, p in report.providers.items()},
        )
        return report

    async def _check_one(self, adapter: ProviderAdapter) -> ProviderHealth:
        """
        Health of a single adapter. Never raises: whatever happens to this
        check stays in this entry.
        """
        if not adapter.configured:
            return ProviderHealth(
                configured=False,
                reachable=False,
                status=HealthStatus.UNCONFIGURED,
                detail=f"{adapter.name} API key is not set",
            )

        try:
            reachable = await asyncio.wait_for(
                adapter.check_health(), timeout=adapter.health_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "%s health check timed out after %.1fs", adapter.name, adapter.health_timeout
            )
            return ProviderHealth(
                configured=True,
                reachable=False,
                status=HealthStatus.UNREACHABLE,
                detail=f"Health check timed out after {adapter.health_timeout:.1f}s",
            )
        except Exception as e:
            logger.error("%s health check raised: %s", adapter.name, str(e), exc_info=True)
            return ProviderHealth(
                configured=True,
                reachable=False,
                status=HealthStatus.ERROR,
                detail=str(e),
            )

        if reachable:
            return ProviderHealth(configured=True, reachable=True, status=HealthStatus.HEALTHY)
        return ProviderHealth(
            configured=True,
            reachable=False,
            status=HealthStatus.UNREACHABLE,
            detail=f"{adapter.name} did not respond to the health probe",
        )


# ══════════════════════════════════════════════════════════════════════════
# Operator Recommendations
# ══════════════════════════════════════════════════════════════════════════


def build_recommendations(
    report: HealthReport, email_status: Dict[str, object]
) -> List[Dict[str, str]]:
    """
    Turn a provider report plus the email status into actionable hints for
    GET /api/services/status. Always returns at least one entry.
    """
    recommendations: List[Dict[str, str]] = []

    healthy = report.healthy_providers
    if not healthy:
        recommendations.append({
            "type": "critical",
            "service": "ai",
            "message": "No AI services are available. Please check your API keys and network connection.",
            "action": "Verify GROQ_API_KEY and OPENAI_API_KEY in your environment configuration.",
        })
    elif len(healthy) == 1:
        recommendations.append({
            "type": "warning",
            "service": "ai",
            "message": "Only one AI service is available. Consider configuring a backup service.",
            "action": "Add a secondary AI service API key for redundancy.",
        })

    for name, entry in report.providers.items():
        env_name = f"{name.upper()}_API_KEY"
        if not entry.configured:
            recommendations.append({
                "type": "info",
                "service": name,
                "message": f"{name} is not configured.",
                "action": f"Add {env_name} to your environment configuration.",
            })
        elif entry.status is not HealthStatus.HEALTHY:
            recommendations.append({
                "type": "warning",
                "service": name,
                "message": f"{name} is configured but not responding.",
                "action": f"Check your {env_name} and network connectivity.",
            })

    if not email_status.get("configured"):
        recommendations.append({
            "type": "warning",
            "service": "email",
            "message": "Email service is not configured. Summary sharing will not work.",
            "action": (
                "Configure SMTP settings (SMTP_HOST, SMTP_USER, SMTP_PASS, EMAIL_FROM) "
                "in your environment."
            ),
        })
    elif email_status.get("status") != "healthy":
        recommendations.append({
            "type": "error",
            "service": "email",
            "message": "Email service is configured but not working properly.",
            "action": (
                "Check your SMTP credentials and server settings. "
                "Test with the /api/services/email/test endpoint."
            ),
        })

    if not recommendations:
        recommendations.append({
            "type": "success",
            "service": "all",
            "message": "All services are healthy and operational.",
            "action": "No action required. System is ready for use.",
        })
    return recommendations
