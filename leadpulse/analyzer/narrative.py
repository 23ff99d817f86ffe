"""
Narrative Call Analysis

Sends a day's sampled transcripts to Claude and returns the written
coaching report. Reports are memoized per day for the life of the process;
`force=True` regenerates one.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import anthropic

from leadpulse.analyzer.calls import analyze_day, select_narrative_sample, substantial_calls
from leadpulse.analyzer.prompts import build_prompt
from leadpulse.models import Record

logger = logging.getLogger(__name__)

CREDIT_MESSAGE = "Insufficient API credits - add credits at console.anthropic.com/settings/billing"
DETAIL_CHARS = 150


class NarrativeServiceError(Exception):
    """User-facing failure of the narrative analysis."""
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def _api_error_message(error: anthropic.APIError) -> str:
    body = getattr(error, "body", None)
    if isinstance(body, dict):
        detail = body.get("error")
        if isinstance(detail, dict) and detail.get("message"):
            return detail["message"]
    return getattr(error, "message", None) or str(error)


def friendly_error(status: Any, message: str) -> str:
    """Map a raw API failure onto the message shown in the dashboard."""
    lowered = message.lower()
    if "credit" in lowered or "balance" in lowered:
        return CREDIT_MESSAGE
    return f"AI failed ({status}): {message[:DETAIL_CHARS]}"


class NarrativeService:
    """
    Claude-backed writer of the daily call analysis.

    A missing API key is not an error at construction; `configured` reports
    it and analysis requests fail with a 400.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-haiku-4-5-20251001",
        max_tokens: int = 4000,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._client = client or (anthropic.AsyncAnthropic(api_key=api_key) if api_key else None)
        self._reports: Dict[str, str] = {}

    @property
    def configured(self) -> bool:
        return self._client is not None

    def cached(self, target_date: str) -> Optional[str]:
        return self._reports.get(target_date)

    async def analyze_day(
        self,
        target_date: str,
        records: Sequence[Record],
        force: bool = False,
    ) -> Dict[str, Any]:
        """
        Narrative report for one day.

        Returns:
            {"analysis", "cached"} plus sampledCalls and totalWithTranscripts
            when freshly generated

        Raises:
            NarrativeServiceError: Not configured, nothing to analyze, or API failure
        """
        if not self.configured:
            raise NarrativeServiceError("ANTHROPIC_API_KEY not set", status_code=400)

        if not force and target_date in self._reports:
            return {"analysis": self._reports[target_date], "cached": True}

        sample = select_narrative_sample(records, target_date)
        if not sample:
            raise NarrativeServiceError(
                f"No substantial calls with transcripts for {target_date}",
                status_code=400,
            )

        prompt = build_prompt(target_date, analyze_day(records, target_date), sample)
        logger.info(f"Analyzing {len(sample)} calls for {target_date}...")
        analysis = await self._complete(prompt)

        self._reports[target_date] = analysis
        logger.info(f"Narrative analysis done for {target_date}")
        return {
            "analysis": analysis,
            "cached": False,
            "sampledCalls": len(sample),
            "totalWithTranscripts": len(substantial_calls(records, target_date)),
        }

    async def _complete(self, prompt: str) -> str:
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as e:
            message = _api_error_message(e)
            logger.error(f"Claude API error: {e.status_code} {message}")
            raise NarrativeServiceError(friendly_error(e.status_code, message)) from e
        except anthropic.APIError as e:
            message = _api_error_message(e)
            logger.error(f"Claude API error: {message}")
            raise NarrativeServiceError(friendly_error("connection", message)) from e

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text
        return content
