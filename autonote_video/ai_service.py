# autonote_video/ai_service.py
"""
Gemini-backed report generation and annotation text cleanup.

Neither call ever raises to the caller: failures are logged and turned into
an AiResult with used_fallback=True (the original text for cleanup, a fixed
message for reports).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from google import genai

from .domain import User, VideoTask
from .timeutils import format_hours_minutes

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"
REPORT_ERROR_TEXT = "Error generating report. Please check your API key."


class AiServiceError(RuntimeError):
    pass


@dataclass(frozen=True)
class AiResult:
    text: str
    used_fallback: bool = False


# -----------------------------
# Prompts
# -----------------------------

def summarize_task(task: VideoTask, users: Iterable[User]) -> str:
    assignee = next((u.name for u in users if u.id == task.assignee_id), "Unassigned")
    sample = task.annotations[0].description if task.annotations else ""
    return "\n".join([
        f'- Video: "{task.title}"',
        f"- Assignee: {assignee}",
        f"- Status: {task.status.value}",
        f"- Time Spent: {format_hours_minutes(task.time_spent_seconds)}",
        f"- Annotations Count: {len(task.annotations)}",
        f"- Sample Annotation: {sample or 'None'}",
    ])


def build_report_prompt(tasks: Iterable[VideoTask], users: Iterable[User]) -> str:
    users = list(users)
    data = "\n\n".join(summarize_task(t, users) for t in tasks)
    return (
        "You are a Project Manager Assistant.\n"
        "Analyze the following video annotation project data and generate a concise textual report (Markdown).\n"
        "\n"
        "Focus on:\n"
        "1. Productivity summary (who spent how much time).\n"
        "2. Project completion status.\n"
        "3. Any anomalies (e.g., lots of time spent but few annotations).\n"
        "\n"
        f"Data:\n{data}\n"
    )


def build_cleanup_prompt(text: str) -> str:
    return (
        "Fix grammar and standardize this video annotation text to be professional "
        f'and concise: "{text}"'
    )


# -----------------------------
# Service
# -----------------------------

class GeminiService:
    """
    Thin wrapper around google-genai's Client.models.generate_content.

    The client is created lazily so the app can start (and managers can still
    export sheets) without an API key; the key is looked up when first needed.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL,
                 api_key_env: str = DEFAULT_API_KEY_ENV, client=None):
        self._api_key = api_key
        self._api_key_env = api_key_env
        self.model = model
        self._client = client

    def _get_client(self):
        if self._client is None:
            key = self._api_key or os.environ.get(self._api_key_env)
            if not key:
                raise AiServiceError(f"API key not found (set {self._api_key_env})")
            self._client = genai.Client(api_key=key)
        return self._client

    def _generate(self, prompt: str) -> str:
        client = self._get_client()
        logger.debug("Generating with model %s, prompt: %s...", self.model, prompt[:200])
        response = client.models.generate_content(model=self.model, contents=prompt)
        text = response.text
        if not text:
            raise AiServiceError("Empty response from model")
        return str(text)

    def generate_report(self, tasks: List[VideoTask], users: List[User]) -> AiResult:
        try:
            text = self._generate(build_report_prompt(tasks, users))
        except Exception:
            logger.exception("Report generation failed")
            return AiResult(REPORT_ERROR_TEXT, used_fallback=True)
        logger.info("Report generated for %d tasks", len(tasks))
        return AiResult(text)

    def cleanup(self, text: str) -> AiResult:
        try:
            cleaned = self._generate(build_cleanup_prompt(text)).strip()
        except Exception:
            logger.exception("Annotation cleanup failed; keeping original text")
            return AiResult(text, used_fallback=True)
        return AiResult(cleaned)
