"""
Amazon Bedrock completion client.

Wraps ``invoke_model`` for free-text and JSON-shaped generation. One call
per request: no retry, no streaming. Callers own the fallback.
"""

from __future__ import annotations

import json
import re
import time
from typing import Any, Optional

import boto3

from utils.logging_config import get_logger
from utils.settings import AppSettings

logger = get_logger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class AIService:
    """Text and structured generation against a Bedrock model."""

    def __init__(
        self,
        model_id: Optional[str] = None,
        region: Optional[str] = None,
        settings: Optional[AppSettings] = None,
    ):
        settings = settings or AppSettings.from_environment()
        self.model_id = model_id or settings.model_id
        self.client = boto3.client(
            "bedrock-runtime", region_name=region or settings.bedrock_region
        )

    def generate_text(
        self, prompt: str, max_tokens: int = 1000, temperature: float = 0.4
    ) -> str:
        """Return the model's reply to a single user prompt."""
        start = time.perf_counter()
        response = self.client.invoke_model(
            modelId=self.model_id,
            contentType="application/json",
            accept="application/json",
            body=json.dumps(
                {
                    "anthropic_version": "bedrock-2023-05-31",
                    "messages": [
                        {"role": "user", "content": [{"type": "text", "text": prompt}]}
                    ],
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                }
            ),
        )
        payload = json.loads(response["body"].read())
        text = _extract_text(payload)
        logger.info(
            "Model call complete",
            extra={
                "model_id": self.model_id,
                "prompt_length": len(prompt),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return text

    def generate_object(
        self, prompt: str, schema: dict, max_tokens: int = 2000
    ) -> dict:
        """Ask for JSON matching ``schema`` and return the decoded object.

        Raises ValueError when the reply is not a JSON object.
        """
        structured_prompt = (
            f"{prompt}\n\n"
            "Respond with a single JSON object that matches this JSON schema. "
            "Do not include any text outside the JSON.\n"
            f"Schema: {json.dumps(schema)}"
        )
        text = self.generate_text(structured_prompt, max_tokens=max_tokens, temperature=0.2)
        parsed = parse_json(text)
        if not isinstance(parsed, dict):
            raise ValueError("Model returned JSON that is not an object")
        return parsed


def _extract_text(payload: dict) -> str:
    """Pull the first text block out of a Bedrock response body."""
    content = payload.get("content")
    if content is None:
        content = payload.get("output", {}).get("message", {}).get("content")
    if content is None:
        content = payload.get("output", {}).get("content", [])
    for block in content or []:
        if isinstance(block, dict) and "text" in block:
            return block["text"]
    raise ValueError("Model response contained no text")


def parse_json(text: str) -> Any:
    """Best-effort JSON extraction from a model reply.

    Accepts bare JSON, JSON inside a markdown fence, or JSON surrounded by
    prose (the outermost object/array is used).
    """
    candidate = text.strip()
    fenced = _FENCE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (candidate.find("{"), candidate.find("[")) if i != -1]
    if not starts:
        raise ValueError("Model returned unparseable response")
    start = min(starts)
    closer = "}" if candidate[start] == "{" else "]"
    end = candidate.rfind(closer)
    if end <= start:
        raise ValueError("Model returned unparseable response")
    try:
        return json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ValueError("Model returned unparseable response") from exc
