# backend/quizapp/core/openai_qg.py

import base64
import json
import logging
import os
import re
from typing import Any, Dict, List

from openai import AsyncOpenAI

from .errors import UpstreamGenerationError

logger = logging.getLogger("quiz.qg")


# ------------------------------------------------------------
# OpenAI client (async)
# ------------------------------------------------------------
def configure_openai(api_key: str | None = None) -> AsyncOpenAI:
    """Create an AsyncOpenAI client from the given key or OPENAI_API_KEY."""
    key = api_key or os.getenv("OPENAI_API_KEY", "")
    if not key:
        raise RuntimeError("OPENAI_API_KEY missing. Provide via env or param.")
    return AsyncOpenAI(api_key=key)


class OpenAICollaborator:
    """Base for the OpenAI-backed generators; the client is built on first use."""

    def __init__(self, api_key: str | None = None, client: AsyncOpenAI | None = None):
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = configure_openai(self._api_key)
            logger.info(f"OpenAI async client configured for {type(self).__name__}.")
        return self._client


# ------------------------------------------------------------
# Prompt templates
# ------------------------------------------------------------
QG_SYSTEM_PROMPT = (
    "You are a strict multiple-choice quiz generator.\n\n"
    "Output rules:\n"
    "- Output ONLY JSON (no markdown, no commentary outside JSON).\n"
    "- Return an object of the form {\"questions\": [...]}.\n"
    "- You MUST return EXACTLY the number of questions requested.\n"
    "- Each item MUST have keys: ['question','options','correctAnswerIndex'].\n"
    "- 'options' is a list of exactly {option_count} distinct answer strings.\n"
    "- 'correctAnswerIndex' is the 0-based index of the single correct option.\n"
    "- Vary the position of the correct option across questions.\n"
)

QG_VISUAL_RULES = (
    "- Each item MUST also have the key 'imagePrompt'.\n"
    "- For exactly {image_count} questions, the question must refer to an image and "
    "'imagePrompt' must be a detailed text-to-image prompt for a photorealistic image "
    "relevant to the question.\n"
    "- For every other question, set 'imagePrompt' to null.\n"
)


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _parse_json_response(text: str) -> List[Dict[str, Any]]:
    """Pull the question list out of the model's reply, tolerating stray wrapping."""
    if not text or not text.strip():
        raise UpstreamGenerationError("Empty response from model", reason="empty")

    try:
        data = json.loads(text)
        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("questions"), list):
            return data["questions"]
    except json.JSONDecodeError:
        pass

    # Strip markdown fences and trailing commas, then look for the array
    cleaned = re.sub(r"^```(json)?|```$", "", text.strip(), flags=re.M)
    cleaned = re.sub(r",\s*([}\]])", r"\1", cleaned)
    start, end = cleaned.find("["), cleaned.rfind("]")
    if start != -1 and end > start:
        try:
            data = json.loads(cleaned[start:end + 1])
            if isinstance(data, list):
                return data
        except json.JSONDecodeError as e:
            logger.error(f"Failed after cleaning JSON: {e}")

    raise UpstreamGenerationError(
        f"Invalid JSON from model. Raw output: {text[:200]}...", reason="malformed"
    )


def _normalize_options(opts: Any) -> Any:
    """Flatten option objects the model sometimes emits into plain strings."""
    if not isinstance(opts, list):
        return opts
    normed = []
    for o in opts:
        if isinstance(o, dict):
            for key in ("text", "content", "option"):
                if key in o:
                    o = str(o[key])
                    break
        normed.append(o.strip() if isinstance(o, str) else o)
    return normed


# ------------------------------------------------------------
# Question generator
# ------------------------------------------------------------
class OpenAIQuestionGenerator(OpenAICollaborator):
    def __init__(
        self,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
        model_name: str = "gpt-4o-mini",
        option_count: int = 4,
        image_count: int = 2,
    ):
        super().__init__(api_key, client)
        self.model_name = model_name
        self.option_count = option_count
        self.image_count = image_count

    def system_prompt(self, visual_mode: bool) -> str:
        prompt = QG_SYSTEM_PROMPT.replace("{option_count}", str(self.option_count))
        if visual_mode:
            prompt += QG_VISUAL_RULES.replace("{image_count}", str(self.image_count))
        return prompt

    async def generate(
        self, difficulty: str, topic: str, count: int, visual_mode: bool
    ) -> List[Dict[str, Any]]:
        user_prompt = (
            f"Generate {count} multiple-choice questions about {topic} "
            f"with {difficulty} difficulty. Return exactly {count} objects."
        )
        resp = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": self.system_prompt(visual_mode)},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        raw = resp.choices[0].message.content or ""
        items = _parse_json_response(raw)

        for item in items:
            if isinstance(item, dict) and "options" in item:
                item["options"] = _normalize_options(item["options"])

        logger.info(f"Generated {len(items)} questions on topic={topic!r} visual={visual_mode}.")
        return items


# ------------------------------------------------------------
# Image generator
# ------------------------------------------------------------
class OpenAIImageGenerator(OpenAICollaborator):
    def __init__(
        self,
        api_key: str | None = None,
        client: AsyncOpenAI | None = None,
        model_name: str = "dall-e-3",
        size: str = "1024x1024",
    ):
        super().__init__(api_key, client)
        self.model_name = model_name
        self.size = size

    async def render(self, prompt: str) -> bytes:
        resp = await self.client.images.generate(
            model=self.model_name,
            prompt=prompt,
            n=1,
            size=self.size,
            response_format="b64_json",
        )
        if not resp.data or not resp.data[0].b64_json:
            raise UpstreamGenerationError("Image model returned no image", reason="empty")
        image = base64.b64decode(resp.data[0].b64_json)
        logger.debug(f"Rendered image ({len(image)} bytes) for prompt={prompt[:60]!r}")
        return image
