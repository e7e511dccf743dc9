from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional, Protocol

from .exceptions import ConfigurationError, GenerationError
from .models import GeneratedArticle

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a professional news writer. Write original, factual articles based on provided source text. "
    "Follow these rules strictly:\n"
    "- Output valid HTML only using <p>, <h3>, and <i> tags.\n"
    "- Start with a paragraph (no headline before it). Use section headlines with <h3> only after the first paragraph.\n"
    "- Include at least one <i> quote styled section when appropriate.\n"
    "- Length: 600-800 words.\n"
    "- Tone: clear, neutral, concise, informative.\n"
    "- Do NOT include images, links, scripts, CSS, or any tags except <p>, <h3>, <i>.\n"
    "- Do NOT include a category; it will be assigned separately.\n"
    "- Create an original, compelling headline different from the source title."
)
USER_INSTRUCTIONS = (
    "Write one original headline and a 600-800 word HTML-formatted body. Keep to the allowed tags and structure. "
    "The first paragraph has no headline. Use <h3> for section headers. Include at least one <i> quote. "
    "Output as JSON with keys: headline, body_html. No extra keys."
)
ASSISTANT_ACK = "Acknowledge. I will output strict JSON with keys headline and body_html."


class ArticleGenerator(Protocol):
    def generate(self, *, title: str, source_url: str, source_text: str, category: str) -> GeneratedArticle:  # pragma: no cover - interface
        ...


@dataclass
class GenerateOptions:
    provider: str = "openai"  # "openai" | "gemini"
    model: Optional[str] = None
    max_input_chars: int = 12000
    timeout_sec: float = 120.0
    temperature: float = 0.7


def _truncate(s: str, limit: int) -> str:
    if limit <= 0:
        return s
    if len(s) <= limit:
        return s
    return s[:limit]


def _plain_title(title: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"<[^>]*>", "", title)).strip()


def build_user_payload(*, title: str, source_url: str, source_text: str, category: str,
                       max_input_chars: int) -> str:
    return json.dumps(
        {
            "instructions": USER_INSTRUCTIONS,
            "source_title": title,
            "source_url": source_url,
            "source_text": _truncate(source_text, max_input_chars),
            "category": category,
        },
        ensure_ascii=False,
    )


def parse_generation_response(raw: Optional[str], *, fallback_title: str) -> GeneratedArticle:
    """
    Read ``{"headline": ..., "body_html": ...}`` out of the model output.

    When the JSON is missing or incomplete the original title becomes the
    headline and the raw text becomes the body.
    """
    raw = raw or ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None
    if isinstance(parsed, dict) and parsed.get("headline") and parsed.get("body_html"):
        return GeneratedArticle(
            headline=str(parsed["headline"]).strip(),
            body_html=str(parsed["body_html"]),
        )
    logger.warning("Unstructured generation response for %r; using raw text", fallback_title)
    return GeneratedArticle(headline=_plain_title(fallback_title), body_html=raw.strip(), structured=False)


class OpenAIGenerator:
    def __init__(self, *, api_key: Optional[str], model: Optional[str], options: Optional[GenerateOptions] = None) -> None:
        try:
            from openai import OpenAI  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise ConfigurationError("openai package is required for OpenAI generation. Install with `pip install openai`.") from e
        key = api_key or os.getenv("OPENAI_API_KEY")
        if not key:
            raise ConfigurationError("OPENAI_API_KEY not set.")
        self.options = options or GenerateOptions()
        self._client = OpenAI(api_key=key)
        self._model = model or self.options.model or os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    def generate(self, *, title: str, source_url: str, source_text: str, category: str) -> GeneratedArticle:
        user = build_user_payload(
            title=title, source_url=source_url, source_text=source_text,
            category=category, max_input_chars=self.options.max_input_chars,
        )
        try:
            resp = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "assistant", "content": ASSISTANT_ACK},
                    {"role": "user", "content": user},
                ],
                temperature=self.options.temperature,
                top_p=0.95,
                presence_penalty=0.1,
                frequency_penalty=0.1,
                response_format={"type": "json_object"},
                timeout=self.options.timeout_sec,
            )
        except Exception as e:
            raise GenerationError(f"OpenAI request failed: {e}") from e
        content = resp.choices[0].message.content if resp and resp.choices else None
        return parse_generation_response(content, fallback_title=title)


class GeminiGenerator:
    def __init__(self, *, api_key: Optional[str], model: Optional[str], options: Optional[GenerateOptions] = None) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise ConfigurationError("google-generativeai package is required for Gemini generation. Install with `pip install google-generativeai`.") from e
        key = api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
        if not key:
            raise ConfigurationError("GOOGLE_API_KEY (or GEMINI_API_KEY) not set.")
        genai.configure(api_key=key)
        self.options = options or GenerateOptions(provider="gemini")
        self._model_name = model or self.options.model or os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self._genai = genai

    def generate(self, *, title: str, source_url: str, source_text: str, category: str) -> GeneratedArticle:
        user = build_user_payload(
            title=title, source_url=source_url, source_text=source_text,
            category=category, max_input_chars=self.options.max_input_chars,
        )
        try:
            model = self._genai.GenerativeModel(self._model_name, system_instruction=SYSTEM_PROMPT)
            resp = model.generate_content(
                user,
                generation_config={
                    "temperature": self.options.temperature,
                    "top_p": 0.95,
                    "response_mime_type": "application/json",
                },
                request_options={"timeout": self.options.timeout_sec},
            )
            text = getattr(resp, "text", None)
        except Exception as e:
            raise GenerationError(f"Gemini request failed: {e}") from e
        return parse_generation_response(text, fallback_title=title)


def build_generator(options: Optional[GenerateOptions], *, api_key: Optional[str] = None) -> ArticleGenerator:
    options = options or GenerateOptions()
    provider = (options.provider or "").lower()
    if provider == "openai":
        return OpenAIGenerator(api_key=api_key or os.getenv("OPENAI_API_KEY"), model=options.model, options=options)
    if provider in {"gemini", "google", "googleai"}:
        return GeminiGenerator(
            api_key=api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
            model=options.model,
            options=options,
        )
    raise ConfigurationError(f"Unknown generation provider: {options.provider!r}")
