from __future__ import annotations

import logging
import os
import re
from typing import Optional

import google.generativeai as genai
try:  # optional dependency
    from openai import OpenAI  # type: ignore
except Exception:  # pragma: no cover - openai may not be installed in minimal env
    OpenAI = None  # type: ignore
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .cache import Cache
from .config import GEMINI_DEFAULT_MODEL, OPENAI_DEFAULT_MODEL
from .errors import EnrichmentError
from .prompts import PROMPT_VERSION, SYSTEM_PROMPT, format_prompt, generate_prompt
from .utils import sha256_text

logger = logging.getLogger(__name__)

CACHE_PREFIX = "enrich_"
FORMAT_MAX_TOKENS = 200
GENERATE_MAX_TOKENS = 180


def tidy_info(raw: str, max_chars: int = 500, max_sentences: int = 4) -> str:
    """Collapse whitespace and trim raw landmark info to a few sentences."""
    if not raw:
        return ""
    cleaned = re.sub(r"\s+", " ", raw).strip()
    if len(cleaned) > max_chars:
        cleaned = cleaned[: max_chars - 3] + "..."
    sentences = re.split(r"[.!?]\s+", cleaned)
    if len(sentences) > max_sentences:
        cleaned = ". ".join(sentences[:max_sentences]) + "."
    return cleaned


class PromptEnricher:
    """Shared prompt building and response caching; subclasses implement `_call`."""

    provider = ""

    def __init__(self, model_name: str, cache: Optional[Cache] = None) -> None:
        self.model_name = model_name
        self.cache = cache or Cache()

    def _call(self, prompt: str, max_tokens: int) -> str:
        raise NotImplementedError

    @retry(
        wait=wait_exponential(multiplier=1, min=2, max=20),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(EnrichmentError),
        reraise=True,
    )
    def _complete(self, prompt: str, max_tokens: int) -> str:
        return self._call(prompt, max_tokens)

    def complete(self, prompt: str, max_tokens: int) -> str:
        key = f"{CACHE_PREFIX}{self.provider}_{self.model_name}_{PROMPT_VERSION}_{sha256_text(prompt)[:16]}"
        cached = self.cache.get(key)
        if isinstance(cached, str) and cached.strip():
            return cached
        text = (self._complete(prompt, max_tokens) or "").strip()
        if text:
            self.cache.set(key, text)
        return text

    def format(self, name: str, raw_text: str) -> str:
        text = self.complete(format_prompt(name, raw_text), FORMAT_MAX_TOKENS)
        if not text:
            logger.info("Empty formatting response for %s, using tidied raw info", name)
            return tidy_info(raw_text)
        return text

    def generate(self, name: str) -> str:
        text = self.complete(generate_prompt(name), GENERATE_MAX_TOKENS)
        if not text:
            raise EnrichmentError(f"{self.provider} returned no description for {name}")
        return text


def _configure_gemini() -> None:
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        raise EnrichmentError("GOOGLE_API_KEY not set. Set it in env or .env")
    genai.configure(api_key=api_key)


def _configure_openai():  # -> OpenAI
    if OpenAI is None:
        raise EnrichmentError("openai package not installed. Install with pip install openai")
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise EnrichmentError("OPENAI_API_KEY not set. Set it in env or .env")
    return OpenAI(api_key=api_key)


class GeminiEnricher(PromptEnricher):
    provider = "gemini"

    def __init__(self, model_name: str = GEMINI_DEFAULT_MODEL, cache: Optional[Cache] = None) -> None:
        super().__init__(model_name, cache)
        _configure_gemini()
        self.model = genai.GenerativeModel(model_name=model_name, system_instruction=SYSTEM_PROMPT)

    def _call(self, prompt: str, max_tokens: int) -> str:
        try:
            resp = self.model.generate_content(
                prompt,
                generation_config={"temperature": 0.3, "top_p": 0.9, "max_output_tokens": max_tokens},
                request_options={"timeout": 60},
            )
            return resp.text
        except Exception as e:
            raise EnrichmentError(f"Gemini call failed: {e}") from e


class OpenAIEnricher(PromptEnricher):
    provider = "openai"

    def __init__(self, model_name: str = OPENAI_DEFAULT_MODEL, cache: Optional[Cache] = None) -> None:
        super().__init__(model_name, cache)
        self.client = _configure_openai()

    def _call(self, prompt: str, max_tokens: int) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_completion_tokens=max_tokens,
            )
        except Exception as e:
            raise EnrichmentError(f"OpenAI call failed: {e}") from e
        return completion.choices[0].message.content or ""


def build_enricher(
    provider: str, model_name: Optional[str] = None, cache: Optional[Cache] = None
) -> Optional[PromptEnricher]:
    """Create the text backend for `provider`, or None when it is disabled or not configured."""
    provider = provider.lower()
    if provider in ("", "none"):
        return None
    try:
        if provider == "gemini":
            return GeminiEnricher(model_name or GEMINI_DEFAULT_MODEL, cache)
        if provider == "openai":
            return OpenAIEnricher(model_name or OPENAI_DEFAULT_MODEL, cache)
    except EnrichmentError as e:
        logger.warning("Text enrichment disabled: %s", e)
        return None
    raise ValueError(f"Unknown provider '{provider}'. Use 'gemini', 'openai' or 'none'.")
