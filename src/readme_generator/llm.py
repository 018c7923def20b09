import logging
import re
from functools import lru_cache

from openai import AsyncOpenAI

from readme_generator import config, prompts

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
README_TIMEOUT = 120.0

_WRAPPING_FENCE = re.compile(r"\A```(?:markdown|md)[ \t]*\n(.*)\n```\s*\Z", re.DOTALL | re.IGNORECASE)


class LLMError(Exception):
    pass


@lru_cache
def _get_client(api_key: str, base_url: str) -> AsyncOpenAI:
    return AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)


def strip_wrapping_fence(text: str) -> str:
    text = text.strip()
    m = _WRAPPING_FENCE.match(text)
    return m.group(1).strip() if m else text


async def generate_readme(
    context: str,
    guidance: str,
    repo_name: str,
    repo_description: str,
) -> str:
    cfg = config.get_config()
    if not cfg.llm.openai_api_key:
        raise LLMError("OPENAI_API_KEY is not configured")
    client = _get_client(cfg.llm.openai_api_key, cfg.llm.openai_base_url)

    messages = [
        {"role": "system", "content": prompts.README_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": prompts.build_readme_prompt(context, guidance, repo_name, repo_description),
        },
    ]

    last_exc: Exception | None = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            response = await client.chat.completions.create(
                model=cfg.llm.model_name,
                messages=messages,
                temperature=0.3,
                timeout=README_TIMEOUT,
            )
        except Exception as exc:
            last_exc = exc
            logger.warning(f"README generation attempt {attempt}/{MAX_RETRIES} failed: {exc}")
            continue

        text = response.choices[0].message.content
        if not text or not text.strip():
            last_exc = LLMError("LLM returned empty response")
            logger.warning(f"README generation attempt {attempt}/{MAX_RETRIES}: empty response")
            continue

        return strip_wrapping_fence(text)

    raise LLMError(f"README generation failed after {MAX_RETRIES} attempts: {last_exc}")
