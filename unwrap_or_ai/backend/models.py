"""Commonly used model identifiers per backend.

Only models that accept ``response_format: json_schema`` are useful as
recovery targets; plain-text models are listed for ``complete`` without a
schema.
"""

from __future__ import annotations

# Groq: fast text generation
LLAMA3_8B = "llama3-8b-8192"
LLAMA3_70B = "llama3-70b-8192"

# Groq: structured output capable
GPT_OSS_20B = "openai/gpt-oss-20b"
GPT_OSS_120B = "openai/gpt-oss-120b"
KIMI_K2 = "moonshotai/kimi-k2-instruct"
LLAMA4_MAVERICK = "meta-llama/llama-4-maverick-17b-128e-instruct"
LLAMA4_SCOUT = "meta-llama/llama-4-scout-17b-16e-instruct"

# Cerebras
QWEN3_CODER_480B = "qwen-3-coder-480b"

# OpenAI
GPT_4O_MINI = "gpt-4o-mini"

STRUCTURED_OUTPUT_MODELS = frozenset(
    {GPT_OSS_20B, GPT_OSS_120B, KIMI_K2, LLAMA4_MAVERICK, LLAMA4_SCOUT, GPT_4O_MINI}
)


def supports_structured_output(model: str) -> bool:
    """Return True for models known to honor ``json_schema`` output."""
    return model in STRUCTURED_OUTPUT_MODELS


__all__ = [
    "LLAMA3_8B",
    "LLAMA3_70B",
    "GPT_OSS_20B",
    "GPT_OSS_120B",
    "KIMI_K2",
    "LLAMA4_MAVERICK",
    "LLAMA4_SCOUT",
    "QWEN3_CODER_480B",
    "GPT_4O_MINI",
    "STRUCTURED_OUTPUT_MODELS",
    "supports_structured_output",
]
