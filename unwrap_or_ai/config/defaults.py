"""unwrap_or_ai.config.defaults
============================

Small, stable default values for the supported chat-completion backends.
They can be overridden via environment variables, an external config file,
or in-code overrides (see :func:`unwrap_or_ai.config.get_backend_config`).

This module avoids importing from other packages to prevent circular
dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Backend selection ----
DEFAULT_BACKEND = "groq"

# ---- Groq ----
GROQ_DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
GROQ_DEFAULT_MODEL = "moonshotai/kimi-k2-instruct"

# ---- Cerebras ----
CEREBRAS_DEFAULT_BASE_URL = "https://api.cerebras.ai/v1"
CEREBRAS_DEFAULT_MODEL = "qwen-3-coder-480b"

# ---- OpenAI ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"

# ---- Recovery ----
DEFAULT_POLICY = "propagate"

__all__ = [
    "DEFAULT_BACKEND",
    "GROQ_DEFAULT_BASE_URL",
    "GROQ_DEFAULT_MODEL",
    "CEREBRAS_DEFAULT_BASE_URL",
    "CEREBRAS_DEFAULT_MODEL",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "DEFAULT_POLICY",
]
