"""Pydantic DTOs for backend response validation."""

from .completion import ChatCompletionDTO, ChoiceDTO, ChoiceMessageDTO, UsageDTO

__all__ = ["ChatCompletionDTO", "ChoiceDTO", "ChoiceMessageDTO", "UsageDTO"]
