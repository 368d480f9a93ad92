"""
Voice Assistants
Prompts for the manager assistant and receptionist, plus the action executor
"""
from app.services.assistant.executor import ActionExecutor, ActionError
from app.services.assistant.prompts import (
    MANAGER_SYSTEM_PROMPT,
    RECEPTIONIST_SYSTEM_PROMPT,
    build_manager_prompt,
    build_receptionist_prompt,
)

__all__ = [
    "ActionExecutor",
    "ActionError",
    "MANAGER_SYSTEM_PROMPT",
    "RECEPTIONIST_SYSTEM_PROMPT",
    "build_manager_prompt",
    "build_receptionist_prompt",
]
