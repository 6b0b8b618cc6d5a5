"""
Base utilities shared across all writing agents.

Provides:
- Backend configuration for an OpenAI-compatible chat endpoint
- The text-generation capability (plain and structured) used by every agent
- Output cleaning (remove <think> blocks, extract JSON replies)
- Configuration dataclass and the error hierarchy
"""

import json
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from dotenv import load_dotenv
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError

load_dotenv()

# --- Configuration ---
LLM_BASE_URL = os.environ.get("WRITING_LLM_BASE_URL", "http://localhost:8000/v1")
LLM_API_KEY = os.environ.get("WRITING_LLM_API_KEY", "EMPTY")
MODEL_NAME = os.environ.get("WRITING_LLM_MODEL", "Qwen/Qwen3-8B")

DEFAULT_AGENT_TIMEOUT_MS = 30_000

SchemaT = TypeVar("SchemaT", bound=BaseModel)


@dataclass
class WritingConfig:
    """Configuration for the multi-agent writing workflow."""
    # Role count bounds
    min_roles: int = 2
    max_roles: int = 4

    # Per-agent deadline
    agent_timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS

    # Agent factory
    enable_caching: bool = True

    # Role analysis: substitute default roles instead of failing the stage
    fallback_on_error: bool = True

    # Sampling temperatures per stage
    analysis_temperature: float = 0.7
    agent_temperature: float = 0.7
    synthesis_temperature: float = 0.7

    # Upper bound on concurrently running agents
    max_parallel_agents: int = 4

    # Detailed logging
    enable_detailed_logging: bool = True


# --- Errors ---

class WritingAgentError(Exception):
    """Base class for every failure raised by the writing agents."""


class GenerationError(WritingAgentError):
    """The text-generation backend failed or returned an unusable reply."""


class AgentTimeoutError(WritingAgentError):
    """An agent did not produce its output before its deadline."""

    def __init__(self, role_id: str, timeout_ms: int):
        self.role_id = role_id
        self.timeout_ms = timeout_ms
        super().__init__(f"Agent {role_id} timed out after {timeout_ms}ms")


class AgentOutputError(WritingAgentError):
    """An agent produced output that violates the AgentOutput invariants."""


class RoleAnalysisError(WritingAgentError):
    """Role analysis produced no usable set of roles."""


class SynthesisError(WritingAgentError):
    """Synthesis could not be performed."""


# --- Text generation ---

@dataclass
class GenerationResult:
    """Reply from a single generation call."""
    text: str
    reasoning: str = ""
    raw: str = ""


class TextGenerator(ABC):
    """
    The text-generation capability consumed by the agents.

    Implementations must honour ``timeout`` (seconds) where the backend allows
    it; callers additionally enforce their own deadline.
    """

    @abstractmethod
    def generate(self, system_prompt: str, user_prompt: str,
                 temperature: float = 0.7,
                 timeout: Optional[float] = None) -> GenerationResult:
        ...

    @abstractmethod
    def generate_structured(self, system_prompt: str, user_prompt: str,
                            schema: Type[SchemaT],
                            temperature: float = 0.7,
                            timeout: Optional[float] = None) -> SchemaT:
        ...


def get_llm(temperature: float = 0.7, timeout: Optional[float] = None) -> ChatOpenAI:
    """Get a configured chat model bound to the OpenAI-compatible endpoint."""
    return ChatOpenAI(
        model=MODEL_NAME,
        base_url=LLM_BASE_URL,
        api_key=LLM_API_KEY,
        temperature=temperature,
        timeout=timeout,
        max_retries=0
    )


class ChatModelGenerator(TextGenerator):
    """TextGenerator backed by langchain's ChatOpenAI."""

    def _invoke(self, system_prompt: str, user_prompt: str,
                temperature: float, timeout: Optional[float]) -> GenerationResult:
        llm = get_llm(temperature=temperature, timeout=timeout)
        try:
            response = llm.invoke([
                SystemMessage(content=system_prompt),
                HumanMessage(content=user_prompt)
            ])
        except Exception as e:
            raise GenerationError(f"Generation failed: {e}") from e

        raw = response.content if isinstance(response.content, str) else str(response.content)

        # vLLM reasoning parsers put the trace in additional_kwargs
        reasoning = response.additional_kwargs.get("reasoning_content") or extract_thinking(raw)

        return GenerationResult(text=clean_output(raw), reasoning=reasoning or "", raw=raw)

    def generate(self, system_prompt: str, user_prompt: str,
                 temperature: float = 0.7,
                 timeout: Optional[float] = None) -> GenerationResult:
        return self._invoke(system_prompt, user_prompt, temperature, timeout)

    def generate_structured(self, system_prompt: str, user_prompt: str,
                            schema: Type[SchemaT],
                            temperature: float = 0.7,
                            timeout: Optional[float] = None) -> SchemaT:
        result = self._invoke(system_prompt, user_prompt, temperature, timeout)
        return parse_structured(result.text, schema)


# --- Output helpers ---

def clean_output(content: str) -> str:
    """Clean LLM output by removing thinking blocks and common preambles."""
    # Remove <think>...</think> blocks
    content = re.sub(r'<think>.*?</think>', '', content, flags=re.DOTALL)

    preambles = [
        "Here is the ",
        "Here's the ",
        "Below is ",
    ]
    for p in preambles:
        if content.lower().startswith(p.lower()):
            # Drop the preamble line only when it is short
            idx = content.find('\n')
            if 0 < idx < 100:
                content = content[idx:].strip()

    return content.strip()


def extract_thinking(content: str) -> str:
    """Extract the <think> block from LLM output for logging."""
    match = re.search(r'<think>(.*?)</think>', content, flags=re.DOTALL)
    return match.group(1).strip() if match else ""


def extract_json(content: str) -> str:
    """Pull the JSON payload out of a reply that may wrap it in code fences."""
    json_text = content
    if "```json" in content:
        json_text = content.split("```json")[1].split("```")[0]
    elif "```" in content:
        json_text = content.split("```")[1].split("```")[0]
    else:
        start, end = content.find("{"), content.rfind("}")
        if 0 <= start < end:
            json_text = content[start:end + 1]
    return json_text.strip()


def parse_structured(content: str, schema: Type[SchemaT]) -> SchemaT:
    """Parse a JSON reply into ``schema``, raising GenerationError when it does not fit."""
    try:
        data = json.loads(extract_json(content))
    except json.JSONDecodeError as e:
        raise GenerationError(f"Reply is not valid JSON: {e}") from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Reply does not match {schema.__name__}: {e}") from e
