"""
Universal Writing Agent: Adapts to any role definition.

Responsibilities:
1. PROMPT: Frame the task from the role's perspective, add role and caller constraints
2. DEADLINE: Run the generation call under a per-agent timeout
3. OUTPUT: Wrap the text and reasoning trace into a validated AgentOutput

One instance is bound to one RoleDefinition. Agents for different roles run
in PARALLEL during the agent execution stage.
"""

import concurrent.futures
import time
from typing import Optional

from pydantic import ValidationError

from agents.base import (
    DEFAULT_AGENT_TIMEOUT_MS,
    AgentOutputError,
    AgentTimeoutError,
    GenerationResult,
    TextGenerator,
)
from agents.role_types import AgentOutput, RoleDefinition, UserConstraints
from utils.enhanced_logger import get_logger


# Placeholder until confidence is derived from the model
DEFAULT_CONFIDENCE = 0.8

# Rough characters-per-word ratio for turning a character budget into words
CHARS_PER_WORD = 4


class UniversalWritingAgent:
    """
    Executes one role.

    The generation call gets the deadline passed through (so the backend can
    abort its request) and is also raced against it here. A call that misses
    the deadline is abandoned: its worker thread is not joined and a late
    result is discarded.
    """

    def __init__(self, role_definition: RoleDefinition, generator: TextGenerator,
                 timeout_ms: int = DEFAULT_AGENT_TIMEOUT_MS, temperature: float = 0.7):
        self.role_definition = role_definition
        self.generator = generator
        self.timeout_ms = timeout_ms
        self.temperature = temperature

    def generate(self, request: str, constraints: Optional[UserConstraints] = None) -> AgentOutput:
        """
        Generate content from this agent's role perspective.

        Raises:
            AgentTimeoutError: the deadline passed before the model replied
            GenerationError: the backend failed
            AgentOutputError: the reply violates the AgentOutput invariants
        """
        role = self.role_definition
        prompt = self.build_prompt(request, constraints)

        print(f"[AGENT:{role.id}] Writing as {role.name}...")

        start = time.time()
        result = self._generate_with_deadline(prompt)
        duration = time.time() - start

        logger = get_logger()
        if logger:
            logger.log_llm_call(
                agent_name=role.id,
                operation="role_generation",
                system_prompt=role.prompt_template,
                user_prompt=prompt,
                raw_output=result.raw or result.text,
                cleaned_output=result.text,
                temperature=self.temperature,
                duration=duration
            )

        try:
            output = AgentOutput(
                role_id=role.id,
                role_name=role.name,
                role_description=role.description,
                content=result.text,
                reasoning=result.reasoning or f"Generated as {role.name}",
                confidence=DEFAULT_CONFIDENCE,
                metadata={
                    "priority": role.priority,
                    "constraints": role.constraints.model_dump(exclude_none=True) if role.constraints else None,
                }
            )
        except ValidationError as e:
            raise AgentOutputError(f"Agent {role.id} produced invalid output: {e}") from e

        print(f"[AGENT:{role.id}] Done: {len(output.content)} chars ({duration:.2f}s)")
        return output

    def _generate_with_deadline(self, prompt: str) -> GenerationResult:
        timeout_s = self.timeout_ms / 1000
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"agent-{self.role_definition.id}"
        )
        future = executor.submit(
            self.generator.generate,
            self.role_definition.prompt_template,
            prompt,
            temperature=self.temperature,
            timeout=timeout_s
        )
        try:
            return future.result(timeout=timeout_s)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise AgentTimeoutError(self.role_definition.id, self.timeout_ms) from None
        finally:
            executor.shutdown(wait=False)

    def build_prompt(self, request: str, constraints: Optional[UserConstraints] = None) -> str:
        """Build the user prompt: task, role guidelines, then caller requirements."""
        role = self.role_definition
        prompt = f"Write content for the following request from the perspective of a {role.name}:\n\n{request}"

        role_constraints = role.constraints
        if role_constraints:
            prompt += "\n\nRole-specific guidelines:"
            if role_constraints.tone:
                prompt += f"\n- Tone: {role_constraints.tone}"
            if role_constraints.focus_areas:
                prompt += f"\n- Focus on: {', '.join(role_constraints.focus_areas)}"

        if constraints:
            prompt += "\n\nAdditional requirements:"
            if constraints.max_length:
                prompt += f"\n- Maximum length: approximately {constraints.max_length // CHARS_PER_WORD} words"
            if constraints.tone:
                prompt += f"\n- Overall tone: {constraints.tone}"
            if constraints.target_audience:
                prompt += f"\n- Target audience: {constraints.target_audience}"

        prompt += "\n\nProvide well-structured markdown content that fulfills your role."
        return prompt
