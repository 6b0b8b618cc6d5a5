"""
Synthesizer Agent: Combines the outputs of several role agents.

- 0 outputs: SynthesisError
- 1 output: returned verbatim, no model call
- 2+ outputs: one synthesis call with strategy-specific instructions
"""

import time
from typing import Dict, List, Sequence, Union

from agents.base import SynthesisError, TextGenerator
from agents.role_types import DEFAULT_SYNTHESIS_STRATEGY, AgentOutput, SynthesisStrategy
from utils.enhanced_logger import get_logger


SYNTHESIZER_SYSTEM_PROMPT = """You are an expert content synthesizer. You combine multiple writing perspectives into a single, cohesive, high-quality piece of content.

Your responsibilities:
- Merge content from multiple specialized agents while preserving their unique insights
- Ensure smooth transitions between different perspectives
- Eliminate redundancy while keeping coverage complete
- Resolve contradictions by choosing the most appropriate information
- Produce well-structured markdown that flows naturally

Output ONLY the final content. No preamble, no commentary."""


STRATEGY_INSTRUCTIONS: Dict[SynthesisStrategy, str] = {
    SynthesisStrategy.INTERLEAVING: """
### Synthesis Instructions (interleaving)
- Divide the content into logical sections: introduction, main points, conclusion
- Interleave insights from different agents throughout each section
- Bridge the perspectives with transition sentences
- Use the strongest opening from any agent and the most impactful closing""",

    SynthesisStrategy.LAYERING: """
### Synthesis Instructions (layering)
- Stack content sequentially in the order the agents are listed (by priority)
- Use clear section headers to label each perspective
- Make each layer add unique value, with no redundancy between layers
- Conclude with a short summary tying the layers together""",

    SynthesisStrategy.HIGHLIGHTING: """
### Synthesis Instructions (highlighting)
- Present each agent's contribution as a distinct, clearly labeled section
- Open with a brief introduction explaining the multi-perspective approach
- Close with a summary that compares and contrasts the viewpoints""",

    SynthesisStrategy.BLENDING: """
### Synthesis Instructions (blending)
- Create entirely new, unified content inspired by all agent outputs
- Do not concatenate the inputs; rewrite their key ideas in one voice
- Make sure every important point from each agent is represented
- The result must read as a single, well-crafted piece""",
}


def resolve_strategy(strategy: Union[SynthesisStrategy, str, None]) -> SynthesisStrategy:
    """Map a strategy value to the enum; anything unrecognised becomes blending."""
    if isinstance(strategy, SynthesisStrategy):
        return strategy
    try:
        return SynthesisStrategy(strategy)
    except ValueError:
        return DEFAULT_SYNTHESIS_STRATEGY


class SynthesisOutput:
    """Final merged content and the reasoning behind it."""
    def __init__(self, content: str, reasoning: str, strategy: SynthesisStrategy, sources: int):
        self.content = content
        self.reasoning = reasoning
        self.strategy = strategy
        self.sources = sources

    def to_dict(self) -> Dict:
        return {
            "content": self.content,
            "reasoning": self.reasoning,
            "strategy": self.strategy.value,
            "sources": self.sources
        }


class SynthesizerAgent:
    """Merges N AgentOutputs into one document."""

    def __init__(self, generator: TextGenerator, temperature: float = 0.7):
        self.generator = generator
        self.temperature = temperature

    def synthesize(self, outputs: Sequence[AgentOutput], request: str,
                   strategy: Union[SynthesisStrategy, str] = DEFAULT_SYNTHESIS_STRATEGY) -> SynthesisOutput:
        resolved = resolve_strategy(strategy)

        if not outputs:
            raise SynthesisError("No agent outputs to synthesize")

        if len(outputs) == 1:
            only = outputs[0]
            print(f"[SYNTHESIZER] Single output from {only.role_name} - returning directly")
            result = SynthesisOutput(
                content=only.content,
                reasoning=f"Single agent output from {only.role_name}",
                strategy=resolved,
                sources=1
            )
            self._log(result, 0.0)
            return result

        print(f"[SYNTHESIZER] Combining {len(outputs)} outputs ({resolved.value})...")

        prompt = build_synthesis_prompt(outputs, request, resolved)
        start = time.time()
        reply = self.generator.generate(SYNTHESIZER_SYSTEM_PROMPT, prompt, temperature=self.temperature)
        duration = time.time() - start

        logger = get_logger()
        if logger:
            logger.log_llm_call(
                agent_name="Synthesizer",
                operation="synthesis",
                system_prompt=SYNTHESIZER_SYSTEM_PROMPT,
                user_prompt=prompt,
                raw_output=reply.raw or reply.text,
                cleaned_output=reply.text,
                temperature=self.temperature,
                duration=duration
            )

        result = SynthesisOutput(
            content=reply.text,
            reasoning=reply.reasoning or f"Synthesized content using {resolved.value} strategy",
            strategy=resolved,
            sources=len(outputs)
        )
        self._log(result, duration)
        return result

    def _log(self, result: SynthesisOutput, duration: float):
        logger = get_logger()
        if logger:
            logger.log_synthesis(
                strategy=result.strategy.value,
                sources=result.sources,
                content=result.content,
                reasoning=result.reasoning,
                duration=duration
            )


def order_outputs(outputs: Sequence[AgentOutput], strategy: SynthesisStrategy) -> List[AgentOutput]:
    """Layering stacks by role priority; every other strategy keeps the given order."""
    if strategy is SynthesisStrategy.LAYERING:
        return sorted(outputs, key=lambda o: o.metadata.get("priority") or 0)
    return list(outputs)


def build_synthesis_prompt(outputs: Sequence[AgentOutput], request: str,
                           strategy: SynthesisStrategy) -> str:
    """Build the synthesis prompt: every output labelled by role, then strategy instructions."""
    prompt = f"### Original Request\n{request}\n\n"
    prompt += f"### Synthesis Strategy: {strategy.value}\n\n"
    prompt += f"You have {len(outputs)} agent outputs to combine:\n\n"

    for output in order_outputs(outputs, strategy):
        prompt += f"=== {output.role_name} ({output.role_description}) ===\n"
        prompt += f"{output.content}\n\n"
        if output.reasoning:
            prompt += f"Agent's reasoning: {output.reasoning}\n\n"

    prompt += STRATEGY_INSTRUCTIONS[strategy]
    return prompt
