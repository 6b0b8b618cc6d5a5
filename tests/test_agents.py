"""
Tests for the universal agent and the agent factory.
"""

import time

import pytest

from agents.agent_factory import DynamicAgentFactory
from agents.base import AgentOutputError, AgentTimeoutError, GenerationError
from agents.role_templates import TECHNICAL_EXPERT
from agents.role_types import UserConstraints
from agents.universal_agent import DEFAULT_CONFIDENCE, UniversalWritingAgent
from tests.conftest import FakeGenerator, make_role


class TestUniversalAgentPrompt:

    def test_role_and_user_constraints(self):
        agent = UniversalWritingAgent(TECHNICAL_EXPERT, FakeGenerator())

        prompt = agent.build_prompt(
            "Write a short guide on brewing coffee",
            UserConstraints(max_length=2000, tone="casual", target_audience="beginners")
        )

        assert prompt.startswith("Write content for the following request from the perspective of a Technical Expert")
        assert "- Tone: professional" in prompt
        assert "- Focus on: accuracy, detail, structure" in prompt
        assert "approximately 500 words" in prompt
        assert "- Overall tone: casual" in prompt
        assert "- Target audience: beginners" in prompt
        # Role guidelines come before caller requirements
        assert prompt.index("Role-specific guidelines") < prompt.index("Additional requirements")

    def test_plain_role_without_constraints(self):
        agent = UniversalWritingAgent(make_role("plain"), FakeGenerator())

        prompt = agent.build_prompt("Write a limerick about cats")

        assert "Role-specific guidelines" not in prompt
        assert "Additional requirements" not in prompt


class TestUniversalAgentGenerate:

    def test_builds_agent_output(self):
        generator = FakeGenerator()
        agent = UniversalWritingAgent(TECHNICAL_EXPERT, generator, timeout_ms=5_000)

        output = agent.generate("Write a short guide on brewing coffee")

        assert output.role_id == "technical_expert"
        assert output.role_name == "Technical Expert"
        assert output.content.startswith("## Technical Expert")
        assert output.reasoning == "Generated as Technical Expert"
        assert output.confidence == DEFAULT_CONFIDENCE
        assert output.metadata["priority"] == 1
        assert output.metadata["constraints"]["tone"] == "professional"

    def test_uses_role_prompt_as_system_prompt_and_passes_deadline(self):
        generator = FakeGenerator()
        agent = UniversalWritingAgent(TECHNICAL_EXPERT, generator, timeout_ms=1_500)

        agent.generate("Write a short guide on brewing coffee")

        call = generator.calls_of("agent")[0]
        assert call["system_prompt"] == TECHNICAL_EXPERT.prompt_template
        assert call["timeout"] == 1.5

    def test_timeout_is_typed_and_names_the_role(self):
        generator = FakeGenerator(delays={"Slow Writer": 1.0})
        agent = UniversalWritingAgent(make_role("slow_writer"), generator, timeout_ms=100)

        start = time.time()
        with pytest.raises(AgentTimeoutError) as excinfo:
            agent.generate("Write something slowly")

        assert time.time() - start < 0.9
        assert excinfo.value.role_id == "slow_writer"
        assert excinfo.value.timeout_ms == 100
        assert "slow_writer" in str(excinfo.value) and "100ms" in str(excinfo.value)

    def test_empty_content_is_rejected(self):
        generator = FakeGenerator(role_replies={"Blank": "   "})
        agent = UniversalWritingAgent(make_role("blank"), generator)

        with pytest.raises(AgentOutputError, match="blank"):
            agent.generate("Write nothing at all")

    def test_generation_error_propagates(self):
        generator = FakeGenerator(role_replies={"Broken": GenerationError("model refused")})
        agent = UniversalWritingAgent(make_role("broken"), generator)

        with pytest.raises(GenerationError, match="model refused"):
            agent.generate("Write anything")


class TestAgentFactory:

    def test_same_id_returns_same_instance(self):
        factory = DynamicAgentFactory(FakeGenerator())

        first = factory.create_agent(make_role("writer"))
        second = factory.create_agent(make_role("writer"))

        assert first is second
        assert factory.cache_size() == 1

    def test_caching_disabled_returns_new_instances(self):
        factory = DynamicAgentFactory(FakeGenerator(), enable_caching=False)

        first = factory.create_agent(make_role("writer"))
        second = factory.create_agent(make_role("writer"))

        assert first is not second
        assert factory.cache_size() == 0

    def test_cache_ignores_changed_role_content(self):
        factory = DynamicAgentFactory(FakeGenerator())

        original = factory.create_agent(make_role("writer", prompt_template="Old instructions"))
        reused = factory.create_agent(make_role("writer", prompt_template="New instructions"))

        assert reused is original
        assert reused.role_definition.prompt_template == "Old instructions"

    def test_clear_cache(self):
        factory = DynamicAgentFactory(FakeGenerator())
        first = factory.create_agent(make_role("a"))
        factory.create_agent(make_role("b"))
        assert factory.cache_size() == 2

        factory.clear_cache()

        assert factory.cache_size() == 0
        assert factory.create_agent(make_role("a")) is not first

    def test_agents_inherit_factory_settings(self):
        generator = FakeGenerator()
        factory = DynamicAgentFactory(generator, timeout_ms=1234, temperature=0.2)

        agent = factory.create_agent(make_role("a"))

        assert agent.timeout_ms == 1234
        assert agent.temperature == 0.2
        assert agent.generator is generator
