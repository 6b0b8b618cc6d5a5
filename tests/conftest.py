"""
Shared fixtures: a scripted generation backend and sample roles.

No test talks to a real model.
"""

import re
import threading
import time

import pytest

from agents.base import GenerationResult, TextGenerator, WritingConfig
from agents.role_templates import EDITOR, EDUCATOR, TECHNICAL_EXPERT
from agents.role_types import RoleAnalysis, RoleDefinition
from agents.synthesizer import SYNTHESIZER_SYSTEM_PROMPT
from orchestrator.workflow import WritingWorkflow
from utils.enhanced_logger import execution_context, set_logger


_ROLE_NAME_RE = re.compile(r"from the perspective of a (.+?):")


class FakeGenerator(TextGenerator):
    """
    Scripted stand-in for the model backend.

    - analysis: RoleAnalysis returned by generate_structured (or an Exception to raise)
    - role_replies: role name -> reply text or Exception
    - delays: role name -> seconds to sleep before replying
    - synthesis_reply: text (or Exception) for the synthesis call
    """

    def __init__(self, analysis=None, role_replies=None, delays=None,
                 synthesis_reply="# Final Document\n\nMerged content from every role."):
        self.analysis = analysis
        self.role_replies = role_replies or {}
        self.delays = delays or {}
        self.synthesis_reply = synthesis_reply
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, kind, system_prompt, user_prompt, timeout):
        with self._lock:
            self.calls.append({
                "kind": kind,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "timeout": timeout,
            })

    def calls_of(self, kind):
        return [c for c in self.calls if c["kind"] == kind]

    def generate(self, system_prompt, user_prompt, temperature=0.7, timeout=None):
        if system_prompt == SYNTHESIZER_SYSTEM_PROMPT:
            self._record("synthesis", system_prompt, user_prompt, timeout)
            reply = self.synthesis_reply
        else:
            self._record("agent", system_prompt, user_prompt, timeout)
            match = _ROLE_NAME_RE.search(user_prompt)
            role_name = match.group(1) if match else "Unknown"
            delay = self.delays.get(role_name)
            if delay:
                time.sleep(delay)
            reply = self.role_replies.get(role_name, f"## {role_name}\n\nContent written as {role_name}.")

        if isinstance(reply, Exception):
            raise reply
        return GenerationResult(text=reply, raw=reply)

    def generate_structured(self, system_prompt, user_prompt, schema, temperature=0.7, timeout=None):
        self._record("structured", system_prompt, user_prompt, timeout)
        if isinstance(self.analysis, Exception):
            raise self.analysis
        return self.analysis


def make_role(role_id, priority=1, name=None, **kwargs):
    return RoleDefinition(
        id=role_id,
        name=name or role_id.replace("_", " ").title(),
        description=kwargs.pop("description", f"Writes as {role_id}"),
        prompt_template=kwargs.pop("prompt_template", f"You are {role_id}."),
        priority=priority,
        **kwargs
    )


@pytest.fixture(autouse=True)
def no_global_logger():
    set_logger(None)
    with execution_context(None):
        yield
    set_logger(None)


@pytest.fixture
def coffee_analysis():
    return RoleAnalysis(
        identified_roles=[TECHNICAL_EXPERT, EDUCATOR, EDITOR],
        reasoning="Brewing needs accuracy, teaching, and a clean edit",
        confidence=0.9
    )


@pytest.fixture
def fake_generator(coffee_analysis):
    return FakeGenerator(analysis=coffee_analysis)


@pytest.fixture
def config():
    return WritingConfig(agent_timeout_ms=2_000)


@pytest.fixture
def workflow(fake_generator, config):
    return WritingWorkflow(config, fake_generator)
