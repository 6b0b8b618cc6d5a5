"""
Dynamic Multi-Agent Writing System

Agents:
- RoleAnalyzer: Picks 2-4 writing roles for a request
- DynamicAgentFactory: Builds (and caches) one agent per role
- UniversalWritingAgent: Writes from one role's perspective under a deadline
- SynthesizerAgent: Merges the role outputs with a synthesis strategy
"""

from agents.base import (
    WritingConfig,
    TextGenerator,
    ChatModelGenerator,
    GenerationResult,
    get_llm,
    clean_output,
    extract_thinking,
    WritingAgentError,
    GenerationError,
    AgentTimeoutError,
    AgentOutputError,
    RoleAnalysisError,
    SynthesisError
)
from agents.role_types import (
    SynthesisStrategy,
    RoleConstraints,
    RoleDefinition,
    RoleAnalysis,
    AgentOutput,
    UserConstraints,
    WritingRequest
)
from agents.role_templates import ROLE_TEMPLATES, get_role_template, get_available_role_ids, create_custom_role
from agents.role_analyzer import RoleAnalyzer, validate_role_analysis, trim_roles
from agents.universal_agent import UniversalWritingAgent
from agents.agent_factory import DynamicAgentFactory
from agents.synthesizer import SynthesizerAgent, SynthesisOutput

__all__ = [
    'WritingConfig', 'TextGenerator', 'ChatModelGenerator', 'GenerationResult',
    'get_llm', 'clean_output', 'extract_thinking',
    'WritingAgentError', 'GenerationError', 'AgentTimeoutError', 'AgentOutputError',
    'RoleAnalysisError', 'SynthesisError',
    'SynthesisStrategy', 'RoleConstraints', 'RoleDefinition', 'RoleAnalysis',
    'AgentOutput', 'UserConstraints', 'WritingRequest',
    'ROLE_TEMPLATES', 'get_role_template', 'get_available_role_ids', 'create_custom_role',
    'RoleAnalyzer', 'validate_role_analysis', 'trim_roles',
    'UniversalWritingAgent',
    'DynamicAgentFactory',
    'SynthesizerAgent', 'SynthesisOutput'
]
