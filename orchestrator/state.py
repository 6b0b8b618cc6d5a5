"""
Workflow state for the multi-agent writing graph.

Every stage returns a partial update. Fields merge by a declared rule:
- agent_outputs: key-wise union, later value wins per role id
- errors: concatenation (never cleared within a run)
- everything else: overwrite

The same reducers drive the LangGraph channels (via Annotated) and
merge_state(), so both paths apply identical rules.
"""

import time
import uuid
from typing import Annotated, Any, Callable, Dict, List, Optional

from typing_extensions import TypedDict

from agents.role_types import AgentOutput, RoleAnalysis, UserConstraints


def merge_agent_outputs(current: Optional[Dict[str, AgentOutput]],
                        update: Optional[Dict[str, AgentOutput]]) -> Dict[str, AgentOutput]:
    return {**(current or {}), **(update or {})}


def append_errors(current: Optional[List[str]], update: Optional[List[str]]) -> List[str]:
    return [*(current or []), *(update or [])]


class WritingGraphState(TypedDict):
    """
    Complete workflow state. One instance per request, never shared.
    """

    # Input
    user_request: str
    user_constraints: Optional[UserConstraints]

    # Role analysis
    role_analysis: Optional[RoleAnalysis]

    # Agent outputs keyed by role id
    agent_outputs: Annotated[Dict[str, AgentOutput], merge_agent_outputs]

    # Final output
    synthesized_content: Optional[str]
    final_reasoning: Optional[str]

    # Metadata
    execution_id: str
    start_time: float  # epoch seconds
    current_node: Optional[str]
    errors: Annotated[List[str], append_errors]


STATE_REDUCERS: Dict[str, Callable[[Any, Any], Any]] = {
    "agent_outputs": merge_agent_outputs,
    "errors": append_errors,
}


def merge_state(state: WritingGraphState, update: Dict[str, Any]) -> WritingGraphState:
    """Apply a partial update to a state, returning a new state."""
    merged = dict(state)
    for key, value in update.items():
        reducer = STATE_REDUCERS.get(key)
        merged[key] = reducer(merged.get(key), value) if reducer else value
    return merged


def create_initial_state(user_request: str,
                         constraints: Optional[UserConstraints] = None) -> WritingGraphState:
    """Fresh state for one request with a new execution id."""
    return {
        "user_request": user_request,
        "user_constraints": constraints,
        "role_analysis": None,
        "agent_outputs": {},
        "synthesized_content": None,
        "final_reasoning": None,
        "execution_id": uuid.uuid4().hex,
        "start_time": time.time(),
        "current_node": None,
        "errors": [],
    }
