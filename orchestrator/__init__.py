"""
Orchestrator: LangGraph-based workflow coordination.

Implements the multi-agent writing workflow:
1. Role Analysis → pick 2-4 writing roles
2. Agent Execution → one agent per role, in parallel
3. Synthesis → merge the role outputs with a strategy
4. Error Handling → error summary when a stage leaves nothing to continue with
"""

from orchestrator.state import WritingGraphState, create_initial_state, merge_state
from orchestrator.formatter import format_output
from orchestrator.workflow import WritingWorkflow, execute_workflow, run_writing, run_multi_agent_writing

__all__ = [
    'WritingGraphState', 'create_initial_state', 'merge_state',
    'format_output',
    'WritingWorkflow', 'execute_workflow', 'run_writing', 'run_multi_agent_writing'
]
