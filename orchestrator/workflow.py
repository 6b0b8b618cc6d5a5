"""
Writing Workflow Orchestrator using LangGraph.

Implements the complete pipeline:
USER REQUEST → ROLE ANALYSIS → AGENT EXECUTION (parallel) → SYNTHESIS → DONE

Any stage may route to ERROR HANDLING instead, which turns the accumulated
errors into a well-formed (content-free) result.

Features:
- Best-effort fan-out: every role runs, failures are recorded, survivors are kept
- Per-agent deadline enforced by the agents themselves
- execute() never raises; unexpected errors become part of the returned state
"""

import functools
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from langgraph.graph import END, START, StateGraph
from pydantic import ValidationError

from agents.agent_factory import DynamicAgentFactory
from agents.base import ChatModelGenerator, TextGenerator, WritingConfig
from agents.role_analyzer import RoleAnalyzer
from agents.role_types import (
    DEFAULT_SYNTHESIS_STRATEGY,
    AgentOutput,
    RoleDefinition,
    SynthesisStrategy,
    UserConstraints,
    WritingRequest,
)
from agents.synthesizer import SynthesizerAgent
from orchestrator.formatter import format_output
from orchestrator.state import WritingGraphState, create_initial_state, merge_state
from utils.enhanced_logger import execution_context, get_logger


ERROR_CONTENT_PREFIX = "An error occurred during content generation: "


def traced_node(node):
    """Run a graph node with trace events filed under the state's execution id."""
    @functools.wraps(node)
    def wrapper(self, state):
        with execution_context(state.get("execution_id")):
            return node(self, state)
    return wrapper


class WritingWorkflow:
    """
    Multi-agent writing workflow orchestrator.

    Coordinates:
    - RoleAnalyzer: which perspectives to write from
    - DynamicAgentFactory / UniversalWritingAgent: one agent per role, in parallel
    - SynthesizerAgent: merge the role outputs
    - Error handler: deterministic error summary, never calls the model

    Build one instance per process; its agent factory (and cache) lives as
    long as the workflow.
    """

    def __init__(self, config: WritingConfig = None, generator: TextGenerator = None,
                 agent_factory: DynamicAgentFactory = None):
        self.config = config or WritingConfig()
        self.generator = generator or ChatModelGenerator()

        # Initialize agents
        self.role_analyzer = RoleAnalyzer(self.generator, self.config)
        self.agent_factory = agent_factory or DynamicAgentFactory(
            self.generator,
            timeout_ms=self.config.agent_timeout_ms,
            enable_caching=self.config.enable_caching,
            temperature=self.config.agent_temperature
        )
        self.synthesizer = SynthesizerAgent(self.generator, self.config.synthesis_temperature)

        # Build graph
        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(WritingGraphState)

        # Add nodes
        workflow.add_node("role_analysis", self._run_role_analysis)
        workflow.add_node("agent_execution", self._run_agents)
        workflow.add_node("synthesis", self._run_synthesis)
        workflow.add_node("error_handling", self._handle_errors)

        # Define edges
        workflow.add_edge(START, "role_analysis")
        workflow.add_conditional_edges(
            "role_analysis",
            self._route_after_role_analysis,
            {
                "agent_execution": "agent_execution",
                "error_handling": "error_handling"
            }
        )
        workflow.add_conditional_edges(
            "agent_execution",
            self._route_after_agent_execution,
            {
                "synthesis": "synthesis",
                "error_handling": "error_handling"
            }
        )
        workflow.add_edge("synthesis", END)
        workflow.add_edge("error_handling", END)

        return workflow.compile()

    # --- Routing ---

    def _route_after_role_analysis(self, state: WritingGraphState) -> str:
        if state.get("errors"):
            print("[ROUTER] Role analysis recorded errors → Error Handling")
            return "error_handling"
        return "agent_execution"

    def _route_after_agent_execution(self, state: WritingGraphState) -> str:
        if state.get("agent_outputs"):
            return "synthesis"
        print("[ROUTER] All agents failed → Error Handling")
        return "error_handling"

    # --- Nodes ---

    @traced_node
    def _run_role_analysis(self, state: WritingGraphState) -> Dict:
        """Determine the writing roles."""
        print("\n" + "=" * 60)
        print("STAGE 1: ROLE ANALYSIS")
        print("=" * 60)

        try:
            analysis = self.role_analyzer.analyze(state["user_request"], state.get("user_constraints"))
        except Exception as e:
            print(f"[ROLE_ANALYZER] Failed: {e}")
            return {"errors": [f"Role analysis failed: {e}"], "current_node": "role_analysis"}

        return {"role_analysis": analysis, "current_node": "role_analysis"}

    @traced_node
    def _run_agents(self, state: WritingGraphState) -> Dict:
        """Run one agent per role in parallel and collect every outcome."""
        print("\n" + "=" * 60)
        print("STAGE 2: AGENT EXECUTION")
        print("=" * 60)

        analysis = state.get("role_analysis")
        if analysis is None:
            return {"errors": ["No role analysis found"], "current_node": "agent_execution"}

        roles = analysis.identified_roles
        request = state["user_request"]
        constraints = state.get("user_constraints")

        print(f"[AGENT_EXECUTOR] Running {len(roles)} agents (parallel)...")

        outcomes: Dict[str, object] = {}
        workers = max(1, min(self.config.max_parallel_agents, len(roles)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._execute_role, role, request, constraints, state.get("execution_id")): role
                for role in roles
            }
            # Wait for all; one failure never cancels its siblings
            for future in as_completed(futures):
                role = futures[future]
                try:
                    outcomes[role.id] = future.result()
                except Exception as e:
                    print(f"[AGENT_EXECUTOR] Agent {role.id} failed: {e}")
                    outcomes[role.id] = e

        # Merge in role order so the result does not depend on completion order
        agent_outputs: Dict[str, AgentOutput] = {}
        errors = []
        for role in roles:
            outcome = outcomes[role.id]
            if isinstance(outcome, AgentOutput):
                agent_outputs[role.id] = outcome
            else:
                errors.append(f"Agent {role.id} failed: {outcome}")

        print(f"[AGENT_EXECUTOR] {len(agent_outputs)}/{len(roles)} agents succeeded")

        update = {"agent_outputs": agent_outputs, "current_node": "agent_execution"}
        if errors:
            update["errors"] = errors
        return update

    def _execute_role(self, role: RoleDefinition, request: str,
                      constraints: Optional[UserConstraints],
                      execution_id: Optional[str] = None) -> AgentOutput:
        with execution_context(execution_id):
            return self._generate_for_role(role, request, constraints)

    def _generate_for_role(self, role: RoleDefinition, request: str,
                           constraints: Optional[UserConstraints]) -> AgentOutput:
        agent = self.agent_factory.create_agent(role)
        logger = get_logger()

        start = time.time()
        try:
            output = agent.generate(request, constraints)
        except Exception as e:
            if logger:
                logger.log_agent(role.id, role.name, error=str(e), duration=time.time() - start)
            raise

        if logger:
            logger.log_agent(role.id, role.name, content=output.content, duration=time.time() - start)
        return output

    @traced_node
    def _run_synthesis(self, state: WritingGraphState) -> Dict:
        """Merge the agent outputs into the final document."""
        print("\n" + "=" * 60)
        print("STAGE 3: SYNTHESIS")
        print("=" * 60)

        outputs = list(state.get("agent_outputs", {}).values())
        constraints = state.get("user_constraints")
        strategy = (constraints.synthesis_strategy if constraints else None) or DEFAULT_SYNTHESIS_STRATEGY

        try:
            result = self.synthesizer.synthesize(outputs, state["user_request"], strategy)
        except Exception as e:
            print(f"[SYNTHESIZER] Failed: {e}")
            return {"errors": [f"Synthesis failed: {e}"], "current_node": "synthesis"}

        return {
            "synthesized_content": result.content,
            "final_reasoning": result.reasoning,
            "current_node": "synthesis"
        }

    @traced_node
    def _handle_errors(self, state: WritingGraphState) -> Dict:
        """Summarize accumulated errors as the final content. Never calls the model."""
        print("\n" + "=" * 60)
        print("ERROR HANDLING")
        print("=" * 60)

        errors = state.get("errors") or []
        message = "; ".join(errors) if errors else "Unknown error"
        print(f"[ERROR_HANDLER] {len(errors)} errors: {message[:100]}")

        logger = get_logger()
        if logger:
            logger.log_error_handling(errors)

        return {
            "synthesized_content": ERROR_CONTENT_PREFIX + message,
            "final_reasoning": "Error occurred, returning error message",
            "current_node": "error_handling"
        }

    # --- Entry points ---

    def execute(self, state: WritingGraphState) -> WritingGraphState:
        """
        Run the workflow on a prepared state.

        Always returns a structurally valid state: anything escaping the graph
        is appended to ``errors`` and a generic error message becomes the
        content. A failing trace logger is reported in ``errors`` as well.
        """
        with execution_context(state.get("execution_id")):
            trace_errors = self._start_trace(state)

            try:
                print("\n" + "#" * 60)
                print("# MULTI-AGENT WRITING WORKFLOW")
                print("#" * 60)
                print(f"Request: {str(state.get('user_request', ''))[:60]}...")
                print(f"Execution: {state.get('execution_id')}")

                final_state = self.graph.invoke(state)
            except Exception as e:
                message = str(e) or type(e).__name__
                print(f"[WORKFLOW] Graph execution error: {message}")
                final_state = merge_state(state, {
                    "errors": [message],
                    "synthesized_content": ERROR_CONTENT_PREFIX + message,
                    "final_reasoning": "Error occurred during graph execution"
                })

            print("\n" + "#" * 60)
            print("# WORKFLOW COMPLETE")
            print("#" * 60)

            trace_errors += self._finish_trace(final_state)

        if trace_errors:
            final_state = merge_state(final_state, {"errors": trace_errors})
        return final_state

    def _start_trace(self, state: WritingGraphState) -> List[str]:
        logger = get_logger()
        if not logger:
            return []
        try:
            constraints = state.get("user_constraints")
            logger.start_execution(
                state.get("execution_id", ""),
                state.get("user_request", ""),
                constraints.model_dump(exclude_none=True, mode="json") if constraints else {}
            )
        except Exception as e:
            print(f"[WORKFLOW] Trace logging error: {e}")
            return [f"Trace logging failed: {e}"]
        return []

    def _finish_trace(self, final_state: WritingGraphState) -> List[str]:
        logger = get_logger()
        if not logger:
            return []
        try:
            logger.finalize_execution(
                final_state.get("synthesized_content") or "",
                final_state.get("errors") or [],
                time.time() - (final_state.get("start_time") or time.time())
            )
        except Exception as e:
            print(f"[WORKFLOW] Trace logging error: {e}")
            return [f"Trace logging failed: {e}"]
        return []

    def run(self, request: str, constraints: Optional[UserConstraints] = None) -> Dict:
        """Create the state, execute the workflow and return the formatted response."""
        final_state = self.execute(create_initial_state(request, constraints))
        return format_output(final_state)


# --- Convenience functions ---

def execute_workflow(state: WritingGraphState, workflow: WritingWorkflow = None) -> WritingGraphState:
    """Execute a prepared state, building a default workflow when none is given."""
    workflow = workflow or WritingWorkflow()
    return workflow.execute(state)


def run_writing(request: str,
                constraints: Optional[UserConstraints] = None,
                config: WritingConfig = None,
                generator: TextGenerator = None) -> Dict:
    """
    Convenience function to run the writing workflow.

    Args:
        request: Writing request
        constraints: Optional caller constraints
        config: WritingConfig object
        generator: TextGenerator backend (defaults to ChatModelGenerator)

    Returns:
        Formatted response (see orchestrator.formatter.format_output)
    """
    workflow = WritingWorkflow(config, generator)
    return workflow.run(request, constraints)


def run_multi_agent_writing(request: str,
                            tone: Optional[str] = None,
                            target_audience: Optional[str] = None,
                            max_length: Optional[int] = None,
                            synthesis_strategy: Optional[str] = None,
                            workflow: WritingWorkflow = None) -> Dict:
    """
    Compact entry point for tool-style callers.

    Validates the arguments, runs the workflow and returns a short summary.
    Defaults to the interleaving strategy. Never raises.
    """
    try:
        validated = WritingRequest(
            request=request,
            constraints=UserConstraints(
                tone=tone,
                target_audience=target_audience,
                max_length=max_length,
                synthesis_strategy=synthesis_strategy or SynthesisStrategy.INTERLEAVING
            )
        )
    except ValidationError as e:
        return {"success": False, "error": f"Invalid request: {e}"}

    try:
        workflow = workflow or WritingWorkflow()
        output = workflow.run(validated.request, validated.constraints)
    except Exception as e:
        return {"success": False, "error": str(e) or "Failed to generate content with multi-agent system"}

    return {
        "success": True,
        "content": output["final_content"],
        "metadata": {
            "roles": ", ".join(role["name"] for role in output["identified_roles"]),
            "strategy": output["metadata"]["synthesis_strategy"],
            "duration": output["metadata"]["duration"],
            "agents": [
                {"role": agent["role_name"], "confidence": agent["confidence"]}
                for agent in output["agents"].values()
            ],
            "warnings": output["metadata"]["warnings"]
        }
    }
