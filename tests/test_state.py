"""
Tests for workflow state merging and the output formatter.
"""

from datetime import datetime, timezone

from agents.role_templates import EDITOR, TECHNICAL_EXPERT
from agents.role_types import AgentOutput, RoleAnalysis, SynthesisStrategy, UserConstraints
from orchestrator.formatter import format_output
from orchestrator.state import append_errors, create_initial_state, merge_agent_outputs, merge_state


def _agent_output(role_id, content="Some content."):
    return AgentOutput(
        role_id=role_id,
        role_name=role_id.title(),
        role_description=f"{role_id} role",
        content=content,
        reasoning="",
        confidence=0.8
    )


class TestMergeState:

    def test_agent_outputs_union_by_role_id(self):
        merged = merge_agent_outputs(
            {"a": _agent_output("a", "first"), "b": _agent_output("b")},
            {"a": _agent_output("a", "second"), "c": _agent_output("c")}
        )

        assert set(merged) == {"a", "b", "c"}
        assert merged["a"].content == "second"

    def test_errors_concatenate(self):
        assert append_errors(["one"], ["two", "three"]) == ["one", "two", "three"]
        assert append_errors(None, ["x"]) == ["x"]
        assert append_errors(["x"], None) == ["x"]

    def test_merge_state_applies_rules_and_copies(self):
        state = create_initial_state("Write about lighthouses")
        state["errors"] = ["earlier"]

        merged = merge_state(state, {
            "errors": ["later"],
            "agent_outputs": {"a": _agent_output("a")},
            "current_node": "agent_execution",
        })

        assert merged["errors"] == ["earlier", "later"]
        assert list(merged["agent_outputs"]) == ["a"]
        assert merged["current_node"] == "agent_execution"
        # The input state is left untouched
        assert state["errors"] == ["earlier"]
        assert state["agent_outputs"] == {}


class TestInitialState:

    def test_all_fields_present(self):
        constraints = UserConstraints(tone="dry")
        state = create_initial_state("Write about lighthouses", constraints)

        assert state["user_request"] == "Write about lighthouses"
        assert state["user_constraints"] is constraints
        assert state["role_analysis"] is None
        assert state["agent_outputs"] == {}
        assert state["errors"] == []
        assert state["synthesized_content"] is None
        assert state["start_time"] > 0

    def test_execution_ids_are_unique(self):
        ids = {create_initial_state("Write about lighthouses")["execution_id"] for _ in range(50)}
        assert len(ids) == 50


class TestFormatOutput:

    def test_defaults_for_empty_state(self):
        output = format_output({})

        assert output["id"] == ""
        assert output["request"] == ""
        assert output["identified_roles"] == []
        assert output["role_analysis"] == {"reasoning": "No analysis available", "confidence": 0}
        assert output["agents"] == {}
        assert output["final_content"] == ""
        assert output["metadata"]["synthesis_strategy"] == "blending"
        assert output["metadata"]["warnings"] == []

    def test_projects_finished_state(self):
        state = create_initial_state(
            "Write about lighthouses",
            UserConstraints(synthesis_strategy=SynthesisStrategy.HIGHLIGHTING)
        )
        state.update({
            "role_analysis": RoleAnalysis(identified_roles=[TECHNICAL_EXPERT, EDITOR], reasoning="why", confidence=0.6),
            "agent_outputs": {"technical_expert": _agent_output("technical_expert", "Lamps and lenses.")},
            "synthesized_content": "Lighthouses, explained.",
            "errors": ["Agent editor failed: offline"],
        })

        output = format_output(state)

        assert output["id"] == state["execution_id"]
        assert output["identified_roles"][1] == {
            "id": "editor",
            "name": "Editor",
            "description": EDITOR.description,
        }
        assert output["role_analysis"] == {"reasoning": "why", "confidence": 0.6}
        assert output["agents"]["technical_expert"]["contribution"] == "Lamps and lenses."
        assert output["final_content"] == "Lighthouses, explained."
        assert output["metadata"]["synthesis_strategy"] == "highlighting"
        assert output["metadata"]["warnings"] == ["Agent editor failed: offline"]

    def test_formatting_twice_differs_only_in_duration(self):
        state = create_initial_state("Write about lighthouses")
        state["start_time"] -= 2

        first = format_output(state)
        second = format_output(state)

        assert first["metadata"]["duration"] >= 2000
        first["metadata"].pop("duration")
        second["metadata"].pop("duration")
        assert first == second

    def test_timestamp_is_start_time(self):
        state = create_initial_state("Write about lighthouses")
        state["start_time"] = 0.0 + 1_700_000_000

        output = format_output(state)

        expected = datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert datetime.fromisoformat(output["timestamp"]) == expected
