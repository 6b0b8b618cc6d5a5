"""
Output formatter: projects a finished workflow state into the response shape.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

from agents.role_types import DEFAULT_SYNTHESIS_STRATEGY


def format_output(state: Dict[str, Any]) -> Dict[str, Any]:
    """
    Format the workflow state into a structured response.

    Pure projection with defaults for every optional field. ``timestamp`` is
    the request start time, so formatting the same state twice differs only in
    ``metadata.duration`` (milliseconds since start). Errors are surfaced as
    ``warnings``; warnings alongside non-empty content mean partial success.
    """
    start_time = state.get("start_time") or time.time()
    duration = max(0, int((time.time() - start_time) * 1000))

    analysis = state.get("role_analysis")
    identified_roles = [
        {"id": role.id, "name": role.name, "description": role.description}
        for role in analysis.identified_roles
    ] if analysis else []

    agents = {
        role_id: {
            "role_name": output.role_name,
            "role_description": output.role_description,
            "contribution": output.content,
            "reasoning": output.reasoning or "",
            "confidence": output.confidence,
        }
        for role_id, output in (state.get("agent_outputs") or {}).items()
    }

    constraints = state.get("user_constraints")
    strategy = (constraints.synthesis_strategy if constraints else None) or DEFAULT_SYNTHESIS_STRATEGY

    return {
        "id": state.get("execution_id", ""),
        "timestamp": datetime.fromtimestamp(start_time, tz=timezone.utc).isoformat(),
        "request": state.get("user_request", ""),
        "identified_roles": identified_roles,
        "role_analysis": {
            "reasoning": (analysis.reasoning if analysis else None) or "No analysis available",
            "confidence": analysis.confidence if analysis else 0,
        },
        "agents": agents,
        "final_content": state.get("synthesized_content") or "",
        "metadata": {
            "duration": duration,
            "execution_id": state.get("execution_id", ""),
            "synthesis_strategy": strategy.value,
            "warnings": list(state.get("errors") or []),
        },
    }
