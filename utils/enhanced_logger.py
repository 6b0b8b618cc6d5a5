"""
Execution trace logger for the multi-agent writing workflow.

Captures everything each stage does for debugging and analysis:
- Full prompts (system + user)
- Raw LLM outputs (including <think> blocks) and cleaned outputs
- Reasoning traces
- Per-agent success/failure with timing
- Final content and warnings

Installed process-wide with set_logger(); when no logger is installed the
agents record nothing.

Events are filed under the execution id active in the calling context (see
execution_context()), so concurrent workflow runs keep separate traces.
"""

import json
import os
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import datetime
from statistics import mean
from typing import Any, Dict, List, Optional


_current_execution_id: ContextVar[Optional[str]] = ContextVar("current_execution_id", default=None)


@contextmanager
def execution_context(execution_id: Optional[str]):
    """File trace events emitted inside the block under ``execution_id``."""
    token = _current_execution_id.set(execution_id)
    try:
        yield
    finally:
        _current_execution_id.reset(token)


@dataclass
class LLMCallLog:
    """Complete log of a single LLM call."""
    call_id: str
    timestamp: str
    agent_name: str
    operation: str  # e.g. "role_analysis", "role_generation", "synthesis"

    # Input
    system_prompt: str
    user_prompt: str
    temperature: float

    # Output
    raw_output: str
    cleaned_output: str
    thinking_content: str

    duration_seconds: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class StageStepLog:
    """Log of one stage (or one agent inside the fan-out stage)."""
    step_id: str
    stage: str
    timestamp: str

    input_summary: str
    output_summary: str

    structured_output: Dict = field(default_factory=dict)
    success: bool = True
    total_duration_seconds: float = 0.0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class ExecutionLog:
    """Complete detailed log for one workflow execution."""
    execution_id: str
    request: str
    constraints: Dict
    timestamp: str

    llm_calls: List[LLMCallLog] = field(default_factory=list)
    role_analysis_log: Optional[StageStepLog] = None
    agent_logs: List[StageStepLog] = field(default_factory=list)
    synthesis_log: Optional[StageStepLog] = None
    error_log: Optional[StageStepLog] = None

    final_content: str = ""
    warnings: List[str] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'execution_id': self.execution_id,
            'request': self.request[:500] + '...' if len(self.request) > 500 else self.request,
            'constraints': self.constraints,
            'timestamp': self.timestamp,
            'llm_calls': [c.to_dict() for c in self.llm_calls],
            'role_analysis_log': self.role_analysis_log.to_dict() if self.role_analysis_log else None,
            'agent_logs': [a.to_dict() for a in self.agent_logs],
            'synthesis_log': self.synthesis_log.to_dict() if self.synthesis_log else None,
            'error_log': self.error_log.to_dict() if self.error_log else None,
            'final_content': self.final_content,
            'warnings': self.warnings,
            'total_duration_seconds': self.total_duration_seconds
        }


class WorkflowLogger:
    """
    Records every stage and LLM call of each workflow execution.

    Agents in the fan-out stage log from worker threads, so all mutation goes
    through a lock. Which execution an event belongs to is taken from the
    calling context, never from shared logger state.
    """

    def __init__(self, experiment_name: str, log_dir: str = "logs"):
        self.experiment_name = experiment_name
        self.log_dir = log_dir
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.executions: Dict[str, ExecutionLog] = {}
        self._call_counter = 0
        self._lock = threading.Lock()

        self.metadata = {
            'experiment_name': experiment_name,
            'start_time': datetime.now().isoformat(),
            'config': {},
            'summary_stats': {}
        }

    def set_config(self, config: Dict):
        self.metadata['config'] = config

    def start_execution(self, execution_id: str, request: str, constraints: Optional[Dict] = None):
        """Start logging for a new workflow execution."""
        with self._lock:
            self.executions[execution_id] = ExecutionLog(
                execution_id=execution_id,
                request=request,
                constraints=constraints or {},
                timestamp=datetime.now().isoformat()
            )
        _current_execution_id.set(execution_id)

        print(f"\n[TRACE] === Started execution: {execution_id} ===")
        print(f"[TRACE] Request: {request[:60]}...")

    @property
    def current_execution_id(self) -> Optional[str]:
        return _current_execution_id.get()

    def _current(self) -> Optional[ExecutionLog]:
        execution_id = _current_execution_id.get()
        if not execution_id:
            return None
        return self.executions.get(execution_id)

    def log_llm_call(self, agent_name: str, operation: str,
                     system_prompt: str, user_prompt: str,
                     raw_output: str, cleaned_output: str,
                     temperature: float, duration: float) -> LLMCallLog:
        """Log a single LLM call with full details."""
        from agents.base import extract_thinking

        with self._lock:
            self._call_counter += 1
            call_log = LLMCallLog(
                call_id=f"{agent_name}_{operation}_{self._call_counter}",
                timestamp=datetime.now().isoformat(),
                agent_name=agent_name,
                operation=operation,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                temperature=temperature,
                raw_output=raw_output,
                cleaned_output=cleaned_output,
                thinking_content=extract_thinking(raw_output)[:2000],
                duration_seconds=duration
            )
            execution = self._current()
            if execution is not None:
                execution.llm_calls.append(call_log)

        print(f"[TRACE] LLM call: {agent_name}.{operation} ({duration:.2f}s)")
        return call_log

    def log_role_analysis(self, roles: List[Dict], reasoning: str, confidence: float,
                          fallback: bool = False, duration: float = 0.0):
        with self._lock:
            execution = self._current()
            if execution is None:
                return
            execution.role_analysis_log = StageStepLog(
                step_id=f"role_analysis_{execution.execution_id}",
                stage="role_analysis",
                timestamp=datetime.now().isoformat(),
                input_summary=f"Request: {execution.request[:50]}...",
                output_summary=f"{len(roles)} roles (confidence {confidence:.2f})"
                               + (" [fallback]" if fallback else ""),
                structured_output={'roles': roles, 'reasoning': reasoning, 'fallback': fallback},
                success=not fallback,
                total_duration_seconds=duration
            )

        print(f"[TRACE] Role analysis: {len(roles)} roles ({duration:.2f}s)")

    def log_agent(self, role_id: str, role_name: str, content: str = "",
                  error: Optional[str] = None, duration: float = 0.0):
        """Log one agent's outcome inside the fan-out stage."""
        with self._lock:
            execution = self._current()
            if execution is None:
                return
            execution.agent_logs.append(StageStepLog(
                step_id=f"agent_{role_id}_{execution.execution_id}",
                stage="agent_execution",
                timestamp=datetime.now().isoformat(),
                input_summary=f"Role: {role_name}",
                output_summary=f"FAILED: {error[:80]}" if error else f"{len(content)} chars",
                structured_output={'role_id': role_id, 'content': content, 'error': error},
                success=error is None,
                total_duration_seconds=duration
            ))

        status = "✗ FAILED" if error else "✓ OK"
        print(f"[TRACE] Agent {role_id}: {status} ({duration:.2f}s)")

    def log_synthesis(self, strategy: str, sources: int, content: str,
                      reasoning: str, duration: float = 0.0):
        with self._lock:
            execution = self._current()
            if execution is None:
                return
            execution.synthesis_log = StageStepLog(
                step_id=f"synthesis_{execution.execution_id}",
                stage="synthesis",
                timestamp=datetime.now().isoformat(),
                input_summary=f"Combining {sources} outputs ({strategy})",
                output_summary=f"Final output: {len(content)} chars",
                structured_output={'strategy': strategy, 'sources': sources, 'reasoning': reasoning},
                total_duration_seconds=duration
            )

        print(f"[TRACE] Synthesis: {sources} outputs → {len(content)} chars")

    def log_error_handling(self, errors: List[str]):
        with self._lock:
            execution = self._current()
            if execution is None:
                return
            execution.error_log = StageStepLog(
                step_id=f"error_handling_{execution.execution_id}",
                stage="error_handling",
                timestamp=datetime.now().isoformat(),
                input_summary=f"{len(errors)} errors",
                output_summary="Error summary returned as content",
                structured_output={'errors': list(errors)},
                success=False
            )

    def finalize_execution(self, final_content: str, warnings: List[str], total_duration: float):
        with self._lock:
            execution = self._current()
            if execution is None:
                return
            execution.final_content = final_content
            execution.warnings = list(warnings)
            execution.total_duration_seconds = total_duration
            finished_id = execution.execution_id
        _current_execution_id.set(None)

        print(f"[TRACE] === Execution complete: {finished_id} ({total_duration:.2f}s, "
              f"{len(warnings)} warnings) ===")

    def save(self, filename: str = None) -> str:
        """Save all detailed logs to a JSON file."""
        os.makedirs(self.log_dir, exist_ok=True)
        if filename is None:
            filename = f"{self.log_dir}/{self.experiment_name}_{self.timestamp}_detailed.json"

        with self._lock:
            self._calculate_summary_stats()
            output = {
                'metadata': self.metadata,
                'executions': {eid: e.to_dict() for eid, e in self.executions.items()}
            }

        with open(filename, 'w') as f:
            json.dump(output, f, indent=2, default=str)

        print(f"\n[TRACE] Saved detailed logs to: {filename}")
        return filename

    def _calculate_summary_stats(self):
        if not self.executions:
            return

        executions = list(self.executions.values())
        agent_logs = [a for e in executions for a in e.agent_logs]
        durations = [e.total_duration_seconds for e in executions]

        self.metadata['summary_stats'] = {
            'total_executions': len(executions),
            'total_llm_calls': sum(len(e.llm_calls) for e in executions),
            'agents_run': len(agent_logs),
            'agents_failed': sum(1 for a in agent_logs if not a.success),
            'executions_with_warnings': sum(1 for e in executions if e.warnings),
            'avg_duration_seconds': mean(durations) if durations else 0.0
        }

    def summary(self) -> Dict[str, Any]:
        with self._lock:
            self._calculate_summary_stats()
            return dict(self.metadata['summary_stats'])


# Singleton for easy access
_global_logger: Optional[WorkflowLogger] = None


def get_logger() -> Optional[WorkflowLogger]:
    """Get the global logger instance."""
    return _global_logger


def set_logger(logger: Optional[WorkflowLogger]):
    """Set (or clear, with None) the global logger instance."""
    global _global_logger
    _global_logger = logger
