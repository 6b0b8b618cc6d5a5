"""
Tests for the workflow trace logger.
"""

import json
import threading

from utils.enhanced_logger import WorkflowLogger, execution_context, get_logger, set_logger


def _logger(tmp_path):
    return WorkflowLogger("trace_test", log_dir=str(tmp_path / "logs"))


def test_global_logger_can_be_set_and_cleared(tmp_path):
    logger = _logger(tmp_path)

    set_logger(logger)
    assert get_logger() is logger

    set_logger(None)
    assert get_logger() is None


def test_events_without_execution_are_ignored(tmp_path):
    logger = _logger(tmp_path)

    logger.log_agent("editor", "Editor", content="text")
    logger.log_error_handling(["boom"])

    assert logger.executions == {}


def test_records_a_full_execution(tmp_path):
    logger = _logger(tmp_path)
    logger.start_execution("exec-1", "Write about kites", {"tone": "light"})

    logger.log_llm_call("Synthesizer", "synthesis", "sys", "user",
                        raw_output="<think>merge</think>Final", cleaned_output="Final",
                        temperature=0.7, duration=0.5)
    logger.log_role_analysis([{"id": "editor"}], "why", 0.9)
    logger.log_agent("editor", "Editor", content="Edited text", duration=0.2)
    logger.log_agent("analyst", "Analyst", error="timed out", duration=1.0)
    logger.log_synthesis("blending", 1, "Final", "single output")
    logger.finalize_execution("Final", ["Agent analyst failed: timed out"], 1.5)

    execution = logger.executions["exec-1"]
    assert execution.llm_calls[0].thinking_content == "merge"
    assert [a.success for a in execution.agent_logs] == [True, False]
    assert execution.warnings == ["Agent analyst failed: timed out"]
    assert logger.current_execution_id is None

    stats = logger.summary()
    assert stats["total_executions"] == 1
    assert stats["total_llm_calls"] == 1
    assert stats["agents_run"] == 2
    assert stats["agents_failed"] == 1
    assert stats["executions_with_warnings"] == 1


def test_concurrent_agent_logging(tmp_path):
    logger = _logger(tmp_path)
    logger.start_execution("exec-1", "Write about kites")
    logger.start_execution("exec-2", "Write about boats")

    def log_as(execution_id, i):
        with execution_context(execution_id):
            logger.log_agent(f"role_{i}", f"Role {i}", content="x")

    threads = [
        threading.Thread(target=log_as, args=("exec-1" if i % 2 else "exec-2", i))
        for i in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(logger.executions["exec-1"].agent_logs) == 10
    assert len(logger.executions["exec-2"].agent_logs) == 10


def test_execution_context_selects_the_trace(tmp_path):
    logger = _logger(tmp_path)
    logger.start_execution("exec-1", "Write about kites")
    logger.start_execution("exec-2", "Write about boats")

    with execution_context("exec-1"):
        logger.log_agent("editor", "Editor", content="kites")
        logger.finalize_execution("kites", [], 0.1)
    logger.log_agent("analyst", "Analyst", content="boats")

    assert [a.input_summary for a in logger.executions["exec-1"].agent_logs] == ["Role: Editor"]
    assert [a.input_summary for a in logger.executions["exec-2"].agent_logs] == ["Role: Analyst"]
    assert logger.current_execution_id == "exec-2"


def test_save_writes_json(tmp_path):
    logger = _logger(tmp_path)
    logger.set_config({"agent_timeout_ms": 100})
    logger.start_execution("exec-1", "Write about kites")
    logger.finalize_execution("Final", [], 0.1)

    path = logger.save()

    with open(path) as f:
        data = json.load(f)
    assert data["metadata"]["config"] == {"agent_timeout_ms": 100}
    assert data["metadata"]["summary_stats"]["total_executions"] == 1
    assert data["executions"]["exec-1"]["final_content"] == "Final"
