"""
Utilities for the writing workflow.

- enhanced_logger.py: Detailed per-execution trace logging
"""

from utils.enhanced_logger import (
    WorkflowLogger,
    get_logger,
    set_logger,
    execution_context,
    LLMCallLog,
    StageStepLog,
    ExecutionLog
)

__all__ = [
    'WorkflowLogger', 'get_logger', 'set_logger', 'execution_context',
    'LLMCallLog', 'StageStepLog', 'ExecutionLog'
]
