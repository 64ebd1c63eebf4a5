"""
Service layer for multivcs.

Services orchestrate the domain objects and infrastructure clients:
- CheckoutService: collects the checkouts a run operates on
- ProcessService: applies the run's action to each checkout
- ExecutionEngine: runs one command and reports its output
"""

from .checkout_service import CheckoutService
from .execution_service import ExecutionEngine
from .process_service import ProcessService, ProcessSummary

__all__ = [
    'CheckoutService',
    'ExecutionEngine',
    'ProcessService',
    'ProcessSummary',
]
