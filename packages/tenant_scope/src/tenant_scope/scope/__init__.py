"""
Scope State Machine

Current tenant selection and the reducer that transitions it.
"""

from tenant_scope.scope.machine import ScopeStateMachine
from tenant_scope.scope.reducer import reduce
from tenant_scope.scope.state import ScopeAction, ScopeActionType, ScopeState

__all__ = [
    "ScopeAction",
    "ScopeActionType",
    "ScopeState",
    "ScopeStateMachine",
    "reduce",
]
