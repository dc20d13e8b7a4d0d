"""
Resilience infrastructure - circuit breakers around external integrations.
"""

from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerState,
    CircuitBreakerError
)

__all__ = [
    'CircuitBreaker',
    'CircuitBreakerState',
    'CircuitBreakerError'
]
