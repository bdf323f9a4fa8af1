"""Application layer - Health services and use cases."""
from .use_cases import CheckOnlineUseCase, HealthStatusUseCase

__all__ = [
    'CheckOnlineUseCase',
    'HealthStatusUseCase',
]
