from .check_online import CheckOnlineUseCase
from .health_status import HealthStatusUseCase

__all__ = ["CheckOnlineUseCase", "HealthStatusUseCase"]
