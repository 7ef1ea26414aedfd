from abc import ABC, abstractmethod
from datetime import datetime

from src.service.marketplace.app.dto.admin_stats import AdminStats


class IAdminStatsQueryRepo(ABC):
    @abstractmethod
    async def get_stats(self, *, now: datetime) -> AdminStats:
        """Aggregate counts; `new_users_today` counts from midnight UTC of `now`"""
        pass
