from abc import ABC, abstractmethod
from typing import Any


class IClient(ABC):
    """Common interface of every source client builder"""

    @abstractmethod
    def get_client(self) -> Any:
        """Return the underlying client object"""
