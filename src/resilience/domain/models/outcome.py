"""RetryOutcome model - represents the result of a finished retry sequence"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class RetryOutcome:
    """Result of running an operation under a retry budget"""

    value: Any = None
    error: Optional[BaseException] = None  # Exception from the last attempt
    attempts: int = 0  # Number of invocations performed

    @property
    def succeeded(self) -> bool:
        """Check if some attempt succeeded"""
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or re-raise the last error"""
        if self.error is not None:
            raise self.error
        return self.value
