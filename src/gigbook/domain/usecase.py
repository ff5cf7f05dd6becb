"""Base class and result type shared by all use cases."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from gigbook.domain.errors import DomainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UseCaseResult:
    """Outcome of a use case call."""

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "UseCaseResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "UseCaseResult":
        return cls(success=False, error=error)


class UseCase(ABC):
    """Application service with a single entry point.

    Subclasses implement ``_run``. ``execute`` turns every exception into a
    failed result, so callers only ever inspect ``UseCaseResult``.
    """

    def execute(self, *args: Any, **kwargs: Any) -> UseCaseResult:
        try:
            return UseCaseResult.ok(self._run(*args, **kwargs))
        except DomainError as e:
            logger.debug("%s rejected: %s", type(self).__name__, e)
            return UseCaseResult.fail(str(e))
        except Exception as e:
            logger.exception("Unexpected error in %s", type(self).__name__)
            return UseCaseResult.fail(str(e) or type(e).__name__)

    @abstractmethod
    def _run(self, *args: Any, **kwargs: Any) -> Any:
        """Perform the use case. Raise DomainError to reject the request."""
        pass
