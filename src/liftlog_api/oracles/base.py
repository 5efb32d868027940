"""
Base Oracle

An oracle is an optional external collaborator that may refine a result the
deterministic code has already computed. Callers always hold a usable
fallback, so every oracle answer is advisory.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class OracleError(Exception):
    """Raised when an oracle cannot produce an answer."""


class RefinementOracle(ABC):
    """Abstract base class for refinement oracles"""

    name: str = "oracle"

    @property
    def available(self) -> bool:
        """Whether consulting this oracle can ever yield a result."""
        return True

    @abstractmethod
    def refine(self, context: Any) -> Optional[Any]:
        """
        Produce a refined result for the given context.

        Returns:
            The refined result, or None when the oracle has nothing to add

        Raises:
            OracleError: If the external call fails or its reply is unusable
        """


class NullOracle(RefinementOracle):
    """Oracle used when no external service is configured. Never answers."""

    name = "null"

    @property
    def available(self) -> bool:
        return False

    def refine(self, context: Any) -> Optional[Any]:
        return None


NULL_ORACLE = NullOracle()
