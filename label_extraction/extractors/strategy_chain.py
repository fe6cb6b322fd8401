"""
Strategy Chain Module.

Every field is extracted by an ordered list of strategies, each a pure
function from label text to a value (or None / an empty value when it
does not apply). The chain runs them in order and the first non-empty
value wins, so the priority policy of a field is plain data that tests
can inspect and reorder.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from label_extraction.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Strategy:
    """
    A named extraction strategy.

    Attributes:
        name: Identifier used in logs.
        func: ``text -> value``; falsy results mean "no match".
    """
    name: str
    func: Callable[[str], Any]

    def __call__(self, text: str) -> Any:
        return self.func(text)


class StrategyChain:
    """
    First-success-wins combinator over an ordered list of strategies.

    Example:
        >>> chain = StrategyChain("order_number", [
        ...     Strategy("ekart", find_ekart_tracking),
        ...     Strategy("order_id", find_order_id),
        ... ])
        >>> chain.run("Order ID: ABC123")
        'ABC123'
    """

    def __init__(self, field_name: str, strategies: Sequence[Strategy]) -> None:
        self.field_name = field_name
        self.strategies: List[Strategy] = list(strategies)

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.strategies]

    def run_with_source(self, text: str) -> Tuple[Any, Optional[str]]:
        """
        Run strategies in order.

        Returns:
            Tuple of (value, winning strategy name); (None, None) when
            every strategy came back empty.
        """
        for strategy in self.strategies:
            value = strategy(text)
            if value:
                logger.debug(f"{self.field_name}: '{strategy.name}' matched -> {value!r}")
                return value, strategy.name

        logger.debug(f"{self.field_name}: no strategy matched ({', '.join(self.names)})")
        return None, None

    def run(self, text: str) -> Any:
        """Run strategies in order and return the first non-empty value."""
        value, _ = self.run_with_source(text)
        return value

    def __len__(self) -> int:
        return len(self.strategies)

    def __repr__(self) -> str:
        return f"StrategyChain({self.field_name!r}, {self.names})"
