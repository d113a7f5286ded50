import random
from abc import ABC, abstractmethod
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(ABC):
    """Sorgente pseudo-casuale iniettabile per humanizer e detection simulata"""

    @abstractmethod
    def next_float(self) -> float:
        """Restituisce un float in [0, 1)"""
        pass

    def chance(self, probability: float) -> bool:
        return self.next_float() < probability

    def choice(self, items: Sequence[T]) -> T:
        index = int(self.next_float() * len(items))
        return items[min(index, len(items) - 1)]

    def randint(self, low: int, high: int) -> int:
        """Intero uniforme in [low, high], estremi inclusi"""
        return low + min(int(self.next_float() * (high - low + 1)), high - low)


class SeededRandomSource(RandomSource):
    """random.Random con seed registrato, per rendere riproducibile un'umanizzazione"""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = random.SystemRandom().randrange(2 ** 32)
        self.seed = seed
        self._random = random.Random(seed)

    def next_float(self) -> float:
        return self._random.random()


class SequenceRandomSource(RandomSource):
    """Restituisce una sequenza fissa di valori, ciclandola"""

    def __init__(self, values: Sequence[float]):
        if not values:
            raise ValueError("SequenceRandomSource needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Random values must be in [0, 1), got {value}")
        self.values = list(values)
        self.calls = 0

    def next_float(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value
