"""Engine displacement classes and quad subtypes."""

from enum import Enum


class Displacement(Enum):
    """Engine displacement class shared by motorcycles and quads."""

    CC_125 = 125
    CC_250 = 250
    CC_400 = 400
    CC_500 = 500
    CC_750 = 750
    CC_900 = 900
    CC_1000 = 1000

    @property
    def cc(self) -> int:
        return self.value


class QuadType(Enum):
    """Quad subtype with its display label."""

    SPORT = "Sport"
    UTILITY = "Utility"
    RACING = "Racing"

    @property
    def label(self) -> str:
        return self.value
