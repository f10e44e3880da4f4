from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

BOOST_EVERY = 7
BOOST_MAGNITUDE = 3
TRAP_EVERY = 5
TRAP_MAGNITUDE = 2


class FieldKind(str, Enum):
    NORMAL = 'NORMAL'
    BOOST = 'BOOST'
    TRAP = 'TRAP'


@dataclass(frozen=True)
class BoardField:
    index: int
    kind: FieldKind
    magnitude: Optional[int] = None

    @property
    def is_special(self) -> bool:
        return self.kind != FieldKind.NORMAL

    def to_dict(self):
        return {
            'index': self.index,
            'kind': self.kind.value,
            'magnitude': self.magnitude,
        }


def generate_board(length: int) -> List[BoardField]:
    """Build the linear board for a new session.

    Start and finish are always NORMAL. Every other multiple of 7 is a BOOST,
    then every other multiple of 5 is a TRAP; the 7-check runs first, so 35
    is a BOOST.
    """
    if length < 2:
        raise ValueError(f"board length must be at least 2, got {length}")
    last = length - 1
    fields = []
    for i in range(length):
        if i == 0 or i == last:
            fields.append(BoardField(i, FieldKind.NORMAL))
        elif i % BOOST_EVERY == 0:
            fields.append(BoardField(i, FieldKind.BOOST, BOOST_MAGNITUDE))
        elif i % TRAP_EVERY == 0:
            fields.append(BoardField(i, FieldKind.TRAP, TRAP_MAGNITUDE))
        else:
            fields.append(BoardField(i, FieldKind.NORMAL))
    return fields
