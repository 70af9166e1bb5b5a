"""Runtime values. A tinylisp expression evaluates to either a Num or a Bool, nothing else."""

from dataclasses import dataclass


class Value:
    """Superclass of runtime values."""


@dataclass(frozen=True)
class Num(Value):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Bool(Value):
    value: bool

    def __str__(self):
        return "true" if self.value else "false"
