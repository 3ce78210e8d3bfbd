from __future__ import annotations
from dataclasses import dataclass

from midi.constants import (
    CC_DATA_DECREMENT,
    CC_DATA_ENTRY_LSB,
    CC_DATA_ENTRY_MSB,
    CC_DATA_INCREMENT,
    CC_NRPN_LSB,
    CC_NRPN_MSB,
    CC_RPN_LSB,
    CC_RPN_MSB,
    REGISTERED_PARAMETERS,
    RPN_NULL,
)
from midi.numeric import validate_byte


# The selected parameter lives on the receiving device. Each sequence below
# selects, acts, then selects the null parameter (127, 127) so later data
# entry messages cannot change whatever was selected last.


@dataclass(frozen=True)
class Select:
    registered: bool
    msb: int
    lsb: int

    def __post_init__(self) -> None:
        msb_cc, lsb_cc = self._controllers()
        object.__setattr__(self, "msb", validate_byte(self.msb, f"The control{msb_cc:x} value"))
        object.__setattr__(self, "lsb", validate_byte(self.lsb, f"The control{lsb_cc:x} value"))

    def _controllers(self) -> tuple[int, int]:
        if self.registered:
            return CC_RPN_MSB, CC_RPN_LSB
        return CC_NRPN_MSB, CC_NRPN_LSB

    def control_changes(self) -> list[tuple[int, int]]:
        msb_cc, lsb_cc = self._controllers()
        return [(msb_cc, self.msb), (lsb_cc, self.lsb)]


@dataclass(frozen=True)
class SetData:
    msb: int
    lsb: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "msb", validate_byte(self.msb, "The msb value"))
        if self.lsb is not None:
            object.__setattr__(self, "lsb", validate_byte(self.lsb, "The lsb value"))

    def control_changes(self) -> list[tuple[int, int]]:
        ccs = [(CC_DATA_ENTRY_MSB, self.msb)]
        if self.lsb is not None:
            ccs.append((CC_DATA_ENTRY_LSB, self.lsb))
        return ccs


@dataclass(frozen=True)
class DataStep:
    increment: bool

    def control_changes(self) -> list[tuple[int, int]]:
        return [(CC_DATA_INCREMENT if self.increment else CC_DATA_DECREMENT, 0)]


@dataclass(frozen=True)
class Deselect:
    def control_changes(self) -> list[tuple[int, int]]:
        return [(CC_RPN_MSB, RPN_NULL), (CC_RPN_LSB, RPN_NULL)]


Step = Select | SetData | DataStep | Deselect


def resolve_parameter(parameter, registered: bool = True) -> Select:
    """Build the select step for a parameter name or a (msb, lsb) pair.

    Names are only known for registered parameters.
    """
    if isinstance(parameter, str):
        if not registered or parameter not in REGISTERED_PARAMETERS:
            raise TypeError(f"The specified parameter is not available: {parameter!r}")
        msb, lsb = REGISTERED_PARAMETERS[parameter]
        return Select(registered, msb, lsb)
    if not isinstance(parameter, (list, tuple)) or len(parameter) != 2:
        raise TypeError(f"A parameter must be a name or a pair of control bytes, got {parameter!r}")
    return Select(registered, parameter[0], parameter[1])


def _data_step(data) -> SetData:
    if isinstance(data, (list, tuple)):
        if not 1 <= len(data) <= 2:
            raise ValueError(f"Parameter data must be one or two bytes, got {len(data)}")
        return SetData(*data)
    return SetData(data)


def set_sequence(parameter, data, registered: bool = True) -> list[Step]:
    return [resolve_parameter(parameter, registered), _data_step(data), Deselect()]


def step_sequence(parameter, increment: bool, registered: bool = True) -> list[Step]:
    return [resolve_parameter(parameter, registered), DataStep(increment), Deselect()]


def control_changes(steps: list[Step]) -> list[tuple[int, int]]:
    ccs: list[tuple[int, int]] = []
    for step in steps:
        ccs.extend(step.control_changes())
    return ccs
