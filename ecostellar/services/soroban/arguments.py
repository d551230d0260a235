"""
Typed contract arguments.

Every argument passed to a contract call carries its on-chain scalar type.
The set of types is closed: encoding dispatches on ScalarType and there is
no fallback branch.
"""

from dataclasses import dataclass
from enum import StrEnum

from stellar_sdk import scval, xdr


class ScalarType(StrEnum):
    """On-chain scalar types used by the EcoStellar contracts."""

    ADDRESS = "address"
    INT32 = "i32"
    UINT32 = "u32"
    INT64 = "i64"
    UINT64 = "u64"
    INT128 = "i128"
    STRING = "string"


# Inclusive integer bounds per integer type
_INT_BOUNDS: dict[ScalarType, tuple[int, int]] = {
    ScalarType.INT32: (-(2 ** 31), 2 ** 31 - 1),
    ScalarType.UINT32: (0, 2 ** 32 - 1),
    ScalarType.INT64: (-(2 ** 63), 2 ** 63 - 1),
    ScalarType.UINT64: (0, 2 ** 64 - 1),
    ScalarType.INT128: (-(2 ** 127), 2 ** 127 - 1),
}

_ENCODERS = {
    ScalarType.ADDRESS: scval.to_address,
    ScalarType.INT32: scval.to_int32,
    ScalarType.UINT32: scval.to_uint32,
    ScalarType.INT64: scval.to_int64,
    ScalarType.UINT64: scval.to_uint64,
    ScalarType.INT128: scval.to_int128,
    ScalarType.STRING: scval.to_string,
}


@dataclass(frozen=True, slots=True)
class ContractArg:
    """A single typed contract argument."""

    type: ScalarType
    value: str | int

    def __post_init__(self) -> None:
        if not isinstance(self.type, ScalarType):
            raise TypeError(f"Unsupported scalar type: {self.type!r}")

        if self.type in (ScalarType.ADDRESS, ScalarType.STRING):
            if not isinstance(self.value, str):
                raise TypeError(f"{self.type} argument requires str, got {type(self.value).__name__}")
            return

        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"{self.type} argument requires int, got {type(self.value).__name__}")

        low, high = _INT_BOUNDS[self.type]
        if not low <= self.value <= high:
            raise ValueError(f"{self.value} out of range for {self.type}")

    def to_scval(self) -> xdr.SCVal:
        """Encode to an on-chain SCVal."""
        return _ENCODERS[self.type](self.value)


def address(value: str) -> ContractArg:
    return ContractArg(ScalarType.ADDRESS, value)


def int32(value: int) -> ContractArg:
    return ContractArg(ScalarType.INT32, value)


def uint32(value: int) -> ContractArg:
    return ContractArg(ScalarType.UINT32, value)


def int64(value: int) -> ContractArg:
    return ContractArg(ScalarType.INT64, value)


def uint64(value: int) -> ContractArg:
    return ContractArg(ScalarType.UINT64, value)


def int128(value: int) -> ContractArg:
    return ContractArg(ScalarType.INT128, value)


def string(value: str) -> ContractArg:
    return ContractArg(ScalarType.STRING, value)


def encode_args(args: list[ContractArg] | tuple[ContractArg, ...]) -> list[xdr.SCVal]:
    """Encode an ordered argument list."""
    return [arg.to_scval() for arg in args]
