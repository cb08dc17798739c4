from __future__ import annotations

import sys

from ._exceptions import (
    DataTooLong,
    InsufficientData,
    MalformedUTF8String,
    MalformedVariableByteInteger,
    MQTTEncodeError,
    StringTooLong,
    ValueTooLarge,
)

if sys.version_info >= (3, 10):
    from typing import TypeAlias
else:
    from typing_extensions import TypeAlias

#: Bytes-like values accepted wherever binary data is encoded
BinaryValue: TypeAlias = "bytes | bytearray | memoryview"
BINARY_TYPES = (bytes, bytearray, memoryview)

VARIABLE_INTEGER_MAX = 268_435_455
MAX_DATA_LENGTH = 65_535


def encode_fixed_integer(value: int, buffer: bytearray, size: int) -> None:
    try:
        buffer.extend(value.to_bytes(size, "big"))
    except OverflowError:
        raise ValueTooLarge(
            f"value {value} does not fit in a {size} byte unsigned integer"
        ) from None


def decode_fixed_integer(data: memoryview, size: int) -> tuple[memoryview, int]:
    if len(data) < size:
        raise InsufficientData

    return data[size:], int.from_bytes(data[:size], "big")


def encode_variable_integer(value: int, buffer: bytearray) -> None:
    if not 0 <= value <= VARIABLE_INTEGER_MAX:
        raise ValueTooLarge(
            f"value {value} is out of range for a variable byte integer "
            f"(0-{VARIABLE_INTEGER_MAX})"
        )

    while True:
        new_byte = value % 128
        value //= 128
        if value > 0:
            new_byte |= 128

        buffer.append(new_byte)
        if value == 0:
            return


def decode_variable_integer(data: memoryview) -> tuple[memoryview, int]:
    """
    Decode a variable byte integer.

    Non-minimal encodings (like ``0x80 0x00`` for 0) are accepted as long as they fit in
    four bytes.

    :param data: the data to decode from
    :return: a tuple of (remaining data, decoded value)
    :raises InsufficientData: if the data ends before the last byte of the integer
    :raises MalformedVariableByteInteger: if the fourth byte has a continuation bit

    """
    multiplier = 1
    value = 0
    for i, val in enumerate(data[:4], 1):
        value += (val & 127) * multiplier
        multiplier *= 128
        if not val & 128:
            return data[i:], value

    if len(data) >= 4:
        raise MalformedVariableByteInteger(
            "variable byte integer has the continuation bit set on its fourth byte"
        )

    raise InsufficientData


def encode_binary(value: BinaryValue, buffer: bytearray) -> None:
    if len(value) > MAX_DATA_LENGTH:
        raise DataTooLong(
            f"binary data is {len(value)} bytes long (maximum is {MAX_DATA_LENGTH})"
        )

    encode_fixed_integer(len(value), buffer, 2)
    buffer.extend(value)


def decode_binary(data: memoryview) -> tuple[memoryview, memoryview]:
    data, length = decode_fixed_integer(data, 2)
    if len(data) < length:
        raise InsufficientData

    # The value is a view into the caller's buffer, not a copy
    return data[length:], data[:length]


def encode_utf8(value: str, buffer: bytearray) -> None:
    try:
        data = value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MQTTEncodeError(f"error encoding utf-8 string: {exc}") from None

    if "\x00" in value:
        # MQTT-1.5.4-2
        raise MQTTEncodeError("utf-8 string must not contain null characters")

    if len(data) > MAX_DATA_LENGTH:
        raise StringTooLong(
            f"utf-8 string is {len(data)} bytes long when encoded (maximum is "
            f"{MAX_DATA_LENGTH})"
        )

    encode_fixed_integer(len(data), buffer, 2)
    buffer.extend(data)


def decode_utf8(data: memoryview) -> tuple[memoryview, str]:
    data, length = decode_fixed_integer(data, 2)
    if len(data) < length:
        raise InsufficientData

    # The strict utf-8 codec also rejects encoded surrogates (MQTT-1.5.4-1)
    try:
        value = str(data[:length], "utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedUTF8String(f"error decoding utf-8 string: {exc}") from None

    if "\x00" in value:
        # MQTT-1.5.4-2
        raise MalformedUTF8String("utf-8 string contains a null character")

    return data[length:], value


def encode_utf8_pair(value: tuple[str, str], buffer: bytearray) -> None:
    encode_utf8(value[0], buffer)
    encode_utf8(value[1], buffer)


def decode_utf8_pair(data: memoryview) -> tuple[memoryview, tuple[str, str]]:
    data, string1 = decode_utf8(data)
    data, string2 = decode_utf8(data)
    return data, (string1, string2)
