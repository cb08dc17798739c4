from __future__ import annotations

from enum import IntEnum

from attrs import define

from ._exceptions import InsufficientData, MalformedFixedHeader, ValueTooLarge
from ._primitives import (
    VARIABLE_INTEGER_MAX,
    BinaryValue,
    decode_variable_integer,
    encode_variable_integer,
)


class ControlPacketType(IntEnum):
    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14
    AUTH = 15


#: Required values of the fixed header flags for every packet type except ``PUBLISH``,
#: whose flags carry the DUP, QoS and RETAIN fields (MQTT-2.1.3-1)
RESERVED_FLAGS: dict[ControlPacketType, int] = {
    ControlPacketType.CONNECT: 0,
    ControlPacketType.CONNACK: 0,
    ControlPacketType.PUBACK: 0,
    ControlPacketType.PUBREC: 0,
    ControlPacketType.PUBREL: 2,
    ControlPacketType.PUBCOMP: 0,
    ControlPacketType.SUBSCRIBE: 2,
    ControlPacketType.SUBACK: 0,
    ControlPacketType.UNSUBSCRIBE: 2,
    ControlPacketType.UNSUBACK: 0,
    ControlPacketType.PINGREQ: 0,
    ControlPacketType.PINGRESP: 0,
    ControlPacketType.DISCONNECT: 0,
    ControlPacketType.AUTH: 0,
}

PUBLISH_QOS_MASK = 6


@define(frozen=True)
class FixedHeader:
    """The first 2-5 bytes of every MQTT control packet."""

    packet_type: ControlPacketType
    flags: int
    remaining_length: int


def decode_fixed_header(data: memoryview) -> tuple[memoryview, FixedHeader]:
    """
    Decode the packet type, flags and remaining length of a packet.

    :param data: the data to decode from
    :return: a tuple of (data following the fixed header, the fixed header)
    :raises InsufficientData: if the data ends before the end of the fixed header
    :raises MalformedFixedHeader: if the packet type is reserved or the flags have
        illegal values for the packet type

    """
    if not data:
        raise InsufficientData

    packet_type_num = data[0] >> 4
    flags = data[0] & 15
    try:
        packet_type = ControlPacketType(packet_type_num)
    except ValueError:
        raise MalformedFixedHeader(
            f"reserved packet type: {packet_type_num}"
        ) from None

    if packet_type is ControlPacketType.PUBLISH:
        if flags & PUBLISH_QOS_MASK == PUBLISH_QOS_MASK:
            # MQTT-3.3.1-4
            raise MalformedFixedHeader("received PUBLISH with both QoS bits set")
    elif flags != RESERVED_FLAGS[packet_type]:
        raise MalformedFixedHeader(
            f"received {packet_type._name_} with invalid flags in its fixed header: "
            f"0b{flags:04b}"
        )

    data, remaining_length = decode_variable_integer(data[1:])
    return data, FixedHeader(packet_type, flags, remaining_length)


def encode_fixed_header(
    packet_type: ControlPacketType,
    flags: int,
    payload: BinaryValue,
    buffer: bytearray,
) -> None:
    """
    Append a complete packet (fixed header followed by the given variable header and
    payload) to the buffer.

    Nothing is appended if the payload is too large to be framed.

    """
    assert flags < 16
    if len(payload) > VARIABLE_INTEGER_MAX:
        raise ValueTooLarge(
            f"{packet_type._name_} packet is too large: remaining length would be "
            f"{len(payload)} (maximum is {VARIABLE_INTEGER_MAX})"
        )

    header = bytearray([flags | (packet_type << 4)])
    encode_variable_integer(len(payload), header)
    buffer.extend(header)
    buffer.extend(payload)
