from __future__ import annotations

import logging

from ._exceptions import (
    BufferTooSmall,
    InsufficientData,
    MQTTDecodeError,
    MQTTPacketTooLarge,
)
from ._framing import decode_fixed_header
from ._primitives import BinaryValue
from ._types import MQTTPacket, packet_types

logger = logging.getLogger(__name__)


def decode_packet(
    data: memoryview, max_packet_size: int | None = None
) -> tuple[memoryview, MQTTPacket]:
    """
    Decode one packet from the start of the given data.

    :param data: the data to decode from (may contain more than one packet)
    :param max_packet_size: if set, reject packets whose total size (fixed header
        included) exceeds this many bytes
    :return: a tuple of (data following the packet, decoded packet)
    :raises InsufficientData: if the data does not contain a complete packet yet
    :raises MQTTPacketTooLarge: if the packet exceeds ``max_packet_size``
    :raises MQTTDecodeError: if the packet is malformed
    :raises MQTTProtocolError: if the packet violates the protocol

    """
    previous_length = len(data)
    data, header = decode_fixed_header(data)
    remaining_length = header.remaining_length
    packet_size = previous_length - len(data) + remaining_length
    if max_packet_size is not None and packet_size > max_packet_size:
        raise MQTTPacketTooLarge(
            f"{header.packet_type._name_} packet is {packet_size} bytes long "
            f"(maximum is {max_packet_size})"
        )

    if len(data) < remaining_length:
        raise InsufficientData

    packet_cls = packet_types[header.packet_type]
    try:
        leftover_data, packet = packet_cls.decode(
            data[:remaining_length], header.flags
        )
    except InsufficientData:
        # The frame is complete, so running out of data means its contents are invalid
        raise MQTTDecodeError(
            f"{header.packet_type._name_} packet is shorter than its contents require"
        ) from None

    if leftover_data:
        raise MQTTDecodeError(
            f"not all data was consumed when decoding a {header.packet_type._name_} "
            f"packet"
        )

    logger.debug("Decoded %s packet (%d bytes)", header.packet_type._name_, packet_size)
    return data[remaining_length:], packet


def decode(
    buffer: BinaryValue, *, max_packet_size: int | None = None
) -> tuple[MQTTPacket, int]:
    """
    Decode the packet at the start of the buffer.

    Binary values in the returned packet are views into ``buffer``, so the buffer must
    not be resized while the packet is in use.

    :param buffer: the received data
    :param max_packet_size: if set, reject packets larger than this many bytes
    :return: a tuple of (decoded packet, number of bytes consumed from the buffer)
    :raises InsufficientData: if more data is needed to decode the packet

    """
    data = memoryview(buffer)
    rest, packet = decode_packet(data, max_packet_size)
    return packet, len(data) - len(rest)


def encode(
    packet: MQTTPacket,
    destination: bytearray | memoryview,
    *,
    max_packet_size: int | None = None,
) -> int:
    """
    Encode a packet into the start of the destination buffer.

    The destination is not modified if an error is raised.

    :param packet: the packet to encode
    :param destination: a writable buffer whose length is its capacity
    :param max_packet_size: if set, refuse to encode packets larger than this many bytes
    :return: the number of bytes written
    :raises BufferTooSmall: if the encoded packet does not fit in the destination
    :raises MQTTPacketTooLarge: if the encoded packet exceeds ``max_packet_size``

    """
    buffer = bytearray()
    packet.encode(buffer)
    if max_packet_size is not None and len(buffer) > max_packet_size:
        raise MQTTPacketTooLarge(
            f"{packet.packet_type._name_} packet is {len(buffer)} bytes long "
            f"(maximum is {max_packet_size})"
        )

    if len(buffer) > len(destination):
        raise BufferTooSmall(len(buffer), len(destination))

    destination[: len(buffer)] = buffer
    logger.debug("Encoded %s packet (%d bytes)", packet.packet_type._name_, len(buffer))
    return len(buffer)
