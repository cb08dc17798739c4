from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from mqttcodec._properties import PropertyType
    from mqttcodec._types import ReasonCode


class MQTTException(Exception):
    """Base class for all MQTT exceptions."""

    reason_code_value: ClassVar[int | None] = None

    @property
    def reason_code(self) -> ReasonCode | None:
        """
        The reason code to send to the peer (in a ``CONNACK`` or ``DISCONNECT``) before
        closing the connection because of this error, or ``None`` if the error is not
        caused by the peer.

        """
        if self.reason_code_value is None:
            return None

        from mqttcodec._types import ReasonCode

        return ReasonCode(self.reason_code_value)


class MQTTPacketTooLarge(MQTTException):
    """
    Raised when encoding or decoding a packet, and its size exceeds the configured
    maximum packet size.
    """

    reason_code_value = 0x95


class MQTTProtocolError(MQTTException):
    """Raised when a violation of the MQTT v5 protocol is encountered."""

    reason_code_value = 0x82


class MQTTUnsupportedProtocolVersion(MQTTProtocolError):
    """Raised when a ``CONNECT`` packet requests a protocol version other than 5."""

    reason_code_value = 0x84


class MQTTUnsupportedPropertyType(MQTTProtocolError):
    """
    Raised when decoding or encoding an MQTT packet and it contains a property of a type
    not supported by that packet type.
    """

    def __init__(self, property_type: PropertyType, packet_class: type) -> None:
        super().__init__(property_type, packet_class)
        self.property_type = property_type
        self.packet_class = packet_class.__name__

    def __str__(self) -> str:
        return (
            f"unsupported property type: {self.property_type._name_} in "
            f"{self.packet_class}"
        )


class MQTTDuplicateProperty(MQTTProtocolError):
    """
    Raised when a property that may only appear once is present more than once in the
    same packet.
    """

    def __init__(self, property_type: PropertyType, packet_class: type) -> None:
        super().__init__(property_type, packet_class)
        self.property_type = property_type
        self.packet_class = packet_class.__name__

    def __str__(self) -> str:
        return (
            f"duplicate property {self.property_type._name_} in {self.packet_class}"
        )


class MQTTDecodeError(MQTTException):
    """
    Raised when something goes wrong when trying to decode an MQTT packet.

    This is the generic "malformed packet" error: the bytes do not parse as a valid
    packet of the declared type.
    """

    reason_code_value = 0x81


class InsufficientData(MQTTDecodeError):
    """
    Raised when trying to decode an MQTT packet but there's not enough data to decode a
    complete packet.

    This is not an error in the data: the caller should read more bytes from the
    transport and try again.
    """

    reason_code_value = None


class MalformedVariableByteInteger(MQTTDecodeError):
    """Raised when a variable byte integer is longer than four bytes."""


class MalformedFixedHeader(MQTTDecodeError):
    """
    Raised when the packet type or the flags in the fixed header (or the reserved bit of
    the ``CONNECT`` flags) have illegal values.
    """


class MalformedUTF8String(MQTTDecodeError):
    """
    Raised when a string is not valid UTF-8 or contains characters MQTT does not allow.
    """


class MalformedProperties(MQTTDecodeError):
    """
    Raised when a properties block cannot be parsed: unknown property identifiers, or a
    length that does not match its contents.
    """


class MQTTEncodeError(MQTTException, ValueError):
    """Raised when a value cannot be represented in the MQTT wire format."""


class ValueTooLarge(MQTTEncodeError):
    """Raised when an integer does not fit in its wire representation."""


class StringTooLong(MQTTEncodeError):
    """Raised when a string is longer than 65535 bytes when encoded as UTF-8."""


class DataTooLong(MQTTEncodeError):
    """Raised when binary data is longer than 65535 bytes."""


class BufferTooSmall(MQTTEncodeError):
    """Raised when an encoded packet does not fit in the destination buffer."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(required, available)
        self.required = required
        self.available = available

    def __str__(self) -> str:
        return (
            f"encoded packet needs {self.required} bytes but the destination only has "
            f"room for {self.available}"
        )
