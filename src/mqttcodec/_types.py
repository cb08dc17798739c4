from __future__ import annotations

import sys
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from enum import IntEnum
from typing import Any, ClassVar

from attrs import Attribute, define, field
from attrs.validators import deep_iterable, instance_of, optional

from ._exceptions import (
    MalformedFixedHeader,
    MQTTDecodeError,
    MQTTProtocolError,
    MQTTUnsupportedProtocolVersion,
)
from ._framing import RESERVED_FLAGS, ControlPacketType, encode_fixed_header
from ._primitives import (
    BINARY_TYPES,
    BinaryValue,
    decode_binary,
    decode_fixed_integer,
    decode_utf8,
    encode_binary,
    encode_fixed_integer,
    encode_utf8,
)
from ._properties import PropertiesMixin, PropertyType, PropertyValue, UserProperties

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

VARIABLE_HEADER_START = b"\x00\x04MQTT\x05"

packet_types: dict[ControlPacketType, type[MQTTPacket]] = {}


class ReasonCode(IntEnum):
    SUCCESS = 0x00
    NORMAL_DISCONNECTION = 0x00
    GRANTED_QOS_0 = 0x00
    GRANTED_QOS_1 = 0x01
    GRANTED_QOS_2 = 0x02
    DISCONNECT_WITH_WILL_MESSAGE = 0x04
    NO_MATCHING_SUBSCRIBERS = 0x10
    NO_SUBSCRIPTION_EXISTED = 0x11
    CONTINUE_AUTHENTICATION = 0x18
    REAUTHENTICATE = 0x19
    UNSPECIFIED_ERROR = 0x80
    MALFORMED_PACKET = 0x81
    PROTOCOL_ERROR = 0x82
    IMPLEMENTATION_SPECIFIC_ERROR = 0x83
    UNSUPPORTED_PROTOCOL_VERSION = 0x84
    CLIENT_IDENTIFIER_NOT_VALID = 0x85
    BAD_USERNAME_OR_PASSWORD = 0x86
    NOT_AUTHORIZED = 0x87
    SERVER_UNAVAILABLE = 0x88
    SERVER_BUSY = 0x89
    BANNED = 0x8A
    SERVER_SHUTTING_DOWN = 0x8B
    BAD_AUTHENTICATION_METHOD = 0x8C
    KEEP_ALIVE_TIMEOUT = 0x8D
    SESSION_TAKEN_OVER = 0x8E
    TOPIC_FILTER_INVALID = 0x8F
    TOPIC_NAME_INVALID = 0x90
    PACKET_IDENTIFIER_IN_USE = 0x91
    PACKET_IDENTIFIER_NOT_FOUND = 0x92
    RECEIVE_MAXIMUM_EXCEEDED = 0x93
    TOPIC_ALIAS_INVALID = 0x94
    PACKET_TOO_LARGE = 0x95
    MESSAGE_RATE_TOO_HIGH = 0x96
    QUOTA_EXCEEDED = 0x97
    ADMINISTRATIVE_ACTION = 0x98
    PAYLOAD_FORMAT_INVALID = 0x99
    RETAIN_NOT_SUPPORTED = 0x9A
    QOS_NOT_SUPPORTED = 0x9B
    USE_ANOTHER_SERVER = 0x9C
    SERVER_MOVED = 0x9D
    SHARED_SUBSCRIPTIONS_NOT_SUPPORTED = 0x9E
    CONNECTION_RATE_EXCEEDED = 0x9F
    MAXIMUM_CONNECT_TIME = 0xA0
    SUBSCRIPTION_IDENTIFIERS_NOT_SUPPORTED = 0xA1
    WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED = 0xA2

    @classmethod
    def get(cls, value: int) -> Self:
        for member in cls.__members__.values():
            if member.value == value:
                return member

        raise MQTTDecodeError(f"unknown reason code: 0x{value:02X}")


class RetainHandling(IntEnum):
    SEND_RETAINED = 0
    SEND_RETAINED_IF_NOT_SUBSCRIBED = 1
    NO_RETAINED = 2

    @classmethod
    def get(cls, value: int) -> Self:
        for member in cls.__members__.values():
            if member.value == value:
                return member

        # MQTT-3.8.3-4 (retain handling 3 is a protocol error, not a malformed packet)
        raise MQTTProtocolError(f"unknown retain handling: 0x{value:02X}")


class QoS(IntEnum):
    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2

    @classmethod
    def get(cls, value: int) -> Self:
        for member in cls.__members__.values():
            if member.value == value:
                return member

        raise MQTTDecodeError(f"unknown QoS value: 0x{value:02X}")


def validate_reason_code(
    instance: ReasonCodeMixin, attribute: Attribute[Any], value: ReasonCode
) -> None:
    if value not in instance.allowed_reason_codes:
        raise ValueError(
            f"reason code 0x{value:02X} is not allowed for "
            f"{instance.__class__.__name__}"
        )


def validate_packet_id(
    instance: object, attribute: Attribute[Any], value: int | None
) -> None:
    if value is None:
        return

    if not 0 <= value <= 65535:
        raise ValueError(f"packet_id must be between 0 and 65535, got {value}")
    elif value == 0:
        # MQTT-2.2.1-3
        raise MQTTProtocolError("packet identifier must not be 0")


class ReasonCodeMixin:
    allowed_reason_codes: ClassVar[frozenset[ReasonCode]]

    @classmethod
    def decode_reason_code(cls, data: memoryview) -> tuple[memoryview, ReasonCode]:
        data, reason_code_num = decode_fixed_integer(data, 1)
        reason_code = ReasonCode.get(reason_code_num)
        if reason_code not in cls.allowed_reason_codes:
            raise MQTTDecodeError(
                f"reason code 0x{reason_code:02X} is not allowed for {cls.__name__}"
            )

        return data, reason_code


@define(kw_only=True)
class Will(PropertiesMixin):
    """The will message carried in a ``CONNECT`` packet."""

    allowed_property_types = frozenset(
        [
            PropertyType.PAYLOAD_FORMAT_INDICATOR,
            PropertyType.MESSAGE_EXPIRY_INTERVAL,
            PropertyType.CONTENT_TYPE,
            PropertyType.RESPONSE_TOPIC,
            PropertyType.CORRELATION_DATA,
            PropertyType.WILL_DELAY_INTERVAL,
            PropertyType.USER_PROPERTY,
        ]
    )

    topic: str = field(validator=instance_of(str))
    payload: BinaryValue = field(validator=instance_of(BINARY_TYPES))
    retain: bool = False
    qos: QoS = field(default=QoS.AT_MOST_ONCE, validator=instance_of(QoS))


@define
class Subscription:
    """A topic filter and its subscription options, as sent in ``SUBSCRIBE``."""

    QOS_MASK = 3
    NO_LOCAL_FLAG = 4
    RETAIN_AS_PUBLISHED_FLAG = 8
    RETAIN_HANDLING_MASK = 48
    RESERVED_MASK = 192

    pattern: str = field(validator=instance_of(str))
    max_qos: QoS = field(
        kw_only=True, default=QoS.EXACTLY_ONCE, validator=instance_of(QoS)
    )
    no_local: bool = field(kw_only=True, default=False)
    retain_as_published: bool = field(kw_only=True, default=False)
    retain_handling: RetainHandling = field(
        kw_only=True,
        default=RetainHandling.SEND_RETAINED,
        validator=instance_of(RetainHandling),
    )

    def __attrs_post_init__(self) -> None:
        if not self.pattern:
            # MQTT-4.7.3-1
            raise MQTTProtocolError("topic filters must be at least one character long")

    @classmethod
    def decode(cls, data: memoryview) -> tuple[memoryview, Subscription]:
        data, pattern = decode_utf8(data)
        data, options = decode_fixed_integer(data, 1)
        if options & cls.RESERVED_MASK:
            # MQTT-3.8.3-5
            raise MQTTDecodeError(
                f"reserved bits set in the subscription options of {pattern!r}"
            )

        qos = QoS.get(options & cls.QOS_MASK)
        no_local = bool(options & cls.NO_LOCAL_FLAG)
        retain_as_published = bool(options & cls.RETAIN_AS_PUBLISHED_FLAG)
        retain_handling = RetainHandling.get((options & cls.RETAIN_HANDLING_MASK) >> 4)
        return data, Subscription(
            pattern,
            max_qos=qos,
            no_local=no_local,
            retain_as_published=retain_as_published,
            retain_handling=retain_handling,
        )

    def encode(self, buffer: bytearray) -> None:
        encode_utf8(self.pattern, buffer)
        options = self.max_qos | self.retain_handling << 4
        if self.no_local:
            options |= self.NO_LOCAL_FLAG

        if self.retain_as_published:
            options |= self.RETAIN_AS_PUBLISHED_FLAG

        encode_fixed_integer(options, buffer, 1)


class MQTTPacket(metaclass=ABCMeta):
    """Abstract base class for all MQTT packets"""

    packet_type: ClassVar[ControlPacketType]

    __slots__ = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        packet_type = cls.__dict__.get("packet_type")
        if packet_type is not None:
            assert isinstance(packet_type, ControlPacketType)
            packet_types[packet_type] = cls

    def encode_fixed_header(
        self, flags: int, payload: BinaryValue, buffer: bytearray
    ) -> None:
        encode_fixed_header(self.packet_type, flags, payload, buffer)

    @classmethod
    @abstractmethod
    def decode(cls, data: memoryview, flags: int) -> tuple[memoryview, Self]:
        """
        Decode the variable header and payload of a packet of this type.

        :param data: exactly the bytes following the fixed header
        :param flags: the flags from the fixed header
        :return: a tuple of (unconsumed data, decoded packet)

        """

    @abstractmethod
    def encode(self, buffer: bytearray) -> None:
        """Append the complete encoded packet to the given buffer."""


@define(kw_only=True)
class MQTTConnectPacket(MQTTPacket, PropertiesMixin):
    """Connection request"""

    packet_type = ControlPacketType.CONNECT
    allowed_property_types = frozenset(
        [
            PropertyType.SESSION_EXPIRY_INTERVAL,
            PropertyType.AUTHENTICATION_METHOD,
            PropertyType.AUTHENTICATION_DATA,
            PropertyType.REQUEST_PROBLEM_INFORMATION,
            PropertyType.REQUEST_RESPONSE_INFORMATION,
            PropertyType.RECEIVE_MAXIMUM,
            PropertyType.TOPIC_ALIAS_MAXIMUM,
            PropertyType.USER_PROPERTY,
            PropertyType.MAXIMUM_PACKET_SIZE,
        ]
    )

    # Connect flags
    RESERVED_FLAG = 1
    CLEAN_START_FLAG = 2
    WILL_FLAG = 4
    WILL_QOS_MASK = 24
    WILL_RETAIN_FLAG = 32
    PASSWORD_FLAG = 64
    USERNAME_FLAG = 128

    client_id: str = field(default="", validator=instance_of(str))
    will: Will | None = field(default=None, validator=optional(instance_of(Will)))
    username: str | None = None
    password: BinaryValue | None = field(
        default=None, validator=optional(instance_of(BINARY_TYPES))
    )
    clean_start: bool = False
    keep_alive: int = 0

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTConnectPacket]:
        # Decode the variable header
        data, protocol_name = decode_utf8(data)
        if protocol_name != "MQTT":
            raise MQTTProtocolError(f"unexpected protocol: {protocol_name}")

        data, protocol_version = decode_fixed_integer(data, 1)
        if protocol_version != 5:
            raise MQTTUnsupportedProtocolVersion(
                f"unsupported protocol version: {protocol_version}"
            )

        data, connect_flags = decode_fixed_integer(data, 1)
        if connect_flags & cls.RESERVED_FLAG:
            # MQTT-3.1.2-3
            raise MalformedFixedHeader("reserved bit set in the CONNECT flags")

        if not connect_flags & cls.WILL_FLAG and connect_flags & (
            cls.WILL_QOS_MASK | cls.WILL_RETAIN_FLAG
        ):
            # MQTT-3.1.2-11, MQTT-3.1.2-13
            raise MQTTDecodeError("will QoS or will retain set without the will flag")

        clean_start = bool(connect_flags & cls.CLEAN_START_FLAG)
        data, keep_alive = decode_fixed_integer(data, 2)
        data, properties, user_properties = cls.decode_properties(data)

        # Decode the payload
        data, client_id = decode_utf8(data)

        will: Will | None = None
        if connect_flags & cls.WILL_FLAG:
            data, will_properties, will_user_properties = Will.decode_properties(data)
            data, will_topic = decode_utf8(data)
            data, will_payload = decode_binary(data)
            will = Will(
                topic=will_topic,
                payload=will_payload,
                retain=bool(connect_flags & cls.WILL_RETAIN_FLAG),
                qos=QoS.get((connect_flags & cls.WILL_QOS_MASK) >> 3),
                properties=will_properties,
                user_properties=will_user_properties,
            )

        username: str | None = None
        if connect_flags & cls.USERNAME_FLAG:
            data, username = decode_utf8(data)

        password: memoryview | None = None
        if connect_flags & cls.PASSWORD_FLAG:
            data, password = decode_binary(data)

        return data, cls(
            client_id=client_id,
            will=will,
            username=username,
            password=password,
            clean_start=clean_start,
            keep_alive=keep_alive,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Gather the flags for the variable header
        connect_flags = 0
        if self.clean_start:
            connect_flags |= self.CLEAN_START_FLAG

        if self.will:
            connect_flags |= self.WILL_FLAG | (self.will.qos << 3)
            if self.will.retain:
                connect_flags |= self.WILL_RETAIN_FLAG

        if self.username is not None:
            connect_flags |= self.USERNAME_FLAG

        if self.password is not None:
            connect_flags |= self.PASSWORD_FLAG

        # Encode the variable header
        internal_buffer.extend(VARIABLE_HEADER_START)
        encode_fixed_integer(connect_flags, internal_buffer, 1)
        encode_fixed_integer(self.keep_alive, internal_buffer, 2)
        self.encode_properties(internal_buffer)

        # Encode the payload
        encode_utf8(self.client_id, internal_buffer)
        if self.will:
            self.will.encode_properties(internal_buffer)
            encode_utf8(self.will.topic, internal_buffer)
            encode_binary(self.will.payload, internal_buffer)

        if self.username is not None:
            encode_utf8(self.username, internal_buffer)

        if self.password is not None:
            encode_binary(self.password, internal_buffer)

        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTConnAckPacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """Connection acknowledgment"""

    packet_type = ControlPacketType.CONNACK
    allowed_property_types = frozenset(
        [
            PropertyType.SESSION_EXPIRY_INTERVAL,
            PropertyType.ASSIGNED_CLIENT_IDENTIFIER,
            PropertyType.SERVER_KEEP_ALIVE,
            PropertyType.AUTHENTICATION_METHOD,
            PropertyType.AUTHENTICATION_DATA,
            PropertyType.RESPONSE_INFORMATION,
            PropertyType.SERVER_REFERENCE,
            PropertyType.REASON_STRING,
            PropertyType.RECEIVE_MAXIMUM,
            PropertyType.TOPIC_ALIAS_MAXIMUM,
            PropertyType.MAXIMUM_QOS,
            PropertyType.RETAIN_AVAILABLE,
            PropertyType.USER_PROPERTY,
            PropertyType.MAXIMUM_PACKET_SIZE,
            PropertyType.WILDCARD_SUBSCRIPTION_AVAILABLE,
            PropertyType.SUBSCRIPTION_IDENTIFIER_AVAILABLE,
            PropertyType.SHARED_SUBSCRIPTION_AVAILABLE,
        ]
    )
    allowed_reason_codes = frozenset(
        [
            ReasonCode.SUCCESS,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.MALFORMED_PACKET,
            ReasonCode.PROTOCOL_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.UNSUPPORTED_PROTOCOL_VERSION,
            ReasonCode.CLIENT_IDENTIFIER_NOT_VALID,
            ReasonCode.BAD_USERNAME_OR_PASSWORD,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.SERVER_UNAVAILABLE,
            ReasonCode.SERVER_BUSY,
            ReasonCode.BANNED,
            ReasonCode.BAD_AUTHENTICATION_METHOD,
            ReasonCode.TOPIC_NAME_INVALID,
            ReasonCode.PACKET_TOO_LARGE,
            ReasonCode.QUOTA_EXCEEDED,
            ReasonCode.PAYLOAD_FORMAT_INVALID,
            ReasonCode.RETAIN_NOT_SUPPORTED,
            ReasonCode.QOS_NOT_SUPPORTED,
            ReasonCode.USE_ANOTHER_SERVER,
            ReasonCode.SERVER_MOVED,
            ReasonCode.CONNECTION_RATE_EXCEEDED,
        ]
    )

    SESSION_PRESENT_FLAG = 1

    reason_code: ReasonCode = field(
        default=ReasonCode.SUCCESS,
        validator=[instance_of(ReasonCode), validate_reason_code],
    )
    session_present: bool = False

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTConnAckPacket]:
        data, connect_ack_flags = decode_fixed_integer(data, 1)
        if connect_ack_flags & ~cls.SESSION_PRESENT_FLAG:
            # MQTT-3.2.2-1
            raise MQTTDecodeError("reserved bits set in the CONNACK flags")

        data, reason_code = cls.decode_reason_code(data)
        properties: dict[PropertyType, PropertyValue] = {}
        user_properties: UserProperties = []
        if data:
            data, properties, user_properties = cls.decode_properties(data)
        elif reason_code is not ReasonCode.SUCCESS:
            # Only a successful CONNACK may leave out the properties
            raise MQTTDecodeError(
                f"CONNACK with reason code 0x{reason_code:02X} must contain properties"
            )

        return data, cls(
            session_present=bool(connect_ack_flags & cls.SESSION_PRESENT_FLAG),
            reason_code=reason_code,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()
        connect_flags = int(self.session_present)
        encode_fixed_integer(connect_flags, internal_buffer, 1)
        encode_fixed_integer(self.reason_code, internal_buffer, 1)
        self.encode_properties(internal_buffer)
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTPublishPacket(MQTTPacket, PropertiesMixin):
    """Publish message"""

    packet_type = ControlPacketType.PUBLISH
    allowed_property_types = frozenset(
        [
            PropertyType.PAYLOAD_FORMAT_INDICATOR,
            PropertyType.MESSAGE_EXPIRY_INTERVAL,
            PropertyType.CONTENT_TYPE,
            PropertyType.RESPONSE_TOPIC,
            PropertyType.CORRELATION_DATA,
            PropertyType.SUBSCRIPTION_IDENTIFIER,
            PropertyType.TOPIC_ALIAS,
            PropertyType.USER_PROPERTY,
        ]
    )
    repeatable_property_types = frozenset(
        [PropertyType.SUBSCRIPTION_IDENTIFIER, PropertyType.USER_PROPERTY]
    )

    RETAIN_FLAG = 1
    QOS_MASK = 6
    DUP_FLAG = 8

    topic: str = field(validator=instance_of(str))
    payload: BinaryValue = field(default=b"", validator=instance_of(BINARY_TYPES))
    packet_id: int | None = field(default=None, validator=validate_packet_id)
    retain: bool = False
    qos: QoS = field(default=QoS.AT_MOST_ONCE, validator=instance_of(QoS))
    duplicate: bool = False

    def __attrs_post_init__(self) -> None:
        if self.qos:
            if self.packet_id is None:
                raise ValueError("packet_id must be an integer when qos > 0")
        else:
            if self.packet_id is not None:
                raise ValueError("packet_id must be None when qos is 0")
            elif self.duplicate:
                # MQTT-3.3.1-2
                raise MQTTProtocolError("the DUP flag must not be set when qos is 0")

        if "+" in self.topic or "#" in self.topic:
            # MQTT-3.3.2-2
            raise MQTTProtocolError(
                f"topic name must not contain wildcard characters: {self.topic!r}"
            )

        if not self.topic and PropertyType.TOPIC_ALIAS not in self.properties:
            raise MQTTProtocolError(
                "topic name must not be empty unless a topic alias is present"
            )

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTPublishPacket]:
        # Decode the fixed header flags
        retain = bool(flags & cls.RETAIN_FLAG)
        qos = QoS.get((flags & cls.QOS_MASK) >> 1)
        duplicate = bool(flags & cls.DUP_FLAG)

        # Decode the variable header
        data, topic = decode_utf8(data)
        packet_id: int | None = None
        if qos:
            data, packet_id = decode_fixed_integer(data, 2)

        data, properties, user_properties = cls.decode_properties(data)

        # The payload is everything that remains in the frame
        return data[len(data) :], cls(
            topic=topic,
            payload=data,
            packet_id=packet_id,
            qos=qos,
            retain=retain,
            duplicate=duplicate,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_utf8(self.topic, internal_buffer)
        if self.packet_id is not None:
            encode_fixed_integer(self.packet_id, internal_buffer, 2)

        self.encode_properties(internal_buffer)

        # Encode the payload
        internal_buffer.extend(self.payload)

        # Encode the fixed header
        flags = int(self.retain) | self.qos << 1 | self.duplicate << 3
        self.encode_fixed_header(flags, internal_buffer, buffer)


@define(kw_only=True)
class MQTTPublishResponsePacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """
    Base class for the acknowledgments in the QoS 1 and QoS 2 delivery flows.

    These packets share the same layout: a packet identifier, then a reason code and
    properties which are left out when they have their default values (the reason code
    is then ``SUCCESS`` and there are no properties).
    """

    allowed_property_types = frozenset(
        [
            PropertyType.REASON_STRING,
            PropertyType.USER_PROPERTY,
        ]
    )
    allowed_reason_codes = frozenset([ReasonCode.SUCCESS])

    packet_id: int = field(validator=validate_packet_id)
    reason_code: ReasonCode = field(
        default=ReasonCode.SUCCESS,
        validator=[instance_of(ReasonCode), validate_reason_code],
    )

    @classmethod
    def decode(cls, data: memoryview, flags: int) -> tuple[memoryview, Self]:
        # Decode the variable header
        reason_code = ReasonCode.SUCCESS
        properties: dict[PropertyType, PropertyValue] = {}
        user_properties: UserProperties = []

        data, packet_id = decode_fixed_integer(data, 2)
        if data:
            data, reason_code = cls.decode_reason_code(data)
            if data:
                data, properties, user_properties = cls.decode_properties(data)

        return data, cls(
            packet_id=packet_id,
            reason_code=reason_code,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header, leaving out trailing fields with default values
        encode_fixed_integer(self.packet_id, internal_buffer, 2)
        if self.reason_code or self.has_properties():
            encode_fixed_integer(self.reason_code, internal_buffer, 1)
            if self.has_properties():
                self.encode_properties(internal_buffer)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTPublishAckPacket(MQTTPublishResponsePacket):
    """Publish acknowledgment (QoS 1)"""

    packet_type = ControlPacketType.PUBACK
    allowed_reason_codes = frozenset(
        [
            ReasonCode.SUCCESS,
            ReasonCode.NO_MATCHING_SUBSCRIBERS,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.TOPIC_NAME_INVALID,
            ReasonCode.PACKET_IDENTIFIER_IN_USE,
            ReasonCode.QUOTA_EXCEEDED,
            ReasonCode.PAYLOAD_FORMAT_INVALID,
        ]
    )


@define(kw_only=True)
class MQTTPublishReceivePacket(MQTTPublishResponsePacket):
    """Publish received (QoS 2 delivery part 1)"""

    packet_type = ControlPacketType.PUBREC
    allowed_reason_codes = frozenset(
        [
            ReasonCode.SUCCESS,
            ReasonCode.NO_MATCHING_SUBSCRIBERS,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.TOPIC_NAME_INVALID,
            ReasonCode.PACKET_IDENTIFIER_IN_USE,
            ReasonCode.QUOTA_EXCEEDED,
            ReasonCode.PAYLOAD_FORMAT_INVALID,
        ]
    )


@define(kw_only=True)
class MQTTPublishReleasePacket(MQTTPublishResponsePacket):
    """Publish release (QoS 2 delivery part 2)"""

    packet_type = ControlPacketType.PUBREL
    allowed_reason_codes = frozenset(
        [ReasonCode.SUCCESS, ReasonCode.PACKET_IDENTIFIER_NOT_FOUND]
    )


@define(kw_only=True)
class MQTTPublishCompletePacket(MQTTPublishResponsePacket):
    """Publish complete (QoS 2 delivery part 3)"""

    packet_type = ControlPacketType.PUBCOMP
    allowed_reason_codes = frozenset(
        [ReasonCode.SUCCESS, ReasonCode.PACKET_IDENTIFIER_NOT_FOUND]
    )


@define(kw_only=True)
class MQTTSubscribePacket(MQTTPacket, PropertiesMixin):
    """Subscribe request"""

    packet_type = ControlPacketType.SUBSCRIBE
    allowed_property_types = frozenset(
        [
            PropertyType.SUBSCRIPTION_IDENTIFIER,
            PropertyType.USER_PROPERTY,
        ]
    )

    packet_id: int = field(validator=validate_packet_id)
    subscriptions: Sequence[Subscription]

    def __attrs_post_init__(self) -> None:
        if not self.subscriptions:
            # MQTT-3.8.3-2
            raise MQTTProtocolError("subscription must have at least one topic filter")

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTSubscribePacket]:
        # Decode the variable header
        data, packet_id = decode_fixed_integer(data, 2)
        data, properties, user_properties = cls.decode_properties(data)

        # Decode the payload
        subscriptions: list[Subscription] = []
        while data:
            data, subscription = Subscription.decode(data)
            subscriptions.append(subscription)

        return data, cls(
            packet_id=packet_id,
            subscriptions=subscriptions,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_fixed_integer(self.packet_id, internal_buffer, 2)
        self.encode_properties(internal_buffer)

        # Encode the payload
        for subscription in self.subscriptions:
            subscription.encode(internal_buffer)

        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTSubscribeAckPacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """Subscribe acknowledgment"""

    packet_type = ControlPacketType.SUBACK
    allowed_property_types = frozenset(
        [
            PropertyType.REASON_STRING,
            PropertyType.USER_PROPERTY,
        ]
    )
    allowed_reason_codes = frozenset(
        [
            ReasonCode.GRANTED_QOS_0,
            ReasonCode.GRANTED_QOS_1,
            ReasonCode.GRANTED_QOS_2,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.TOPIC_FILTER_INVALID,
            ReasonCode.PACKET_IDENTIFIER_IN_USE,
            ReasonCode.QUOTA_EXCEEDED,
            ReasonCode.SHARED_SUBSCRIPTIONS_NOT_SUPPORTED,
            ReasonCode.SUBSCRIPTION_IDENTIFIERS_NOT_SUPPORTED,
            ReasonCode.WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED,
        ]
    )

    packet_id: int = field(validator=validate_packet_id)
    reason_codes: Sequence[ReasonCode] = field(
        validator=deep_iterable([instance_of(ReasonCode), validate_reason_code])
    )

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTSubscribeAckPacket]:
        # Decode the variable header
        data, packet_id = decode_fixed_integer(data, 2)
        data, properties, user_properties = cls.decode_properties(data)

        # Decode the payload
        reason_codes: list[ReasonCode] = []
        while data:
            data, reason_code = cls.decode_reason_code(data)
            reason_codes.append(reason_code)

        return data, cls(
            packet_id=packet_id,
            reason_codes=reason_codes,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_fixed_integer(self.packet_id, internal_buffer, 2)
        self.encode_properties(internal_buffer)

        # Encode the payload
        for reason_code in self.reason_codes:
            encode_fixed_integer(reason_code, internal_buffer, 1)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTUnsubscribePacket(MQTTPacket, PropertiesMixin):
    """Unsubscribe request"""

    packet_type = ControlPacketType.UNSUBSCRIBE
    allowed_property_types = frozenset([PropertyType.USER_PROPERTY])

    packet_id: int = field(validator=validate_packet_id)
    patterns: Sequence[str]

    def __attrs_post_init__(self) -> None:
        if not self.patterns:
            # MQTT-3.10.3-2
            raise MQTTProtocolError(
                "an unsubscribe request must have at least one topic filter"
            )

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTUnsubscribePacket]:
        # Decode the variable header
        data, packet_id = decode_fixed_integer(data, 2)
        data, properties, user_properties = cls.decode_properties(data)

        # Decode the payload
        patterns: list[str] = []
        while data:
            data, pattern = decode_utf8(data)
            patterns.append(pattern)

        return data, cls(
            packet_id=packet_id,
            patterns=patterns,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_fixed_integer(self.packet_id, internal_buffer, 2)
        self.encode_properties(internal_buffer)

        # Encode the payload
        for pattern in self.patterns:
            encode_utf8(pattern, internal_buffer)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTUnsubscribeAckPacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """Unsubscribe acknowledgment"""

    packet_type = ControlPacketType.UNSUBACK
    allowed_property_types = frozenset(
        [PropertyType.REASON_STRING, PropertyType.USER_PROPERTY]
    )
    allowed_reason_codes = frozenset(
        [
            ReasonCode.SUCCESS,
            ReasonCode.NO_SUBSCRIPTION_EXISTED,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.TOPIC_FILTER_INVALID,
            ReasonCode.PACKET_IDENTIFIER_IN_USE,
        ]
    )

    packet_id: int = field(validator=validate_packet_id)
    reason_codes: Sequence[ReasonCode] = field(
        validator=deep_iterable([instance_of(ReasonCode), validate_reason_code])
    )

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTUnsubscribeAckPacket]:
        # Decode the variable header
        data, packet_id = decode_fixed_integer(data, 2)
        data, properties, user_properties = cls.decode_properties(data)

        # Decode the payload
        reason_codes: list[ReasonCode] = []
        while data:
            data, reason_code = cls.decode_reason_code(data)
            reason_codes.append(reason_code)

        return data, cls(
            packet_id=packet_id,
            reason_codes=reason_codes,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_fixed_integer(self.packet_id, internal_buffer, 2)
        self.encode_properties(internal_buffer)

        # Encode the payload
        for reason_code in self.reason_codes:
            encode_fixed_integer(reason_code, internal_buffer, 1)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTPingRequestPacket(MQTTPacket):
    """PING request"""

    packet_type = ControlPacketType.PINGREQ

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTPingRequestPacket]:
        return data, cls()

    def encode(self, buffer: bytearray) -> None:
        # Encode the fixed header
        self.encode_fixed_header(RESERVED_FLAGS[self.packet_type], b"", buffer)


@define(kw_only=True)
class MQTTPingResponsePacket(MQTTPacket):
    """PING response"""

    packet_type = ControlPacketType.PINGRESP

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTPingResponsePacket]:
        return data, cls()

    def encode(self, buffer: bytearray) -> None:
        # Encode the fixed header
        self.encode_fixed_header(RESERVED_FLAGS[self.packet_type], b"", buffer)


@define(kw_only=True)
class MQTTDisconnectPacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """Disconnect notification"""

    packet_type = ControlPacketType.DISCONNECT
    allowed_property_types = frozenset(
        [
            PropertyType.SESSION_EXPIRY_INTERVAL,
            PropertyType.SERVER_REFERENCE,
            PropertyType.REASON_STRING,
            PropertyType.USER_PROPERTY,
        ]
    )
    allowed_reason_codes = frozenset(
        [
            ReasonCode.NORMAL_DISCONNECTION,
            ReasonCode.DISCONNECT_WITH_WILL_MESSAGE,
            ReasonCode.UNSPECIFIED_ERROR,
            ReasonCode.MALFORMED_PACKET,
            ReasonCode.PROTOCOL_ERROR,
            ReasonCode.IMPLEMENTATION_SPECIFIC_ERROR,
            ReasonCode.NOT_AUTHORIZED,
            ReasonCode.SERVER_BUSY,
            ReasonCode.SERVER_SHUTTING_DOWN,
            ReasonCode.KEEP_ALIVE_TIMEOUT,
            ReasonCode.SESSION_TAKEN_OVER,
            ReasonCode.TOPIC_FILTER_INVALID,
            ReasonCode.TOPIC_NAME_INVALID,
            ReasonCode.RECEIVE_MAXIMUM_EXCEEDED,
            ReasonCode.TOPIC_ALIAS_INVALID,
            ReasonCode.PACKET_TOO_LARGE,
            ReasonCode.MESSAGE_RATE_TOO_HIGH,
            ReasonCode.QUOTA_EXCEEDED,
            ReasonCode.ADMINISTRATIVE_ACTION,
            ReasonCode.PAYLOAD_FORMAT_INVALID,
            ReasonCode.RETAIN_NOT_SUPPORTED,
            ReasonCode.QOS_NOT_SUPPORTED,
            ReasonCode.USE_ANOTHER_SERVER,
            ReasonCode.SERVER_MOVED,
            ReasonCode.SHARED_SUBSCRIPTIONS_NOT_SUPPORTED,
            ReasonCode.CONNECTION_RATE_EXCEEDED,
            ReasonCode.MAXIMUM_CONNECT_TIME,
            ReasonCode.SUBSCRIPTION_IDENTIFIERS_NOT_SUPPORTED,
            ReasonCode.WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED,
        ]
    )

    reason_code: ReasonCode = field(
        default=ReasonCode.NORMAL_DISCONNECTION,
        validator=[instance_of(ReasonCode), validate_reason_code],
    )

    @classmethod
    def decode(
        cls, data: memoryview, flags: int
    ) -> tuple[memoryview, MQTTDisconnectPacket]:
        # Decode the variable header
        reason_code = ReasonCode.NORMAL_DISCONNECTION
        properties: dict[PropertyType, PropertyValue] = {}
        user_properties: UserProperties = []

        if data:
            data, reason_code = cls.decode_reason_code(data)
            if data:
                data, properties, user_properties = cls.decode_properties(data)

        return data, cls(
            reason_code=reason_code,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header, leaving out trailing fields with default values
        if self.reason_code or self.has_properties():
            encode_fixed_integer(self.reason_code, internal_buffer, 1)
            if self.has_properties():
                self.encode_properties(internal_buffer)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )


@define(kw_only=True)
class MQTTAuthPacket(MQTTPacket, PropertiesMixin, ReasonCodeMixin):
    """Authentication exchange"""

    packet_type = ControlPacketType.AUTH
    allowed_property_types = frozenset(
        [
            PropertyType.AUTHENTICATION_METHOD,
            PropertyType.AUTHENTICATION_DATA,
            PropertyType.REASON_STRING,
            PropertyType.USER_PROPERTY,
        ]
    )
    allowed_reason_codes = frozenset(
        [
            ReasonCode.SUCCESS,
            ReasonCode.CONTINUE_AUTHENTICATION,
            ReasonCode.REAUTHENTICATE,
        ]
    )

    reason_code: ReasonCode = field(
        validator=[instance_of(ReasonCode), validate_reason_code]
    )

    @classmethod
    def decode(cls, data: memoryview, flags: int) -> tuple[memoryview, MQTTAuthPacket]:
        if not data:
            raise MQTTProtocolError("AUTH packet must contain a reason code")

        # Decode the variable header
        properties: dict[PropertyType, PropertyValue] = {}
        user_properties: UserProperties = []
        data, reason_code = cls.decode_reason_code(data)
        if data:
            data, properties, user_properties = cls.decode_properties(data)

        return data, cls(
            reason_code=reason_code,
            properties=properties,
            user_properties=user_properties,
        )

    def encode(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()

        # Encode the variable header
        encode_fixed_integer(self.reason_code, internal_buffer, 1)
        self.encode_properties(internal_buffer)

        # Encode the fixed header
        self.encode_fixed_header(
            RESERVED_FLAGS[self.packet_type], internal_buffer, buffer
        )
