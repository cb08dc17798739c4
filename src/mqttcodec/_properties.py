from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Mapping
from enum import IntEnum
from functools import partial
from typing import ClassVar, cast

from attrs import define, field

from ._exceptions import (
    InsufficientData,
    MalformedProperties,
    MQTTDuplicateProperty,
    MQTTProtocolError,
    MQTTUnsupportedPropertyType,
)
from ._primitives import (
    decode_binary,
    decode_fixed_integer,
    decode_utf8,
    decode_utf8_pair,
    decode_variable_integer,
    encode_binary,
    encode_fixed_integer,
    encode_utf8,
    encode_utf8_pair,
    encode_variable_integer,
)

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

if sys.version_info >= (3, 10):
    from typing import TypeAlias
else:
    from typing_extensions import TypeAlias

PropertyValue: TypeAlias = (
    "str | bytes | bytearray | memoryview | int | tuple[str, str] | list[int]"
)
UserProperties: TypeAlias = "list[tuple[str, str]]"


class PropertyType(IntEnum):
    PAYLOAD_FORMAT_INDICATOR = (
        0x01,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    MESSAGE_EXPIRY_INTERVAL = (
        0x02,
        partial(encode_fixed_integer, size=4),
        partial(decode_fixed_integer, size=4),
    )
    CONTENT_TYPE = 0x03, encode_utf8, decode_utf8
    RESPONSE_TOPIC = 0x08, encode_utf8, decode_utf8
    CORRELATION_DATA = 0x09, encode_binary, decode_binary
    SUBSCRIPTION_IDENTIFIER = 0x0B, encode_variable_integer, decode_variable_integer
    SESSION_EXPIRY_INTERVAL = (
        0x11,
        partial(encode_fixed_integer, size=4),
        partial(decode_fixed_integer, size=4),
    )
    ASSIGNED_CLIENT_IDENTIFIER = 0x12, encode_utf8, decode_utf8
    SERVER_KEEP_ALIVE = (
        0x13,
        partial(encode_fixed_integer, size=2),
        partial(decode_fixed_integer, size=2),
    )
    AUTHENTICATION_METHOD = 0x15, encode_utf8, decode_utf8
    AUTHENTICATION_DATA = 0x16, encode_binary, decode_binary
    REQUEST_PROBLEM_INFORMATION = (
        0x17,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    WILL_DELAY_INTERVAL = (
        0x18,
        partial(encode_fixed_integer, size=4),
        partial(decode_fixed_integer, size=4),
    )
    REQUEST_RESPONSE_INFORMATION = (
        0x19,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    RESPONSE_INFORMATION = 0x1A, encode_utf8, decode_utf8
    SERVER_REFERENCE = 0x1C, encode_utf8, decode_utf8
    REASON_STRING = 0x1F, encode_utf8, decode_utf8
    RECEIVE_MAXIMUM = (
        0x21,
        partial(encode_fixed_integer, size=2),
        partial(decode_fixed_integer, size=2),
    )
    TOPIC_ALIAS_MAXIMUM = (
        0x22,
        partial(encode_fixed_integer, size=2),
        partial(decode_fixed_integer, size=2),
    )
    TOPIC_ALIAS = (
        0x23,
        partial(encode_fixed_integer, size=2),
        partial(decode_fixed_integer, size=2),
    )
    MAXIMUM_QOS = (
        0x24,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    RETAIN_AVAILABLE = (
        0x25,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    USER_PROPERTY = 0x26, encode_utf8_pair, decode_utf8_pair
    MAXIMUM_PACKET_SIZE = (
        0x27,
        partial(encode_fixed_integer, size=4),
        partial(decode_fixed_integer, size=4),
    )
    WILDCARD_SUBSCRIPTION_AVAILABLE = (
        0x28,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    SUBSCRIPTION_IDENTIFIER_AVAILABLE = (
        0x29,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )
    SHARED_SUBSCRIPTION_AVAILABLE = (
        0x2A,
        partial(encode_fixed_integer, size=1),
        partial(decode_fixed_integer, size=1),
    )

    encoder: Callable[[PropertyValue, bytearray], None]
    decoder: Callable[[memoryview], tuple[memoryview, PropertyValue]]

    def __new__(
        cls,
        identifier: int,
        encoder: Callable[[PropertyValue, bytearray], None],
        decoder: Callable[[memoryview], tuple[memoryview, PropertyValue]],
    ) -> PropertyType:
        instance = int.__new__(cls, identifier)
        instance._value_ = identifier
        instance.encoder = encoder
        instance.decoder = decoder
        return instance

    @classmethod
    def get(cls, value: int) -> Self:
        for member in cls.__members__.values():
            if member.value == value:
                return member

        raise MalformedProperties(f"unknown property type: 0x{value:02X}")

    def validate(self, value: PropertyValue) -> None:
        """
        Check that a value is in the range allowed for this property type.

        :raises MQTTProtocolError: if the value is not allowed

        """
        if self in BOOLEAN_PROPERTY_TYPES and value not in (0, 1):
            raise MQTTProtocolError(f"{self._name_} must be 0 or 1, got {value!r}")
        elif self in NONZERO_PROPERTY_TYPES and value == 0:
            raise MQTTProtocolError(f"{self._name_} must not be 0")


BOOLEAN_PROPERTY_TYPES = frozenset(
    [
        PropertyType.PAYLOAD_FORMAT_INDICATOR,
        PropertyType.REQUEST_PROBLEM_INFORMATION,
        PropertyType.REQUEST_RESPONSE_INFORMATION,
        PropertyType.MAXIMUM_QOS,
        PropertyType.RETAIN_AVAILABLE,
        PropertyType.WILDCARD_SUBSCRIPTION_AVAILABLE,
        PropertyType.SUBSCRIPTION_IDENTIFIER_AVAILABLE,
        PropertyType.SHARED_SUBSCRIPTION_AVAILABLE,
    ]
)
NONZERO_PROPERTY_TYPES = frozenset(
    [
        PropertyType.SUBSCRIPTION_IDENTIFIER,
        PropertyType.RECEIVE_MAXIMUM,
        PropertyType.TOPIC_ALIAS,
        PropertyType.MAXIMUM_PACKET_SIZE,
    ]
)

#: Property types whose values are always stored as a list in ``properties``
LIST_PROPERTY_TYPES = frozenset([PropertyType.SUBSCRIPTION_IDENTIFIER])


def convert_properties(
    value: Mapping[PropertyType, PropertyValue],
) -> dict[PropertyType, PropertyValue]:
    properties = dict(value)
    for property_type in LIST_PROPERTY_TYPES:
        if property_type in properties and not isinstance(
            properties[property_type], list
        ):
            properties[property_type] = [cast(int, properties[property_type])]

    return properties


def convert_user_properties(
    value: Mapping[str, str] | Iterable[tuple[str, str]],
) -> UserProperties:
    if isinstance(value, Mapping):
        return list(value.items())

    return [(key, val) for key, val in value]


@define(kw_only=True)
class PropertiesMixin:
    allowed_property_types: ClassVar[frozenset[PropertyType]] = frozenset()
    repeatable_property_types: ClassVar[frozenset[PropertyType]] = frozenset(
        [PropertyType.USER_PROPERTY]
    )
    properties: dict[PropertyType, PropertyValue] = field(
        repr=False, factory=dict, converter=convert_properties
    )
    user_properties: UserProperties = field(
        repr=False, factory=list, converter=convert_user_properties
    )

    def has_properties(self) -> bool:
        return bool(self.properties or self.user_properties)

    def encode_properties(self, buffer: bytearray) -> None:
        internal_buffer = bytearray()
        for identifier, value in self.properties.items():
            if identifier not in self.allowed_property_types:
                raise MQTTUnsupportedPropertyType(identifier, self.__class__)

            values = value if isinstance(value, list) else [value]
            if len(values) > 1 and identifier not in self.repeatable_property_types:
                raise MQTTDuplicateProperty(identifier, self.__class__)

            for item in values:
                identifier.validate(item)
                encode_variable_integer(identifier, internal_buffer)
                identifier.encoder(item, internal_buffer)

        if self.user_properties:
            if PropertyType.USER_PROPERTY not in self.allowed_property_types:
                raise MQTTUnsupportedPropertyType(
                    PropertyType.USER_PROPERTY, self.__class__
                )

            for key, value in self.user_properties:
                encode_variable_integer(PropertyType.USER_PROPERTY, internal_buffer)
                PropertyType.USER_PROPERTY.encoder((key, value), internal_buffer)

        encode_variable_integer(len(internal_buffer), buffer)
        buffer.extend(internal_buffer)

    @classmethod
    def decode_properties(
        cls, data: memoryview
    ) -> tuple[memoryview, dict[PropertyType, PropertyValue], UserProperties]:
        data, length = decode_variable_integer(data)
        if len(data) < length:
            raise MalformedProperties(
                f"property length ({length}) of {cls.__name__} exceeds the remaining "
                f"packet length ({len(data)})"
            )

        data, view = data[length:], data[:length]
        properties: dict[PropertyType, PropertyValue] = {}
        user_properties: UserProperties = []
        try:
            while view:
                view, property_num = decode_variable_integer(view)
                property_type = PropertyType.get(property_num)
                if property_type not in cls.allowed_property_types:
                    raise MQTTUnsupportedPropertyType(property_type, cls)

                view, value = property_type.decoder(view)
                property_type.validate(value)
                if property_type is PropertyType.USER_PROPERTY:
                    user_properties.append(cast("tuple[str, str]", value))
                elif (
                    property_type in properties
                    and property_type not in cls.repeatable_property_types
                ):
                    raise MQTTDuplicateProperty(property_type, cls)
                elif property_type in LIST_PROPERTY_TYPES:
                    values = cast(
                        "list[int]", properties.setdefault(property_type, [])
                    )
                    values.append(cast(int, value))
                else:
                    properties[property_type] = value
        except InsufficientData:
            raise MalformedProperties(
                f"a property in {cls.__name__} extends past the end of the declared "
                f"property length"
            ) from None

        return data, properties, user_properties
