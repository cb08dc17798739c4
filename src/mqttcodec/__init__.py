from __future__ import annotations

from ._codec import decode as decode
from ._codec import decode_packet as decode_packet
from ._codec import encode as encode
from ._exceptions import BufferTooSmall as BufferTooSmall
from ._exceptions import DataTooLong as DataTooLong
from ._exceptions import InsufficientData as InsufficientData
from ._exceptions import MalformedFixedHeader as MalformedFixedHeader
from ._exceptions import MalformedProperties as MalformedProperties
from ._exceptions import MalformedUTF8String as MalformedUTF8String
from ._exceptions import MalformedVariableByteInteger as MalformedVariableByteInteger
from ._exceptions import MQTTDecodeError as MQTTDecodeError
from ._exceptions import MQTTDuplicateProperty as MQTTDuplicateProperty
from ._exceptions import MQTTEncodeError as MQTTEncodeError
from ._exceptions import MQTTException as MQTTException
from ._exceptions import MQTTPacketTooLarge as MQTTPacketTooLarge
from ._exceptions import MQTTProtocolError as MQTTProtocolError
from ._exceptions import (
    MQTTUnsupportedPropertyType as MQTTUnsupportedPropertyType,
)
from ._exceptions import (
    MQTTUnsupportedProtocolVersion as MQTTUnsupportedProtocolVersion,
)
from ._exceptions import StringTooLong as StringTooLong
from ._exceptions import ValueTooLarge as ValueTooLarge
from ._framing import ControlPacketType as ControlPacketType
from ._framing import FixedHeader as FixedHeader
from ._framing import decode_fixed_header as decode_fixed_header
from ._framing import encode_fixed_header as encode_fixed_header
from ._primitives import decode_variable_integer as decode_variable_integer
from ._primitives import encode_variable_integer as encode_variable_integer
from ._properties import PropertyType as PropertyType
from ._types import MQTTAuthPacket as MQTTAuthPacket
from ._types import MQTTConnAckPacket as MQTTConnAckPacket
from ._types import MQTTConnectPacket as MQTTConnectPacket
from ._types import MQTTDisconnectPacket as MQTTDisconnectPacket
from ._types import MQTTPacket as MQTTPacket
from ._types import MQTTPingRequestPacket as MQTTPingRequestPacket
from ._types import MQTTPingResponsePacket as MQTTPingResponsePacket
from ._types import MQTTPublishAckPacket as MQTTPublishAckPacket
from ._types import MQTTPublishCompletePacket as MQTTPublishCompletePacket
from ._types import MQTTPublishPacket as MQTTPublishPacket
from ._types import MQTTPublishReceivePacket as MQTTPublishReceivePacket
from ._types import MQTTPublishReleasePacket as MQTTPublishReleasePacket
from ._types import MQTTPublishResponsePacket as MQTTPublishResponsePacket
from ._types import MQTTSubscribeAckPacket as MQTTSubscribeAckPacket
from ._types import MQTTSubscribePacket as MQTTSubscribePacket
from ._types import MQTTUnsubscribeAckPacket as MQTTUnsubscribeAckPacket
from ._types import MQTTUnsubscribePacket as MQTTUnsubscribePacket
from ._types import QoS as QoS
from ._types import ReasonCode as ReasonCode
from ._types import RetainHandling as RetainHandling
from ._types import Subscription as Subscription
from ._types import Will as Will

# Re-export imports so they look like they live directly in this package
for value in list(locals().values()):
    if getattr(value, "__module__", "").startswith("mqttcodec."):
        value.__module__ = __name__
