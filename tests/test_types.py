from __future__ import annotations

import pytest

from mqttcodec._codec import decode_packet
from mqttcodec._exceptions import (
    MalformedFixedHeader,
    MQTTDecodeError,
    MQTTProtocolError,
    MQTTUnsupportedProtocolVersion,
)
from mqttcodec._primitives import encode_fixed_integer
from mqttcodec._properties import PropertyType, PropertyValue
from mqttcodec._types import (
    MQTTAuthPacket,
    MQTTConnAckPacket,
    MQTTConnectPacket,
    MQTTDisconnectPacket,
    MQTTPacket,
    MQTTPingRequestPacket,
    MQTTPingResponsePacket,
    MQTTPublishAckPacket,
    MQTTPublishCompletePacket,
    MQTTPublishPacket,
    MQTTPublishReceivePacket,
    MQTTPublishReleasePacket,
    MQTTPublishResponsePacket,
    MQTTSubscribeAckPacket,
    MQTTSubscribePacket,
    MQTTUnsubscribeAckPacket,
    MQTTUnsubscribePacket,
    QoS,
    ReasonCode,
    RetainHandling,
    Subscription,
    Will,
    packet_types,
)


def roundtrip(packet: MQTTPacket) -> MQTTPacket:
    buffer = bytearray()
    packet.encode(buffer)
    leftover_data, packet2 = decode_packet(memoryview(buffer))
    assert not leftover_data
    return packet2


def test_unknown_reason_code() -> None:
    with pytest.raises(MQTTDecodeError, match="unknown reason code: 0xFF"):
        ReasonCode.get(0xFF)


def test_unknown_retain_handling() -> None:
    with pytest.raises(MQTTProtocolError, match="unknown retain handling: 0x03"):
        RetainHandling.get(3)


def test_unknown_qos() -> None:
    with pytest.raises(MQTTDecodeError, match="unknown QoS value: 0x03"):
        QoS.get(3)


def test_packet_registry() -> None:
    assert len(packet_types) == 15
    assert MQTTPublishResponsePacket not in packet_types.values()
    for packet_type, packet_class in packet_types.items():
        assert packet_class.packet_type is packet_type


class TestSubscription:
    def test_defaults(self) -> None:
        subscription = Subscription("a/b")
        assert subscription.max_qos is QoS.EXACTLY_ONCE
        assert not subscription.no_local
        assert not subscription.retain_as_published
        assert subscription.retain_handling is RetainHandling.SEND_RETAINED

    def test_empty_pattern(self) -> None:
        with pytest.raises(MQTTProtocolError, match="at least one character"):
            Subscription("")

    def test_encode_options(self) -> None:
        buffer = bytearray()
        Subscription(
            "a",
            max_qos=QoS.AT_LEAST_ONCE,
            no_local=True,
            retain_as_published=True,
            retain_handling=RetainHandling.NO_RETAINED,
        ).encode(buffer)
        assert buffer == b"\x00\x01a\x2d"

    @pytest.mark.parametrize(
        "options, exception",
        [
            pytest.param(0x41, MQTTDecodeError, id="reserved_bits"),
            pytest.param(0x31, MQTTProtocolError, id="retain_handling_3"),
            pytest.param(0x03, MQTTDecodeError, id="qos_3"),
        ],
    )
    def test_invalid_options(self, options: int, exception: type[Exception]) -> None:
        with pytest.raises(exception):
            Subscription.decode(memoryview(b"\x00\x01a" + bytes([options])))


class TestMQTTConnectPacket:
    def test_minimal(self) -> None:
        packet = MQTTConnectPacket(client_id="teståäö")
        assert roundtrip(packet) == packet

    def test_empty_client_id(self) -> None:
        buffer = bytearray()
        MQTTConnectPacket().encode(buffer)
        assert buffer == b"\x10\x0d\x00\x04MQTT\x05\x00\x00\x00\x00\x00\x00"

    def test_full(self) -> None:
        will_properties: dict[PropertyType, PropertyValue] = {
            PropertyType.PAYLOAD_FORMAT_INDICATOR: 1,
            PropertyType.MESSAGE_EXPIRY_INTERVAL: 15,
            PropertyType.CONTENT_TYPE: "application/json",
            PropertyType.RESPONSE_TOPIC: "res/pon/se",
            PropertyType.CORRELATION_DATA: b"random",
            PropertyType.WILL_DELAY_INTERVAL: 30,
        }
        will_user_properties = {"test1": "foo", "test2": "bar"}
        will = Will(
            topic="will_töpic",
            payload=b"payload",
            retain=True,
            qos=QoS.EXACTLY_ONCE,
            properties=will_properties,
            user_properties=will_user_properties,
        )
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.SESSION_EXPIRY_INTERVAL: 255,
            PropertyType.RECEIVE_MAXIMUM: 100,
            PropertyType.MAXIMUM_PACKET_SIZE: 1048576,
            PropertyType.TOPIC_ALIAS_MAXIMUM: 10,
            PropertyType.REQUEST_RESPONSE_INFORMATION: 1,
            PropertyType.REQUEST_PROBLEM_INFORMATION: 0,
            PropertyType.AUTHENTICATION_METHOD: "SCRAM-SHA-1",
            PropertyType.AUTHENTICATION_DATA: b"random",
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTConnectPacket(
            client_id="teståäö",
            will=will,
            username="usernämë",
            password=b"p\xe4ssw\xf6rd",
            clean_start=True,
            keep_alive=65535,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_password_without_username(self) -> None:
        packet = MQTTConnectPacket(client_id="c", password=b"secret")
        packet2 = roundtrip(packet)
        assert isinstance(packet2, MQTTConnectPacket)
        assert packet2.username is None
        assert packet2.password == b"secret"

    def test_str_password(self) -> None:
        with pytest.raises(TypeError):
            MQTTConnectPacket(password="secret")  # type: ignore[arg-type]

    def test_str_will_payload(self) -> None:
        with pytest.raises(TypeError):
            Will(topic="a", payload="text")  # type: ignore[arg-type]

    def test_wrong_protocol_name(self) -> None:
        buffer = bytearray()
        MQTTConnectPacket().encode(buffer)
        buffer[4:8] = b"MQIs"
        with pytest.raises(MQTTProtocolError, match="unexpected protocol: MQIs"):
            decode_packet(memoryview(buffer))

    def test_wrong_protocol_version(self) -> None:
        buffer = bytearray()
        MQTTConnectPacket().encode(buffer)
        buffer[8] = 4
        with pytest.raises(MQTTUnsupportedProtocolVersion) as exc:
            decode_packet(memoryview(buffer))

        assert exc.value.reason_code is ReasonCode.UNSUPPORTED_PROTOCOL_VERSION

    def test_reserved_flag(self) -> None:
        buffer = bytearray()
        MQTTConnectPacket().encode(buffer)
        buffer[9] |= MQTTConnectPacket.RESERVED_FLAG
        with pytest.raises(MalformedFixedHeader, match="reserved bit"):
            decode_packet(memoryview(buffer))

    @pytest.mark.parametrize(
        "flag",
        [
            pytest.param(MQTTConnectPacket.WILL_RETAIN_FLAG, id="retain"),
            pytest.param(0x08, id="qos"),
        ],
    )
    def test_will_flags_without_will(self, flag: int) -> None:
        buffer = bytearray()
        MQTTConnectPacket().encode(buffer)
        buffer[9] |= flag
        with pytest.raises(MQTTDecodeError, match="without the will flag"):
            decode_packet(memoryview(buffer))


class TestMQTTConnAckPacket:
    def test_minimal(self) -> None:
        packet = MQTTConnAckPacket()
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == b"\x20\x03\x00\x00\x00"
        assert roundtrip(packet) == packet

    def test_shortened_form(self) -> None:
        leftover_data, packet = decode_packet(memoryview(b"\x20\x02\x01\x00"))
        assert not leftover_data
        assert packet == MQTTConnAckPacket(session_present=True)

    def test_shortened_form_with_error(self) -> None:
        with pytest.raises(MQTTDecodeError, match="must contain properties"):
            decode_packet(memoryview(b"\x20\x02\x00\x80"))

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.SESSION_EXPIRY_INTERVAL: 255,
            PropertyType.ASSIGNED_CLIENT_IDENTIFIER: "foä",
            PropertyType.SERVER_KEEP_ALIVE: 65535,
            PropertyType.AUTHENTICATION_METHOD: "SCRAM-SHA-1",
            PropertyType.AUTHENTICATION_DATA: b"random",
            PropertyType.RESPONSE_INFORMATION: "infö",
            PropertyType.SERVER_REFERENCE: "änöther",
            PropertyType.REASON_STRING: "Bänned",
            PropertyType.RECEIVE_MAXIMUM: 65535,
            PropertyType.TOPIC_ALIAS_MAXIMUM: 65535,
            PropertyType.MAXIMUM_QOS: 1,
            PropertyType.RETAIN_AVAILABLE: True,
            PropertyType.MAXIMUM_PACKET_SIZE: 1000000,
            PropertyType.WILDCARD_SUBSCRIPTION_AVAILABLE: True,
            PropertyType.SUBSCRIPTION_IDENTIFIER_AVAILABLE: True,
            PropertyType.SHARED_SUBSCRIPTION_AVAILABLE: False,
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTConnAckPacket(
            session_present=True,
            reason_code=ReasonCode.UNSPECIFIED_ERROR,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_reserved_flags(self) -> None:
        with pytest.raises(MQTTDecodeError, match="reserved bits set"):
            decode_packet(memoryview(b"\x20\x03\x02\x00\x00"))

    def test_disallowed_reason_code(self) -> None:
        with pytest.raises(MQTTDecodeError, match="not allowed for MQTTConnAckPacket"):
            decode_packet(memoryview(b"\x20\x03\x00\x10\x00"))

    def test_bad_reason_codes(self) -> None:
        for reason_code in ReasonCode.__members__.values():
            if reason_code not in MQTTConnAckPacket.allowed_reason_codes:
                with pytest.raises(ValueError):
                    MQTTConnAckPacket(reason_code=reason_code, session_present=False)


class TestMQTTPublishPacket:
    def test_minimal(self) -> None:
        packet = MQTTPublishPacket(topic="test/töpic")
        assert roundtrip(packet) == packet

    def test_encoding(self) -> None:
        buffer = bytearray()
        MQTTPublishPacket(topic="a", payload=b"hello").encode(buffer)
        assert buffer == b"\x30\x09\x00\x01a\x00hello"

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.PAYLOAD_FORMAT_INDICATOR: 1,
            PropertyType.MESSAGE_EXPIRY_INTERVAL: 15,
            PropertyType.CONTENT_TYPE: "application/json",
            PropertyType.RESPONSE_TOPIC: "res/pon/se",
            PropertyType.CORRELATION_DATA: b"random",
            PropertyType.SUBSCRIPTION_IDENTIFIER: [268_435_455, 1],
            PropertyType.TOPIC_ALIAS: 65535,
        }
        user_properties = [("foo", "bar"), ("foo", "baz")]
        packet = MQTTPublishPacket(
            topic="tö/p1/c",
            payload="teståäö".encode(),
            retain=True,
            qos=QoS.EXACTLY_ONCE,
            duplicate=True,
            packet_id=65535,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_payload_is_a_view(self) -> None:
        buffer = bytearray()
        MQTTPublishPacket(topic="a", payload=b"data").encode(buffer)
        _, packet = decode_packet(memoryview(buffer))
        assert isinstance(packet, MQTTPublishPacket)
        assert isinstance(packet.payload, memoryview)
        assert packet.payload.obj is buffer
        assert packet.payload == b"data"

    def test_topic_alias_without_topic(self) -> None:
        packet = MQTTPublishPacket(topic="", properties={PropertyType.TOPIC_ALIAS: 3})
        assert roundtrip(packet) == packet

    def test_empty_topic_without_alias(self) -> None:
        with pytest.raises(MQTTProtocolError, match="topic alias"):
            MQTTPublishPacket(topic="")

    @pytest.mark.parametrize("topic", ["a/+", "a/#", "#"])
    def test_wildcard_in_topic(self, topic: str) -> None:
        with pytest.raises(MQTTProtocolError, match="wildcard"):
            MQTTPublishPacket(topic=topic)

    def test_qos_without_packet_id(self) -> None:
        with pytest.raises(ValueError, match="packet_id must be an integer"):
            MQTTPublishPacket(topic="a", qos=QoS.AT_LEAST_ONCE)

    def test_packet_id_without_qos(self) -> None:
        with pytest.raises(ValueError, match="packet_id must be None"):
            MQTTPublishPacket(topic="a", packet_id=1)

    def test_duplicate_without_qos(self) -> None:
        with pytest.raises(MQTTProtocolError, match="DUP flag"):
            MQTTPublishPacket(topic="a", duplicate=True)

    def test_decode_zero_packet_id(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            decode_packet(memoryview(b"\x32\x06\x00\x01a\x00\x00\x00"))

    def test_decode_duplicate_property(self) -> None:
        data = b"\x30\x0e\x00\x01a\x0a\x02\x00\x00\x00\x0f\x02\x00\x00\x00\x10"
        with pytest.raises(MQTTProtocolError, match="duplicate property"):
            decode_packet(memoryview(data))

    def test_decode_empty_topic_with_zero_alias(self) -> None:
        with pytest.raises(MQTTProtocolError, match="TOPIC_ALIAS must not be 0"):
            decode_packet(memoryview(b"\x30\x06\x00\x00\x03\x23\x00\x00"))

    def test_scalar_subscription_identifier(self) -> None:
        packet = MQTTPublishPacket(
            topic="a", properties={PropertyType.SUBSCRIPTION_IDENTIFIER: 5}
        )
        assert packet.properties == {PropertyType.SUBSCRIPTION_IDENTIFIER: [5]}
        assert roundtrip(packet) == packet

    def test_str_payload(self) -> None:
        with pytest.raises(TypeError):
            MQTTPublishPacket(topic="a", payload="text")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "packet_class, flags, reason_code",
    [
        pytest.param(
            MQTTPublishAckPacket, 0, ReasonCode.NO_MATCHING_SUBSCRIBERS, id="puback"
        ),
        pytest.param(
            MQTTPublishReceivePacket, 0, ReasonCode.QUOTA_EXCEEDED, id="pubrec"
        ),
        pytest.param(
            MQTTPublishReleasePacket,
            2,
            ReasonCode.PACKET_IDENTIFIER_NOT_FOUND,
            id="pubrel",
        ),
        pytest.param(
            MQTTPublishCompletePacket,
            0,
            ReasonCode.PACKET_IDENTIFIER_NOT_FOUND,
            id="pubcomp",
        ),
    ],
)
class TestPublishResponsePackets:
    def test_minimal(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        packet = packet_class(packet_id=1)
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == bytes([packet_class.packet_type << 4 | flags, 2, 0, 1])
        assert roundtrip(packet) == packet

    def test_reason_code_only(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        packet = packet_class(packet_id=258, reason_code=reason_code)
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == bytes(
            [packet_class.packet_type << 4 | flags, 3, 1, 2, reason_code]
        )
        assert roundtrip(packet) == packet

    def test_full(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.REASON_STRING: "Bad data",
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = packet_class(
            packet_id=65535,
            reason_code=reason_code,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_success_with_properties(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        packet = packet_class(packet_id=1, user_properties=[("a", "b")])
        assert roundtrip(packet) == packet

    def test_partial(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        packet = packet_class(packet_id=65534, reason_code=reason_code)
        buffer = bytearray()
        buffer2 = bytearray()
        encode_fixed_integer(packet.packet_id, buffer2, 2)
        encode_fixed_integer(reason_code, buffer2, 1)

        packet.encode_fixed_header(flags, buffer2, buffer)
        leftover_data, packet2 = decode_packet(memoryview(buffer))
        assert packet2 == packet
        assert not leftover_data

    def test_bad_reason_codes(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        for code in ReasonCode.__members__.values():
            if code not in packet_class.allowed_reason_codes:
                with pytest.raises(ValueError):
                    packet_class(reason_code=code, packet_id=1)

    def test_decode_zero_packet_id(
        self,
        packet_class: type[MQTTPublishResponsePacket],
        flags: int,
        reason_code: ReasonCode,
    ) -> None:
        data = bytes([packet_class.packet_type << 4 | flags, 2, 0, 0])
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            decode_packet(memoryview(data))


class TestMQTTSubscribePacket:
    def test_minimal(self) -> None:
        subscriptions = [
            Subscription(
                pattern="foo",
                max_qos=QoS.AT_MOST_ONCE,
                no_local=False,
                retain_as_published=True,
                retain_handling=RetainHandling.SEND_RETAINED,
            )
        ]
        packet = MQTTSubscribePacket(packet_id=1, subscriptions=subscriptions)
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        subscriptions = [
            Subscription(
                pattern="foo",
                max_qos=QoS.AT_MOST_ONCE,
                no_local=False,
                retain_as_published=True,
                retain_handling=RetainHandling.SEND_RETAINED,
            ),
            Subscription(
                pattern="test/+/foo/#",
                max_qos=QoS.EXACTLY_ONCE,
                no_local=True,
                retain_as_published=False,
                retain_handling=RetainHandling.NO_RETAINED,
            ),
        ]
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.SUBSCRIPTION_IDENTIFIER: [268_435_455],
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTSubscribePacket(
            packet_id=65535,
            subscriptions=subscriptions,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_zero_packet_id(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            MQTTSubscribePacket(packet_id=0, subscriptions=[Subscription("a")])

    def test_no_subscriptions(self) -> None:
        with pytest.raises(MQTTProtocolError, match="at least one topic filter"):
            MQTTSubscribePacket(packet_id=1, subscriptions=[])

    def test_decode_empty_payload(self) -> None:
        with pytest.raises(MQTTProtocolError, match="at least one topic filter"):
            decode_packet(memoryview(b"\x82\x03\x00\x0a\x00"))

    def test_decode_reserved_option_bits(self) -> None:
        data = b"\x82\x09\x00\x0a\x00\x00\x03a/b\xc1"
        with pytest.raises(MQTTDecodeError, match="reserved bits"):
            decode_packet(memoryview(data))


class TestMQTTSubscribeAckPacket:
    def test_minimal(self) -> None:
        packet = MQTTSubscribeAckPacket(
            packet_id=1, reason_codes=[ReasonCode.GRANTED_QOS_0]
        )
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.REASON_STRING: "Bad data",
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTSubscribeAckPacket(
            packet_id=65535,
            reason_codes=[ReasonCode.UNSPECIFIED_ERROR, ReasonCode.GRANTED_QOS_1],
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_bad_reason_codes(self) -> None:
        for reason_code in ReasonCode.__members__.values():
            if reason_code not in MQTTSubscribeAckPacket.allowed_reason_codes:
                with pytest.raises(ValueError):
                    MQTTSubscribeAckPacket(reason_codes=[reason_code], packet_id=1)

    def test_decode_zero_packet_id(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            decode_packet(memoryview(b"\x90\x04\x00\x00\x00\x00"))


class TestMQTTUnsubscribePacket:
    def test_minimal(self) -> None:
        packet = MQTTUnsubscribePacket(packet_id=1, patterns=["foo"])
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTUnsubscribePacket(
            packet_id=65535,
            patterns=["foo", "another/topic/+"],
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_no_patterns(self) -> None:
        with pytest.raises(MQTTProtocolError, match="at least one topic filter"):
            MQTTUnsubscribePacket(packet_id=1, patterns=[])

    def test_zero_packet_id(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            MQTTUnsubscribePacket(packet_id=0, patterns=["a"])


class TestMQTTUnsubscribeAckPacket:
    def test_minimal(self) -> None:
        packet = MQTTUnsubscribeAckPacket(
            packet_id=1, reason_codes=[ReasonCode.SUCCESS]
        )
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.REASON_STRING: "reason cöde"
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTUnsubscribeAckPacket(
            packet_id=65535,
            reason_codes=[ReasonCode.SUCCESS, ReasonCode.NO_SUBSCRIPTION_EXISTED],
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_bad_reason_codes(self) -> None:
        for reason_code in ReasonCode.__members__.values():
            if reason_code not in MQTTUnsubscribeAckPacket.allowed_reason_codes:
                with pytest.raises(ValueError):
                    MQTTUnsubscribeAckPacket(reason_codes=[reason_code], packet_id=1)

    def test_decode_zero_packet_id(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must not be 0"):
            decode_packet(memoryview(b"\xb0\x04\x00\x00\x00\x00"))


@pytest.mark.parametrize(
    "packet_class, encoded",
    [
        pytest.param(MQTTPingRequestPacket, b"\xc0\x00", id="pingreq"),
        pytest.param(MQTTPingResponsePacket, b"\xd0\x00", id="pingresp"),
    ],
)
class TestPingPackets:
    def test_minimal(self, packet_class: type[MQTTPacket], encoded: bytes) -> None:
        packet = packet_class()
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == encoded
        assert roundtrip(packet) == packet

    def test_nonzero_remaining_length(
        self, packet_class: type[MQTTPacket], encoded: bytes
    ) -> None:
        with pytest.raises(MQTTDecodeError, match="not all data was consumed"):
            decode_packet(memoryview(encoded[:1] + b"\x01\x00"))


class TestMQTTDisconnectPacket:
    def test_minimal(self) -> None:
        packet = MQTTDisconnectPacket()
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == b"\xe0\x00"
        assert roundtrip(packet) == packet

    def test_reason_code_only(self) -> None:
        packet = MQTTDisconnectPacket(
            reason_code=ReasonCode.DISCONNECT_WITH_WILL_MESSAGE
        )
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == b"\xe0\x01\x04"
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.SESSION_EXPIRY_INTERVAL: 15,
            PropertyType.REASON_STRING: "reason cöde",
            PropertyType.SERVER_REFERENCE: "another server",
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTDisconnectPacket(
            reason_code=ReasonCode.KEEP_ALIVE_TIMEOUT,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_partial(self) -> None:
        packet = MQTTDisconnectPacket(reason_code=ReasonCode.SERVER_SHUTTING_DOWN)
        buffer = bytearray()

        packet.encode_fixed_header(0, b"\x8b", buffer)
        leftover_data, packet2 = decode_packet(memoryview(buffer))
        assert packet2 == packet
        assert not leftover_data

    def test_bad_reason_codes(self) -> None:
        for reason_code in ReasonCode.__members__.values():
            if reason_code not in MQTTDisconnectPacket.allowed_reason_codes:
                with pytest.raises(ValueError):
                    MQTTDisconnectPacket(reason_code=reason_code)


class TestMQTTAuthPacket:
    def test_minimal(self) -> None:
        packet = MQTTAuthPacket(reason_code=ReasonCode.SUCCESS)
        buffer = bytearray()
        packet.encode(buffer)
        assert buffer == b"\xf0\x02\x00\x00"
        assert roundtrip(packet) == packet

    def test_full(self) -> None:
        properties: dict[PropertyType, PropertyValue] = {
            PropertyType.AUTHENTICATION_METHOD: "SCRAM-SHA-1",
            PropertyType.AUTHENTICATION_DATA: b"random",
            PropertyType.REASON_STRING: "reason",
        }
        user_properties = {"foo": "bar", "key2": "value2"}
        packet = MQTTAuthPacket(
            reason_code=ReasonCode.REAUTHENTICATE,
            properties=properties,
            user_properties=user_properties,
        )
        assert roundtrip(packet) == packet

    def test_without_properties(self) -> None:
        leftover_data, packet = decode_packet(memoryview(b"\xf0\x01\x18"))
        assert not leftover_data
        assert packet == MQTTAuthPacket(
            reason_code=ReasonCode.CONTINUE_AUTHENTICATION
        )

    def test_empty(self) -> None:
        with pytest.raises(MQTTProtocolError, match="must contain a reason code"):
            decode_packet(memoryview(b"\xf0\x00"))

    def test_bad_reason_codes(self) -> None:
        for reason_code in ReasonCode.__members__.values():
            if reason_code not in MQTTAuthPacket.allowed_reason_codes:
                with pytest.raises(ValueError):
                    MQTTAuthPacket(reason_code=reason_code)
