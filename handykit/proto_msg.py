"""Length-prefixed framing of protocol buffer messages, and dispatch by type."""

from __future__ import annotations

import struct
from typing import Any, Callable, Dict, Type

from google.protobuf import descriptor_pool, message_factory
from google.protobuf.message import DecodeError, Message

from handykit.net import Buffer

# frame: uint32 total length (including itself), uint32 name length, name, payload
_HEADER = struct.Struct("=II")
_LENGTH = struct.Struct("=I")

ProtoCallback = Callable[[Any, Message], Any]


class ProtoDecodeError(ValueError):
    """A frame could not be turned into a message."""


class ProtoMsgCodec:
    """Encodes messages into a Buffer and decodes them back."""

    @staticmethod
    def encode(msg: Message, buf: Buffer) -> None:
        name = msg.DESCRIPTOR.full_name.encode()
        payload = msg.SerializeToString()
        total = _HEADER.size + len(name) + len(payload)
        buf.append(_HEADER.pack(total, len(name))).append(name).append(payload)

    @staticmethod
    def decode(buf: Buffer) -> Message:
        """Take one complete message from the front of the buffer."""
        data = buf.data()
        if len(data) < _HEADER.size:
            raise ProtoDecodeError(f"buffer is too small size: {len(data)}")
        msglen, namelen = _HEADER.unpack_from(data)
        if len(data) < msglen or msglen < _HEADER.size + namelen:
            raise ProtoDecodeError(
                f"buf format error size {len(data)} msglen {msglen} namelen {namelen}"
            )
        type_name = data[_HEADER.size : _HEADER.size + namelen].decode("utf-8", "replace")
        try:
            descriptor = descriptor_pool.Default().FindMessageTypeByName(type_name)
            msg_class: Type[Message] = message_factory.GetMessageClass(descriptor)
        except KeyError:
            raise ProtoDecodeError(f"cannot create Message for {type_name}") from None
        msg = msg_class()
        try:
            msg.ParseFromString(data[_HEADER.size + namelen : msglen])
        except DecodeError as exc:
            raise ProtoDecodeError("bad msg for protobuf") from exc
        buf.consume(msglen)
        return msg

    @staticmethod
    def msg_complete(buf: Buffer) -> bool:
        """True when the buffer holds at least one whole frame."""
        if len(buf) < _LENGTH.size:
            return False
        (msglen,) = _LENGTH.unpack_from(buf.data())
        return len(buf) >= msglen


class ProtoMsgDispatcher:
    """Routes decoded messages to the callback registered for their type."""

    def __init__(self) -> None:
        self._callbacks: Dict[str, ProtoCallback] = {}

    def on_msg(self, message_type: Type[Message], callback: ProtoCallback) -> None:
        self._callbacks[message_type.DESCRIPTOR.full_name] = callback

    def handle(self, con: Any, msg: Message) -> Any:
        """Call the callback for the message's type; KeyError for an unknown type."""
        name = msg.DESCRIPTOR.full_name
        callback = self._callbacks.get(name)
        if callback is None:
            raise KeyError(f"unknown message type {name}")
        return callback(con, msg)