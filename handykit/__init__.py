"""Networking toolkit: buffers, slices, addresses, logging, thread pools, protobuf framing and demo servers."""

__version__ = "0.1.0"