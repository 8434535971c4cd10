"""gRPC health probe for the xDS management server."""

from __future__ import annotations

import argparse
import logging
from enum import IntEnum
from typing import Optional, Sequence

import grpc

logger = logging.getLogger(__name__)

CONNECTION_FAILURE = 2
RPC_FAILURE = 3
UNHEALTHY = 4

DEFAULT_TIMEOUT = 0.1

HEALTH_CHECK_METHOD = "/grpc.health.v1.Health/Check"


class ServingStatus(IntEnum):
    """Status values of a ``grpc.health.v1.HealthCheckResponse``."""

    UNKNOWN = 0
    SERVING = 1
    NOT_SERVING = 2
    SERVICE_UNKNOWN = 3


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift > 63:
            raise ValueError("varint too long")


def _encode_request(service: str) -> bytes:
    """Serialize a ``HealthCheckRequest``; an empty service encodes to nothing."""
    if not service:
        return b""
    raw = service.encode("utf-8")
    return b"\x0a" + _encode_varint(len(raw)) + raw


def _decode_status(data: bytes) -> int:
    """Read the status field out of a serialized ``HealthCheckResponse``."""
    status = 0
    pos = 0
    while pos < len(data):
        tag, pos = _read_varint(data, pos)
        field, wire_type = tag >> 3, tag & 0x7
        if wire_type == 0:
            value, pos = _read_varint(data, pos)
            if field == 1:
                status = value
        elif wire_type == 1:
            pos += 8
        elif wire_type == 2:
            length, pos = _read_varint(data, pos)
            pos += length
        elif wire_type == 5:
            pos += 4
        else:
            raise ValueError(f"unsupported wire type {wire_type}")
        if pos > len(data):
            raise ValueError("truncated message")
    return status


def _status_name(status: int) -> str:
    try:
        return ServingStatus(status).name
    except ValueError:
        return str(status)


def check(addr: str, timeout: float = DEFAULT_TIMEOUT) -> int:
    """Probe the health service at ``addr`` and return a process exit code.

    0 means serving; 2 a failed connection, 3 a failed call and 4 a service
    that answered but is not serving.
    """
    with grpc.insecure_channel(addr) as channel:
        try:
            grpc.channel_ready_future(channel).result(timeout=timeout)
        except grpc.FutureTimeoutError as err:
            logger.error("failed to connect to service at %r: %r", addr, err)
            return CONNECTION_FAILURE

        call = channel.unary_unary(
            HEALTH_CHECK_METHOD,
            request_serializer=_encode_request,
            response_deserializer=_decode_status,
        )
        try:
            status = call("", timeout=timeout)
        except grpc.RpcError as err:
            logger.error("failed to do health rpc call: %r", err)
            return RPC_FAILURE

    name = _status_name(status)
    if status != ServingStatus.SERVING:
        logger.error("service unhealthy (responded with %r)", name)
        return UNHEALTHY
    logger.info("status: %s", name)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the health probe given by ``-probe-addr`` and return its exit code."""
    parser = argparse.ArgumentParser(prog="kourier")
    parser.add_argument(
        "-probe-addr",
        "--probe-addr",
        dest="probe_addr",
        default="",
        help="run this binary as a health check against the given address",
    )
    args = parser.parse_args(argv)

    if not args.probe_addr:
        parser.error("-probe-addr is required")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    return check(args.probe_addr)