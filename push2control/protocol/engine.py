from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Sequence
from typing import Protocol

import mido

from push2control.protocol.codes import COMMAND_ID_OFFSET
from push2control.protocol.errors import RequestTimeoutError
from push2control.protocol.sysex import (
    SysexFrame,
    build_push2_sysex,
    correlation_key,
    format_sysex_bytes,
    parse_push2_sysex,
    sysex_bytes,
)


CorrelationKey = int | str
MessageListener = Callable[[mido.Message], None]


class SysexTransport(Protocol):
    def send_sysex(self, framed_or_unframed: Sequence[int] | bytes | bytearray) -> None: ...

    def receive_pending(self) -> list[mido.Message]: ...


class _PendingRequest:
    """One outstanding request; completed at most once by a matching frame."""

    def __init__(self, key: CorrelationKey) -> None:
        self.key = key
        self.frames_seen = 0
        self._event = threading.Event()
        self._raw: bytes | None = None

    def complete(self, raw: bytes) -> None:
        self._raw = raw
        self._event.set()

    def wait(self, timeout_s: float) -> bytes | None:
        self._event.wait(timeout_s)
        return self._raw


class RequestResponseEngine:
    """Request/response semantics on top of a fire-and-forget SysEx channel.

    Every inbound SysEx frame is matched against outstanding requests by its
    correlation key (the Push 2 command id, or the identity reply key). The
    wire format carries no sequence number, so when several requests share a
    key the oldest one receives the first matching frame.

    Every inbound message, matched or not, is also passed to the registered
    listeners in arrival order.
    """

    def __init__(
        self,
        transport: SysexTransport,
        *,
        timeout_s: float = 1.0,
        poll_interval_s: float = 0.005,
    ) -> None:
        self._transport = transport
        self.timeout_s = timeout_s
        self._poll_interval_s = poll_interval_s

        self._logger = logging.getLogger(self.__class__.__name__)

        self._lock = threading.Lock()
        self._send_lock = threading.Lock()
        self._pending: dict[CorrelationKey, deque[_PendingRequest]] = {}
        self._listeners: list[MessageListener] = []

        self._rx_thread: threading.Thread | None = None
        self._rx_stop = threading.Event()

    def start(self) -> None:
        if self._rx_thread is not None and self._rx_thread.is_alive():
            return

        self._rx_stop.clear()
        self._rx_thread = threading.Thread(target=self._rx_loop, name="push2-rx", daemon=True)
        self._rx_thread.start()

    def stop(self) -> None:
        self._rx_stop.set()
        if self._rx_thread is not None and self._rx_thread.is_alive():
            self._rx_thread.join(timeout=1.0)
        self._rx_thread = None

    def add_listener(self, listener: MessageListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def pending_count(self) -> int:
        with self._lock:
            return sum(len(q) for q in self._pending.values())

    def send(self, frame: Sequence[int] | bytes | bytearray) -> None:
        """Transmit a framed message without waiting for a reply."""
        with self._send_lock:
            self._transport.send_sysex(frame)

    def send_command(self, command: Sequence[int] | bytes | bytearray) -> None:
        self.send(build_push2_sysex(command))

    def request(
        self,
        command: Sequence[int] | bytes | bytearray,
        *,
        timeout_s: float | None = None,
    ) -> SysexFrame:
        """Send a Push 2 command and return the first reply with the same command id."""

        frame = build_push2_sysex(command)
        raw = self.transact(frame, frame[COMMAND_ID_OFFSET], timeout_s=timeout_s)
        return parse_push2_sysex(raw)

    def transact(
        self,
        frame: Sequence[int] | bytes | bytearray,
        key: CorrelationKey,
        *,
        timeout_s: float | None = None,
    ) -> bytes:
        """Send `frame` and wait for the first inbound frame correlated by `key`.

        Returns the framed reply bytes. Raises `RequestTimeoutError` if nothing
        matches before the deadline. The frame is not retransmitted.
        """

        timeout = self.timeout_s if timeout_s is None else timeout_s
        pending = _PendingRequest(key)

        # Register before sending so a fast reply cannot slip past.
        with self._lock:
            self._pending.setdefault(key, deque()).append(pending)

        try:
            self.send(frame)
        except Exception:
            self._discard(pending)
            raise

        raw = pending.wait(timeout)
        if raw is not None:
            return raw

        with self._lock:
            # A frame may have been delivered between the wait returning and
            # taking the lock; that delivery wins.
            raw = pending.wait(0)
            if raw is None:
                self._discard_locked(pending)

        if raw is not None:
            return raw

        self._logger.warning("No response for %r within %.2fs", key, timeout)
        raise RequestTimeoutError(key, timeout, pending.frames_seen)

    def dispatch(self, message: mido.Message) -> bool:
        """Route one inbound message. Returns True if it completed a request."""

        raw = sysex_bytes(message)
        claimed = False

        if raw is not None:
            key = correlation_key(raw)
            with self._lock:
                waiter: _PendingRequest | None = None
                queue = self._pending.get(key) if key is not None else None
                if queue:
                    waiter = queue.popleft()
                    if not queue:
                        del self._pending[key]
                for other in self._pending.values():
                    for p in other:
                        p.frames_seen += 1
                if waiter is not None:
                    waiter.complete(raw)
                    claimed = True

            self._logger.debug(
                "RX frame key=%r claimed=%s: %s", key, claimed, format_sysex_bytes(raw)
            )

        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(message)
            except Exception:
                self._logger.exception("Message listener %r failed", listener)

        return claimed

    def _discard(self, pending: _PendingRequest) -> None:
        with self._lock:
            self._discard_locked(pending)

    def _discard_locked(self, pending: _PendingRequest) -> None:
        queue = self._pending.get(pending.key)
        if queue is None or pending not in queue:
            return
        queue.remove(pending)
        if not queue:
            del self._pending[pending.key]

    def _rx_loop(self) -> None:
        self._logger.info("RX loop started")
        while not self._rx_stop.is_set():
            try:
                messages = self._transport.receive_pending()
            except Exception:
                self._logger.exception("Reading from transport failed; stopping RX loop")
                break

            for msg in messages:
                self.dispatch(msg)

            time.sleep(self._poll_interval_s)
        self._logger.info("RX loop stopped")
