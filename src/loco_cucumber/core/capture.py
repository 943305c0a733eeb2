"""Failure isolation and console capture for step handlers.

`isolate` runs a unit of work so that an exception raised inside it
becomes a reportable value instead of propagating, while everything
the work writes to `sys.stdout` and `sys.stderr` is captured.

Console redirection is process-wide state. Only one isolation may be
active at a time; a nested or concurrent call is rejected.
"""

import sys
from contextlib import redirect_stderr, redirect_stdout
from io import BufferedIOBase, BytesIO, TextIOBase
from threading import Lock
from traceback import extract_tb
from typing import TYPE_CHECKING, Any

from loco_cucumber.models import SchemaModel

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import TextIO

_ACTIVE = Lock()


class Ok(SchemaModel):
    """Work completed normally."""

    value: Any = None


class Err(SchemaModel):
    """Work raised an exception."""

    message: str
    location: str | None = None
    error: Exception


class Isolated(SchemaModel):
    """Result of an isolated unit of work with its captured output."""

    outcome: Ok | Err
    stdout: bytes = b''
    stderr: bytes = b''


class TeeBuffer(BufferedIOBase):
    """Binary side of a `TeeStream`.

    Bytes written here land in the same record as the text of the
    owning stream, in write order.
    """

    def __init__(self, stream: 'TeeStream') -> None:
        """Attach the buffer to its text stream."""
        super().__init__()
        self._stream = stream

    def writable(self) -> bool:
        """Tee buffers are always writable."""
        return True

    def write(self, data: bytes) -> int:  # type: ignore[override]
        """Record raw bytes through the owning stream."""
        return self._stream.write_bytes(bytes(data))

    def flush(self) -> None:
        """Flush the owning stream."""
        self._stream.flush()


class TeeStream(TextIOBase):
    """Text stream recording writes and optionally forwarding them.

    Handlers writing raw bytes through `sys.stdout.buffer` reach the
    same record through the `buffer` attribute.
    """

    def __init__(self, forward: 'TextIO | None' = None,
                 encoding: str = 'utf-8') -> None:
        """Initialize the stream.

        Args:
            forward: Stream receiving a copy of every write, if any.
            encoding: Encoding used for the recorded bytes.
        """
        super().__init__()

        self._forward = forward
        self._encoding = encoding
        self._buffer = BytesIO()
        self._binary = TeeBuffer(self)

    @property
    def encoding(self) -> str:  # type: ignore[override]
        """Encoding of the recorded bytes."""
        return self._encoding

    @property
    def buffer(self) -> TeeBuffer:
        """Binary view of the stream."""
        return self._binary

    def writable(self) -> bool:
        """Tee streams are always writable."""
        return True

    def write(self, text: str) -> int:
        """Record a chunk of text and forward it if requested."""
        self._buffer.write(text.encode(self._encoding, errors='replace'))
        if self._forward is not None:
            self._forward.write(text)

        return len(text)

    def write_bytes(self, data: bytes) -> int:
        """Record raw bytes and forward them if requested.

        Bytes go to the binary buffer of the forward stream when it has
        one, and are decoded into it otherwise.
        """
        self._buffer.write(data)
        if self._forward is not None:
            self._forward.flush()
            if (binary := getattr(self._forward, 'buffer', None)) is not None:
                binary.write(data)
                binary.flush()
            else:
                self._forward.write(data.decode(self._encoding, errors='replace'))

        return len(data)

    def flush(self) -> None:
        """Flush the forward stream."""
        if self._forward is not None:
            self._forward.flush()

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return self._buffer.getvalue()


def describe_error(error: BaseException) -> tuple[str, str | None]:
    """Extract a message and the raising location from an exception.

    Args:
        error: Exception with its traceback attached.

    Returns:
        The exception message (its class name when the message is
        empty) and the innermost `file:line` location, if known.
    """
    message = f'{error}' or type(error).__name__

    location = None
    if frames := extract_tb(error.__traceback__):
        location = f'{frames[-1].filename}:{frames[-1].lineno}'

    return message, location


def isolate(suppress: bool, work: 'Callable[[], Any]') -> Isolated:
    """Run work with captured console output and trapped exceptions.

    Args:
        suppress: Whether output is hidden from the real console. Output
            is captured in either case.
        work: Zero-argument callable to run.

    Returns:
        The work outcome (`Ok` with the returned value or `Err` with the
        failure message and location) and the captured output.

    Raises:
        RuntimeError: If another isolation is already active.
    """
    if not _ACTIVE.acquire(blocking=False):
        raise RuntimeError('Console isolation is already active')

    try:
        stdout = TeeStream(None if suppress else sys.stdout)
        stderr = TeeStream(None if suppress else sys.stderr)

        with redirect_stdout(stdout), redirect_stderr(stderr):  # type: ignore[type-var]
            try:
                outcome: Ok | Err = Ok(value=work())

            except Exception as error:  # noqa: BLE001
                message, location = describe_error(error)
                outcome = Err(message=message, location=location, error=error)

            finally:
                stdout.flush()
                stderr.flush()

    finally:
        _ACTIVE.release()

    return Isolated(
        outcome=outcome,
        stdout=stdout.getvalue(),
        stderr=stderr.getvalue(),
    )
