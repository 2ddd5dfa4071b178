"""Named byte channels (serial ports, FIFO pairs, a Unix-socket bus) and their manager."""

from __future__ import annotations

import enum
import os
from typing import Any

from utilkit.bus_server import BusServer
from utilkit.fdutils import fcntl_setfl, flush_fd, read_loop, write_loop
from utilkit.serial import Serial, SerialError
from utilkit.sockutils import unix_socket_connect

__all__ = [
    "ChannelType",
    "ChannelError",
    "ChannelAlreadyOpenError",
    "ChannelOpenFailedError",
    "UnknownChannelTypeError",
    "ChannelNotOpenError",
    "Channel",
    "UartChannel",
    "FifoChannel",
    "UnixBusChannel",
    "ChannelManager",
    "guess_channel_type",
]

_MAX_DEVICE_LEN = 120
_BUS_MAX_CLIENTS = 5


class ChannelType(enum.Enum):
    UART = 1
    MSGQ = 2
    FIFO = 3
    UNIX_BUS = 4


class ChannelError(Exception):
    """Base class of channel errors."""


class ChannelAlreadyOpenError(ChannelError):
    """Raised when opening a device that already has an open channel."""


class ChannelOpenFailedError(ChannelError):
    """Raised when the underlying device cannot be opened."""


class UnknownChannelTypeError(ChannelError):
    """Raised for a channel type that is unknown or not supported."""


class ChannelNotOpenError(ChannelError):
    """Raised when no channel is open on a device."""


_NAMES = {
    "uart": ChannelType.UART,
    "usart": ChannelType.UART,
    "serial": ChannelType.UART,
    "msgq": ChannelType.MSGQ,
    "message_queue": ChannelType.MSGQ,
    "fifo": ChannelType.FIFO,
    "pipe": ChannelType.FIFO,
    "unix_bus": ChannelType.UNIX_BUS,
}


def guess_channel_type(desc: str) -> ChannelType:
    """Map a channel description such as "serial" or "pipe" to its type."""
    try:
        return _NAMES[desc]
    except KeyError:
        raise UnknownChannelTypeError(f"unknown channel type {desc!r}") from None


def _check_device(device: str) -> None:
    if len(device) > _MAX_DEVICE_LEN:
        raise ChannelOpenFailedError(f"device name too long: {device!r}")


def _remove(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


class Channel:
    """A non-blocking byte channel reading from one descriptor and writing to another."""

    def __init__(
        self, device: str | os.PathLike[str], speed: int = 0, is_server: bool = False
    ) -> None:
        self.device = os.fspath(device)
        self.speed = speed
        self.is_server = bool(is_server)
        self.id = 0
        self._rfd = -1
        self._wfd = -1

    def send(self, data: bytes) -> int:
        """Send ``data``; returns the number of bytes sent (0 if it would block)."""
        return write_loop(self._wfd, bytes(data))

    def receive(self, max_len: int) -> bytes:
        """Receive up to ``max_len`` bytes; b"" when nothing is waiting."""
        return read_loop(self._rfd, max_len)

    def flush(self) -> None:
        """Discard pending input."""
        flush_fd(self._rfd)

    def close(self) -> None:
        """Release the channel's descriptors."""
        for fd in {self._rfd, self._wfd}:
            if fd >= 0:
                os.close(fd)
        self._rfd = self._wfd = -1

    def __enter__(self) -> Channel:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class UartChannel(Channel):
    """A channel over a serial port, opened as 8N1 at ``speed`` baud."""

    def __init__(
        self, device: str | os.PathLike[str], speed: int = 9600, is_server: bool = False
    ) -> None:
        super().__init__(device, speed, is_server)
        try:
            self._serial: Serial | None = Serial(self.device, speed, "8N1")
        except SerialError as exc:
            raise ChannelOpenFailedError(
                f"failed to open device {self.device}"
            ) from exc

    def send(self, data: bytes) -> int:
        assert self._serial is not None
        return self._serial.write(bytes(data))

    def receive(self, max_len: int) -> bytes:
        assert self._serial is not None
        return self._serial.read(max_len)

    def flush(self) -> None:
        assert self._serial is not None
        self._serial.flush()

    def close(self) -> None:
        if self._serial is not None:
            self._serial.close()
            self._serial = None


class FifoChannel(Channel):
    """A channel over two named pipes, ``<device>-0`` and ``<device>-1``.

    The server creates both; it reads the first and writes the second,
    while a client does the opposite.
    """

    def __init__(
        self, device: str | os.PathLike[str], speed: int = 0, is_server: bool = False
    ) -> None:
        super().__init__(device, speed, is_server)
        _check_device(self.device)
        self._fifo0 = f"{self.device}-0"
        self._fifo1 = f"{self.device}-1"
        try:
            if self.is_server:
                for path in (self._fifo0, self._fifo1):
                    _remove(path)
                    os.mkfifo(path, 0o666)
            if self.is_server:
                read_path, write_path = self._fifo0, self._fifo1
            else:
                read_path, write_path = self._fifo1, self._fifo0
            self._rfd = os.open(read_path, os.O_RDWR)
            self._wfd = os.open(write_path, os.O_RDWR)
            fcntl_setfl(self._rfd, os.O_NONBLOCK)
            fcntl_setfl(self._wfd, os.O_NONBLOCK)
        except OSError as exc:
            super().close()
            _remove(self._fifo0)
            _remove(self._fifo1)
            raise ChannelOpenFailedError(
                f"failed to open fifo channel {self.device}"
            ) from exc

    @property
    def paths(self) -> tuple[str, str]:
        """The two pipe paths."""
        return self._fifo0, self._fifo1

    def close(self) -> None:
        super().close()
        if self.is_server:
            _remove(self._fifo0)
            _remove(self._fifo1)


class UnixBusChannel(Channel):
    """A channel on a Unix-socket bus; the bus server is started if none is running."""

    def __init__(
        self, device: str | os.PathLike[str], speed: int = 0, is_server: bool = False
    ) -> None:
        super().__init__(device, speed, is_server)
        _check_device(self.device)
        self._server: BusServer | None = None
        try:
            if not os.path.exists(self.device):
                self._server = BusServer(_BUS_MAX_CLIENTS, self.device)
                self._server.start()
            self._sock = unix_socket_connect(self.device)
        except OSError as exc:
            if self._server is not None:
                self._server.stop()
                self._server = None
            raise ChannelOpenFailedError(
                f"failed to join bus {self.device}"
            ) from exc
        self._sock.setblocking(False)
        self._rfd = self._wfd = self._sock.fileno()

    @property
    def owns_server(self) -> bool:
        """True when this channel started the bus server."""
        return self._server is not None

    def close(self) -> None:
        if self._rfd >= 0:
            self._sock.close()
            self._rfd = self._wfd = -1
        if self._server is not None:
            self._server.stop()
            self._server = None


_FACTORIES: dict[ChannelType, type[Channel]] = {
    ChannelType.UART: UartChannel,
    ChannelType.FIFO: FifoChannel,
    ChannelType.UNIX_BUS: UnixBusChannel,
}


class ChannelManager:
    """Keeps the open channels, one per device."""

    def __init__(self) -> None:
        self._channels: dict[str, Channel] = {}
        self.open_channels = 0

    def open(
        self,
        channel_type: ChannelType,
        device: str | os.PathLike[str],
        speed: int = 0,
        is_server: bool = False,
    ) -> Channel:
        """Open a channel of ``channel_type`` on ``device`` and return it."""
        try:
            ctype = ChannelType(channel_type)
        except ValueError:
            raise UnknownChannelTypeError(
                f"unknown channel type {channel_type!r}"
            ) from None
        factory = _FACTORIES.get(ctype)
        if factory is None:
            raise UnknownChannelTypeError(f"{ctype.name} channels are not supported")
        key = os.fspath(device)
        if key in self._channels:
            raise ChannelAlreadyOpenError(f"channel {key} is already open")
        try:
            channel = factory(key, speed, is_server)
        except OSError as exc:
            raise ChannelOpenFailedError(f"failed to open {key}") from exc
        channel.flush()
        self.open_channels += 1
        channel.id = self.open_channels
        self._channels[key] = channel
        return channel

    def get(self, device: str | os.PathLike[str]) -> Channel:
        """Return the channel open on ``device``."""
        key = os.fspath(device)
        try:
            return self._channels[key]
        except KeyError:
            raise ChannelNotOpenError(f"channel {key} is not open") from None

    def close(self, device: str | os.PathLike[str]) -> None:
        """Close the channel open on ``device``."""
        channel = self.get(device)
        channel.close()
        del self._channels[os.fspath(device)]
        self.open_channels -= 1

    def teardown(self) -> None:
        """Close every open channel."""
        for device in list(self._channels):
            self.close(device)