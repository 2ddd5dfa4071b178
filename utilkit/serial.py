"""Serial (UART) port access through termios."""

from __future__ import annotations

import fcntl
import logging
import os
import struct
import termios
from dataclasses import dataclass
from typing import Any

__all__ = ["SerialError", "SerialMode", "Serial", "parse_mode", "baud_constant"]

_log = logging.getLogger(__name__)

_RATES = (
    50, 75, 110, 134, 150, 200, 300, 600, 1200, 1800, 2400, 4800,
    9600, 19200, 38400, 57600, 115200, 230400,
)
_BAUD = {
    rate: getattr(termios, f"B{rate}")
    for rate in _RATES
    if hasattr(termios, f"B{rate}")
}
_DATA_BITS = {8: termios.CS8, 7: termios.CS7, 6: termios.CS6, 5: termios.CS5}
_CRTSCTS = getattr(termios, "CRTSCTS", 0)
_INT = struct.Struct("i")


class SerialError(Exception):
    """Raised when a serial port cannot be configured, opened or used."""


@dataclass(frozen=True)
class SerialMode:
    """Line settings such as those written "8N1" or "7E2F"."""

    data_bits: int = 8
    parity: str = "N"
    stop_bits: int = 1
    flow_control: bool = False

    @property
    def cflag(self) -> int:
        """Control flags for these settings."""
        flags = _DATA_BITS[self.data_bits] | termios.CLOCAL | termios.CREAD
        if self.parity != "N":
            flags |= termios.PARENB
            if self.parity == "O":
                flags |= termios.PARODD
        if self.stop_bits == 2:
            flags |= termios.CSTOPB
        if self.flow_control:
            flags |= _CRTSCTS
        return flags

    @property
    def iflag(self) -> int:
        """Input flags for these settings."""
        return termios.IGNPAR if self.parity == "N" else termios.INPCK


def parse_mode(mode: str) -> SerialMode:
    """Parse a mode string: data bits, parity, stop bits and an optional 'F'.

    Parity 'N' means none, 'O' odd and any other letter even. A stop-bit
    character other than '2' means one stop bit.
    """
    if not 3 <= len(mode) <= 4:
        raise SerialError(f'invalid mode "{mode}"')
    if mode[0] not in "8765":
        raise SerialError(f"invalid number of data-bits '{mode[0]}'")
    if mode[1] in "Nn":
        parity = "N"
    elif mode[1] in "Oo":
        parity = "O"
    else:
        parity = "E"
    return SerialMode(
        data_bits=int(mode[0]),
        parity=parity,
        stop_bits=2 if mode[2] == "2" else 1,
        flow_control=len(mode) == 4 and mode[3] in "Ff",
    )


def baud_constant(baud: int) -> int:
    """Return the termios speed constant for ``baud``."""
    try:
        return _BAUD[baud]
    except KeyError:
        raise SerialError(f"invalid baudrate {baud}") from None


class Serial:
    """An open serial port, locked for exclusive use and set to raw mode.

    Reads and writes never block: with nothing to read, :meth:`read`
    returns b"" and a write that would block reports 0 bytes.
    """

    def __init__(
        self, device: str | os.PathLike[str], baud: int = 9600, mode: str = "8N1"
    ) -> None:
        speed = baud_constant(baud)
        self.mode = parse_mode(mode)
        self.device = os.fspath(device)
        self.baud = baud
        self._fd = -1
        self._old_attrs: list[Any] | None = None
        try:
            fd = os.open(self.device, os.O_RDWR | os.O_NOCTTY | os.O_NONBLOCK)
        except OSError as exc:
            raise SerialError(f"unable to open comport {self.device}") from exc
        self._fd = fd
        try:
            self._configure(speed)
        except BaseException:
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            except OSError:
                pass
            os.close(fd)
            self._fd = -1
            raise

    def _configure(self, speed: int) -> None:
        fd = self._fd
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            raise SerialError("another process has locked the comport") from exc
        try:
            old = termios.tcgetattr(fd)
        except termios.error as exc:
            raise SerialError("unable to read portsettings") from exc
        cc = list(old[6])
        cc[termios.VMIN] = 0
        cc[termios.VTIME] = 0
        new = [self.mode.iflag, 0, self.mode.cflag, 0, speed, speed, cc]
        try:
            termios.tcsetattr(fd, termios.TCSANOW, new)
            status = self._modem_status()
            self._set_modem_status(status | termios.TIOCM_DTR | termios.TIOCM_RTS)
        except (termios.error, OSError, SerialError) as exc:
            try:
                termios.tcsetattr(fd, termios.TCSANOW, old)
            except termios.error:
                pass
            raise SerialError("unable to adjust portsettings") from exc
        self._old_attrs = old

    @property
    def closed(self) -> bool:
        return self._fd < 0

    def _check_open(self) -> None:
        if self._fd < 0:
            raise SerialError("port is closed")

    def _modem_status(self) -> int:
        try:
            buf = fcntl.ioctl(self._fd, termios.TIOCMGET, _INT.pack(0))
        except OSError as exc:
            raise SerialError("unable to get portstatus") from exc
        return _INT.unpack(buf)[0]

    def _set_modem_status(self, status: int) -> None:
        try:
            fcntl.ioctl(self._fd, termios.TIOCMSET, _INT.pack(status))
        except OSError as exc:
            raise SerialError("unable to set portstatus") from exc

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; b"" when nothing is waiting."""
        self._check_open()
        try:
            return os.read(self._fd, size)
        except BlockingIOError:
            return b""
        except OSError as exc:
            raise SerialError("read failed") from exc

    def write(self, data: bytes) -> int:
        """Write ``data``; returns the number of bytes written."""
        self._check_open()
        try:
            return os.write(self._fd, data)
        except BlockingIOError:
            return 0
        except OSError as exc:
            raise SerialError("write failed") from exc

    def _tcflush(self, queue: int) -> None:
        self._check_open()
        try:
            termios.tcflush(self._fd, queue)
        except termios.error as exc:
            raise SerialError("flush failed") from exc

    def flush(self) -> None:
        """Discard data in both directions."""
        self._tcflush(termios.TCIOFLUSH)

    def flush_rx(self) -> None:
        """Discard received data not yet read."""
        self._tcflush(termios.TCIFLUSH)

    def flush_tx(self) -> None:
        """Discard written data not yet transmitted."""
        self._tcflush(termios.TCOFLUSH)

    def close(self) -> None:
        """Drop DTR and RTS, restore the old settings and release the port."""
        if self._fd < 0:
            return
        try:
            status = self._modem_status()
            self._set_modem_status(status & ~(termios.TIOCM_DTR | termios.TIOCM_RTS))
        except SerialError as exc:
            _log.error("%s", exc)
        if self._old_attrs is not None:
            try:
                termios.tcsetattr(self._fd, termios.TCSANOW, self._old_attrs)
            except termios.error as exc:
                _log.error("unable to restore portsettings: %s", exc)
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        except OSError:
            pass
        os.close(self._fd)
        self._fd = -1

    def _line(self, bit: int) -> bool:
        self._check_open()
        return bool(self._modem_status() & bit)

    def dcd(self) -> bool:
        """State of the carrier-detect line."""
        return self._line(termios.TIOCM_CAR)

    def rng(self) -> bool:
        """State of the ring-indicator line."""
        return self._line(termios.TIOCM_RNG)

    def cts(self) -> bool:
        """State of the clear-to-send line."""
        return self._line(termios.TIOCM_CTS)

    def dsr(self) -> bool:
        """State of the data-set-ready line."""
        return self._line(termios.TIOCM_DSR)

    def _assert_line(self, bit: int, state: bool) -> None:
        self._check_open()
        status = self._modem_status()
        status = status | bit if state else status & ~bit
        self._set_modem_status(status)

    def assert_dtr(self, state: bool) -> None:
        """Raise or drop the data-terminal-ready line."""
        self._assert_line(termios.TIOCM_DTR, state)

    def assert_rts(self, state: bool) -> None:
        """Raise or drop the request-to-send line."""
        self._assert_line(termios.TIOCM_RTS, state)

    def __enter__(self) -> Serial:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()