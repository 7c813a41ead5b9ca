"""A container for sensitive data that is wiped when no longer needed."""

import hmac
import os


def _zero(buffer, count=None):
    """Overwrite the first ``count`` bytes of a bytearray with zeros."""
    if count is None:
        count = len(buffer)
    buffer[:count] = bytes(count)


class SecureString:
    """Holds sensitive bytes and overwrites them on clear, reassignment and deletion.

    Values handed over in a ``bytearray`` are copied and the source is wiped.
    """

    def __init__(self, value=None, size=None):
        self._data = bytearray()
        if value is None:
            if size:
                raise ValueError("size given without a value")
            return
        self._data = self._consume(value, size)

    @staticmethod
    def _consume(value, size=None):
        if isinstance(value, str):
            raw = bytearray(value.encode("utf-8"))
            try:
                return SecureString._consume(raw, size)
            finally:
                _zero(raw)
        if isinstance(value, bytearray):
            count = len(value) if size is None else size
            if count < 0 or count > len(value):
                raise ValueError("size out of range")
            data = bytearray(value[:count])
            _zero(value, count)
            return data
        if isinstance(value, (bytes, memoryview)):
            raw = bytes(value)
            count = len(raw) if size is None else size
            if count < 0 or count > len(raw):
                raise ValueError("size out of range")
            return bytearray(raw[:count])
        raise TypeError(f"unsupported value type: {type(value).__name__}")

    @classmethod
    def from_file(cls, filename):
        """Create a secure string holding the whole contents of a file."""
        try:
            with open(filename, "rb") as file:
                size = os.fstat(file.fileno()).st_size
                buffer = bytearray(size)
                read = file.readinto(buffer)
        except OSError as exc:
            raise OSError("failed to open file") from exc
        result = cls()
        if read != size:
            del buffer[read:]
        result._data = buffer
        return result

    def _wipe(self):
        _zero(self._data)
        self._data = bytearray()

    def assign(self, value):
        """Replace the contents; the former contents are wiped."""
        if isinstance(value, SecureString):
            new = bytearray(value._data)
        else:
            new = self._consume(value)
        self._wipe()
        self._data = new
        return self

    def copy(self):
        """Return an independent copy."""
        result = SecureString()
        result._data = bytearray(self._data)
        return result

    def take(self):
        """Move the contents into a new secure string, leaving this one empty."""
        result = SecureString()
        result._data = self._data
        self._data = bytearray()
        return result

    def clear(self):
        """Wipe the contents and leave the string empty."""
        self._wipe()

    def __eq__(self, other):
        if not isinstance(other, SecureString):
            return NotImplemented
        return len(self._data) == len(other._data) and hmac.compare_digest(
            bytes(self._data), bytes(other._data)
        )

    __hash__ = None

    def __len__(self):
        return len(self._data)

    def __bytes__(self):
        return bytes(self._data)

    def __repr__(self):
        return f"SecureString(<{len(self._data)} bytes>)"

    def __del__(self):
        data = getattr(self, "_data", None)
        if data:
            _zero(data)