"""Accumulates serial bytes into text lines."""

from errors import FramingOverflow

DEFAULT_MAX_BUFFER = 4096


class LineBuffer:
    """Splits an arbitrarily chunked byte stream into newline-terminated lines

    Every complete line is handed to ``line_received_cb`` exactly once, in
    arrival order, with the terminator (and a trailing carriage return)
    removed. Bytes after the last terminator are kept for the next push.
    """

    def __init__(self, line_received_cb, max_buffer=DEFAULT_MAX_BUFFER, terminator=b"\n"):
        self.line_received_cb = line_received_cb
        self.max_buffer = max_buffer
        self.terminator = terminator
        self.buffer = bytearray()

    @property
    def pending(self):
        """Number of bytes waiting for a terminator"""
        return len(self.buffer)

    def reset(self):
        self.buffer.clear()

    def push(self, chunk):
        self.buffer.extend(chunk)

        while True:
            idx = self.buffer.find(self.terminator)
            if idx < 0:
                break

            raw = bytes(self.buffer[:idx])
            del self.buffer[:idx + len(self.terminator)]

            # Undecodable bytes become U+FFFD, so the line cannot parse as a shorter one
            line = raw.decode("ascii", errors="replace").rstrip("\r")
            self.line_received_cb(line)

        if len(self.buffer) > self.max_buffer:
            size = len(self.buffer)
            self.buffer.clear()
            raise FramingOverflow(size, self.max_buffer)
