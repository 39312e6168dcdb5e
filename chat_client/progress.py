"""
Upload progress for optimistic messages with attachments.

Progress runs in two phases: reading files (``READ_START`` to ``READ_END``)
and transmitting the request (``READ_END`` to ``TRANSMIT_END``). When the
transport cannot report upload progress the value jumps to ``HIGH_WATER``
instead. It never goes backwards and never reaches 100; a confirmed message
simply has no progress.
"""

READ_START = 5
READ_END = 75
TRANSMIT_END = 99
HIGH_WATER = 90


class UploadProgress:

    def __init__(self, total_files, on_change=None):
        self.total_files = max(total_files, 1)
        self.on_change = on_change
        self.value = READ_START

    def file_read(self, index, fraction):
        """``fraction`` of file ``index`` (zero based) has been read."""
        fraction = min(max(fraction, 0.0), 1.0)
        done = (index + fraction) / self.total_files
        self._advance(READ_START + (READ_END - READ_START) * done)

    def read_done(self):
        self._advance(READ_END)

    def transmitted(self, fraction):
        fraction = min(max(fraction, 0.0), 1.0)
        self._advance(READ_END + (TRANSMIT_END - READ_END) * fraction)

    def high_water(self):
        self._advance(HIGH_WATER)

    def _advance(self, value):
        value = min(int(value), TRANSMIT_END)
        if value <= self.value:
            return
        self.value = value
        if self.on_change is not None:
            self.on_change(value)
