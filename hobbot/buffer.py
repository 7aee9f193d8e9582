"""
Line framing for the reactor's descriptors.

Reads arrive in arbitrary chunks and writes are accepted by the OS only
partially, so every handler keeps a LineBuffer that hides both.

>>> buf = LineBuffer()
>>> buf.feed(b'AB')
[]
>>> buf.feed(b'C\\nD\\n')
['ABC', 'D']
>>> buf.feed(b'\\r\\n')
['']

>>> buf.write('PING x\\r\\n')
>>> buf.pending
True
>>> buf.flush(lambda data: 3)
3
>>> bytes(buf.outgoing)
b'G x\\r\\n'
"""

import logging

from jaraco.stream import buffer

log = logging.getLogger(__name__)


class EndOfStream(Exception):
    "The peer closed its end of the descriptor"


class LineBuffer:
    """
    A bidirectional buffer: bytes in, lines out; text in, bytes out.
    """

    incoming_class = buffer.LenientDecodingLineBuffer
    encoding = 'utf-8'

    def __init__(self):
        self.incoming = self.incoming_class()
        self.outgoing = bytearray()

    def feed(self, chunk):
        """
        Append a freshly read chunk and return every complete line,
        in the order received. An empty chunk means the peer hung up.
        """
        if not chunk:
            raise EndOfStream()
        self.incoming.feed(chunk)
        return list(self.incoming)

    def __len__(self):
        "bytes received but not yet framed into a line"
        return len(self.incoming)

    def write(self, text):
        self.outgoing += text.encode(self.encoding)

    @property
    def pending(self):
        return bool(self.outgoing)

    def flush(self, send):
        """
        Offer the queued bytes to ``send`` and drop as many leading bytes
        as it accepted. Return that count.
        """
        if not self.outgoing:
            return 0
        try:
            sent = send(bytes(self.outgoing))
        except BlockingIOError:
            return 0
        del self.outgoing[:sent]
        log.log(logging.DEBUG - 2, "flushed %d bytes, %d pending", sent, len(self.outgoing))
        return sent
