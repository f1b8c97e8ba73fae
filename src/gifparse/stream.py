''' Byte and bit level readers over an in-memory GIF buffer.
    Neither reader ever mutates the buffer, so a single buffer may back any
    number of readers at once.
'''

from struct import unpack, calcsize

from .errors import UnexpectedEndOfStream

#================================================================
# Helpers
#================================================================
def as_bytes(source):
    '''Accept any bytes-like object and return immutable bytes'''
    if isinstance(source, bytes):
        return source
    if isinstance(source, (bytearray, memoryview)):
        return bytes(source)
    raise TypeError("Requires byte-like object, got %s" % type(source).__name__)

#================================================================
# Byte streaming class
#================================================================
class ByteStream(object):
    '''Cursor reading bytes from an immutable byte string as from a file'''

    __slots__ = [
        "_source",
        "_pos",
        "_len",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, source):
        '''Initialize stream based on some source in memory'''
        self._source = as_bytes(source)
        self._pos = 0
        self._len = len(self._source)

    #------------------------------------------------
    # Position
    #------------------------------------------------
    def tell(self):
        '''Get the offset of the next byte to read'''
        return self._pos

    @property
    def remaining(self):
        '''Number of bytes left to read'''
        return self._len - self._pos

    #------------------------------------------------
    # Reading
    #------------------------------------------------
    def read(self, amount):
        '''Read exactly amount bytes from the stream'''
        if amount < 0:
            raise ValueError("Cannot read a negative amount (%d)" % amount)
        end = self._pos + amount
        if end > self._len:
            raise UnexpectedEndOfStream(
                "Needed %d bytes at offset %d, only %d left" % (
                    amount,
                    self._pos,
                    self._len - self._pos,
                )
            )
        out = self._source[self._pos:end]
        self._pos = end
        return out

    def read_byte(self):
        '''Read one unsigned byte'''
        return self.read(1)[0]

    def read_string(self, amount):
        '''Read amount bytes as text, one character per byte'''
        return self.read(amount).decode("latin-1")

    def read_u16(self):
        '''Read an unsigned little-endian short'''
        low, high = self.read(2)
        return (high << 8) | low

    def unpack(self, fmt):
        '''Read a new struct-formatted tuple from stream
        If only one item in tuple, return just the item'''
        temp = unpack(fmt, self.read(calcsize(fmt)))
        if len(temp) == 1:
            return temp[0]
        return temp

#================================================================
# Bit-level operations
#================================================================
class BitReader(object):
    '''Reads bits from a byte string, least significant bit first'''

    __slots__ = [
        "_str",
        "_ptr",
        "_len",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, byte_string):
        '''Initialize the reader with a complete byte string'''
        self._str = as_bytes(byte_string)
        self._ptr = 0
        self._len = len(self._str) * 8

    @property
    def position(self):
        '''Get the bit offset of the next read'''
        return self._ptr

    #------------------------------------------------
    # Bit operations
    #------------------------------------------------
    def read(self, amount):
        '''Read bits from the byte string and returns int'''
        end_ptr = self._ptr + amount
        if end_ptr > self._len:
            raise UnexpectedEndOfStream(
                "Needed %d bits at bit offset %d, only %d left" % (
                    amount,
                    self._ptr,
                    self._len - self._ptr,
                )
            )

        #Bytes covering the requested bits, first byte least significant
        byte_start, start = divmod(self._ptr, 8)
        byte_end = (end_ptr + 7) >> 3
        bit_str = int.from_bytes(self._str[byte_start:byte_end], "little")

        #--- Update pointer ---
        self._ptr = end_ptr
        return (bit_str >> start) & ((1 << amount) - 1)

#================================================================
# Block compression algorithms
#================================================================
def block_split(stream):
    '''Parses through sub-blocks and returns the entire byte string'''
    ret = bytearray()
    block_size = stream.read_byte()
    while block_size:
        ret += stream.read(block_size)
        block_size = stream.read_byte()
    return bytes(ret)
