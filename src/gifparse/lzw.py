''' Variable-width LZW decompression as used by GIF image data.
    Codes are packed least significant bit first; the code width starts one
    bit above the minimum code size and grows with the code table up to
    twelve bits.
'''

import logging

from .errors import InvalidLZWCode
from .stream import BitReader

logger = logging.getLogger(__name__)

#--- Constants ---
MAX_CODE_SIZE = 12
MAX_TABLE_SIZE = 1 << MAX_CODE_SIZE
#Output indices are bytes, so a palette can never need more than 8 bits
MAX_LZW_MIN = 8

#================================================================
# LZW code table
#================================================================
class LzwDecoder(object):
    ''' Stateful GIF LZW decoder, fed one code at a time.
        The code table is a fixed arena of 4096 slots with a cursor marking
        the next free code.
    '''

    __slots__ = [
        "_lzw_min",
        "_clear",
        "_end",
        "_table",
        "_size",
        "_code_size",
        "_last",
        "_done",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, lzw_min):
        '''Set up the special codes and the root entries'''
        if not 1 <= lzw_min <= MAX_LZW_MIN:
            raise InvalidLZWCode("Bad LZW minimum code size: %d" % lzw_min)
        self._lzw_min = lzw_min
        self._clear = 1 << lzw_min
        self._end = self._clear + 1
        self._done = False

        #Slots below the cursor are never overwritten, so roots are set once
        self._table = [None] * MAX_TABLE_SIZE
        for x in range(self._clear):
            self._table[x] = (x,)
        self._table[self._clear] = ()
        self._table[self._end] = None
        self.reset()

    def reset(self):
        '''Drop every learned entry and return to the starting code width'''
        self._size = self._end + 1
        self._code_size = self._lzw_min + 1
        self._last = None

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def clear_code(self):
        return self._clear

    @property
    def end_code(self):
        return self._end

    @property
    def code_size(self):
        '''Width in bits of the next code to read'''
        return self._code_size

    @property
    def size(self):
        '''Number of codes currently in the table'''
        return self._size

    @property
    def finished(self):
        '''Check if the end-of-information code was seen'''
        return self._done

    def entry(self, code):
        '''Get the index sequence for a code in the table'''
        if not 0 <= code < self._size or code == self._end:
            raise KeyError(code)
        return self._table[code]

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    def feed(self, code):
        '''Process one code and return the indices it stands for'''
        if code == self._clear:
            logger.debug("LZW clear at %d entries", self._size)
            self.reset()
            return ()
        if code == self._end:
            self._done = True
            return ()

        table = self._table
        last = self._last
        if code < self._size:
            #Table has code - output it, learn previous + first index
            current = table[code]
            if last is not None:
                self._grow(table[last] + current[:1])
        elif code == self._size:
            #Code about to be defined - previous + first of previous
            if last is None:
                raise InvalidLZWCode(
                    "Code %d used before any code was read" % code
                )
            previous = table[last]
            current = previous + previous[:1]
            self._grow(current)
        else:
            raise InvalidLZWCode(
                "Code %d is past the end of the table (%d entries)" % (
                    code,
                    self._size,
                )
            )
        self._last = code
        return current

    def _grow(self, entry):
        '''Append an entry and widen the codes when the space fills up'''
        if self._size == MAX_TABLE_SIZE:
            #Full table - keep decoding with what is there until a clear
            return
        self._table[self._size] = entry
        self._size += 1
        if self._size == (1 << self._code_size) and self._code_size < MAX_CODE_SIZE:
            self._code_size += 1

#================================================================
# LZW decompression
#================================================================
def lzw_decompress(raw_bytes, lzw_min):
    '''Decompress the LZW data and return the color indices as bytes'''
    decoder = LzwDecoder(lzw_min)
    code_in = BitReader(raw_bytes)
    idx_out = bytearray()
    while not decoder.finished:
        idx_out.extend(decoder.feed(code_in.read(decoder.code_size)))
    logger.debug(
        "LZW decoded %d indices from %d bytes (%d bits used)",
        len(idx_out),
        len(raw_bytes),
        code_in.position,
    )
    return bytes(idx_out)
