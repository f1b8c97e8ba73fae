''' Byte-level GIF blocks.
    Each class decodes one construct of the block grammar from a ByteStream
    positioned just after the construct's introducer, and is used afterwards
    as a read-only record.
'''

## Sources cited:
# * matthewflickinger.com/lab/whatsinagif
# * w3.org/Graphics/GIF/spec-gif89a.txt

import logging
from enum import IntEnum
from struct import unpack

from .errors import BadBlockError, InvalidSignature
from .interlace import deinterlace
from .lzw import lzw_decompress
from .stream import block_split

logger = logging.getLogger(__name__)

#--- Constants ---
BLOCK_HEADER = 0x21
IMAGE_HEADER = 0x2C
BLOCK_FOOTER = 0
GRAPHIC_HEADER = 0xF9
GRAPHIC_SIZE = 4
COMMENT_HEADER = 0xFE
TEXT_HEADER = 0x1
TEXT_SIZE = 12
APPLICATION_HEADER = 0xFF
APPLICATION_SIZE = 11
NETSCAPE_IDENT = "NETSCAPE"
NETSCAPE_SIZE = 3
GIF_HEADER = "GIF"
GIF87a = "87a"
GIF89a = "89a"
GIF_FOOTER = 0x3B

class DisposalMethod(IntEnum):
    '''What happens to a frame's area before the next frame is drawn'''
    NONE = 0
    DO_NOT_DISPOSE = 1
    RESTORE_BACKGROUND = 2
    RESTORE_PREVIOUS = 3

#================================================================
# Shared readers
#================================================================
def read_color_table(stream, size):
    '''Read size (r, g, b) triples'''
    return [stream.unpack('3B') for _ in range(size)]

def check_block(strict, what, found, expected):
    '''In strict mode, fail when a fixed field holds the wrong value'''
    if strict and found != expected:
        raise BadBlockError(
            "Bad %s: expected %d, found %d" % (what, expected, found)
        )

#================================================================
# GIF component base class
#================================================================
class GifBlock(object):
    '''Base class for GIF blocks'''

    __slots__ = []

#================================================================
# GIF components : Header and logical screen descriptor
#================================================================
class Header(GifBlock):
    ''' Signature, version, logical screen descriptor and global color table.
        The color table is part of the header so that a header is only
        ever handed out complete.
    '''

    __slots__ = [
        "_signature",
        "_version",
        "_width",
        "_height",
        "_gct_flag",
        "_res",
        "_sorted",
        "_gct_size",
        "_bgcolor",
        "_aspect",
        "_gct",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self):
        self._signature = GIF_HEADER
        self._version = GIF89a
        self._width, self._height = 0, 0
        self._gct_flag = False
        self._res = 0
        self._sorted = False
        self._gct_size = 0
        self._bgcolor = 0
        self._aspect = 0
        self._gct = []

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @classmethod
    def decode(cls, stream):
        ''' Reads the first bytes of the stream, up to the first block
        '''
        ret = cls()

        #--- Check header ---
        ret._signature = stream.read_string(3)
        if ret._signature != GIF_HEADER:
            raise InvalidSignature(
                "Bad header, expected %s but found %r" % (
                    GIF_HEADER,
                    ret._signature,
                )
            )

        #--- Version is informational only ---
        ret._version = stream.read_string(3)
        if ret._version not in (GIF87a, GIF89a):
            logger.warning("Unknown GIF version %r, decoding anyway", ret._version)

        #--- Unpack logical screen descriptor ---
        ret._width = stream.read_u16()
        ret._height = stream.read_u16()
        packed_byte, ret._bgcolor, ret._aspect = stream.unpack('3B')

        #Unpack the packed byte
        ret._gct_flag = bool((packed_byte >> 7) & 1)
        ret._res = (packed_byte >> 4) & 7
        ret._sorted = bool((packed_byte >> 3) & 1)
        ret._gct_size = 2 << (packed_byte & 7)

        #Unpacking the GCT
        if ret._gct_flag:
            ret._gct = read_color_table(stream, ret._gct_size)
        return ret

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def signature(self):
        return self._signature

    @property
    def version(self):
        '''Get the GIF version string, such as "89a"'''
        return self._version

    @property
    def width(self):
        '''Get the canvas width'''
        return self._width

    @property
    def height(self):
        '''Get the canvas height'''
        return self._height

    @property
    def color_resolution(self):
        '''Get the bits per primary color of the original image'''
        return self._res + 1

    @property
    def sorted(self):
        '''Check if the GCT is sorted by importance'''
        return self._sorted

    @property
    def gct_flag(self):
        return self._gct_flag

    @property
    def gct_size(self):
        '''Get the declared number of GCT entries'''
        return self._gct_size

    @property
    def gct(self):
        '''Get the global color table, empty when absent'''
        return self._gct

    @property
    def background_index(self):
        return self._bgcolor

    @property
    def background(self):
        '''Get the background color, or None without a GCT'''
        if self._gct and self._bgcolor < len(self._gct):
            return self._gct[self._bgcolor]
        return None

    @property
    def aspect_byte(self):
        '''Get the raw pixel aspect ratio field'''
        return self._aspect

    @property
    def aspect_ratio(self):
        '''Get the pixel aspect ratio (width / height), or None if unset'''
        if self._aspect:
            return (self._aspect + 15) / 64
        return None

#================================================================
# GIF components : Image block
#================================================================
class ImageBlock(GifBlock):
    ''' Image descriptor, local color table and image data.
        The LZW data is kept so that decompress() can be run again, on
        another thread if need be.
    '''

    __slots__ = [
        "_x",
        "_y",
        "_width",
        "_height",
        "_lct_flag",
        "_interlace",
        "_sorted",
        "_reserved",
        "_lct_size",
        "_lct",
        "_lzw_min",
        "_lzw",
        "_pixels",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self):
        ''' Create a blank image block '''
        self._x, self._y = 0, 0
        self._width, self._height = 0, 0
        self._lct_flag = False
        self._interlace = False
        self._sorted = False
        self._reserved = 0
        self._lct_size = 0
        self._lct = []
        self._lzw_min = 0
        self._lzw = b""
        self._pixels = b""

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @classmethod
    def decode(cls, stream):
        ''' Reads bytes from the stream and decompresses the pixels.
            Should happen after block header 0x2c is discovered
        '''
        ret = cls()

        #Unpack image descriptor
        ret._x, ret._y, ret._width, ret._height = stream.unpack('<4H')
        packed_byte = stream.read_byte()

        #Unpack the packed field
        ret._lct_flag = bool((packed_byte >> 7) & 1)
        ret._interlace = bool((packed_byte >> 6) & 1)
        ret._sorted = bool((packed_byte >> 5) & 1)
        ret._reserved = (packed_byte >> 3) & 3
        ret._lct_size = 2 << (packed_byte & 7)

        #Unpack the lct if it exists
        if ret._lct_flag:
            ret._lct = read_color_table(stream, ret._lct_size)

        #Unpack actual image data
        ret._lzw_min = stream.read_byte()
        ret._lzw = block_split(stream)
        logger.debug(
            "Image %dx%d at (%d, %d), %d bytes of LZW data",
            ret._width, ret._height, ret._x, ret._y, len(ret._lzw),
        )

        ret._pixels = ret.decompress()
        return ret

    def decompress(self):
        '''Decode the LZW data into width * height indices in row order'''
        pixels = lzw_decompress(self._lzw, self._lzw_min)
        expected = self._width * self._height
        if len(pixels) != expected:
            logger.warning(
                "Image data holds %d indices, expected %d; %s",
                len(pixels),
                expected,
                "truncating" if len(pixels) > expected else "padding with 0",
            )
            pixels = pixels[:expected] + bytes(max(0, expected - len(pixels)))
        if self._interlace:
            pixels = deinterlace(pixels, self._width)
        return pixels

    #------------------------------------------------
    # Dimensions
    #------------------------------------------------
    @property
    def position(self):
        '''Get the image position'''
        return self._x, self._y

    @property
    def left(self):
        return self._x

    @property
    def top(self):
        return self._y

    @property
    def width(self):
        '''Get the image block width'''
        return self._width

    @property
    def height(self):
        '''Get the image height'''
        return self._height

    #------------------------------------------------
    # Image properties
    #------------------------------------------------
    @property
    def interlace(self):
        '''Check if image is interlaced'''
        return self._interlace

    @property
    def sorted(self):
        return self._sorted

    @property
    def lct_flag(self):
        return self._lct_flag

    @property
    def lct_size(self):
        '''Get the declared number of LCT entries'''
        return self._lct_size

    @property
    def lct(self):
        '''Get the local color table, empty when absent'''
        return self._lct

    @property
    def lzw_min(self):
        return self._lzw_min

    @property
    def lzw(self):
        '''Get the compressed LZW data'''
        return self._lzw

    @property
    def pixels(self):
        '''Get the decoded color indices'''
        return self._pixels

#================================================================
# Base class for extensions
#================================================================
class ExtensionBlock(GifBlock):
    '''Base class for all GIF extension blocks'''

    __slots__ = []

    label = None

#================================================================
# GIF components : Graphic Control Extension block
#================================================================
class GraphicExtension(ExtensionBlock):
    ''' Initialize the graphic extension block from the file
        There can only be one per image block, but there can be arbitrarily many
        within the entire GIF
    '''

    __slots__ = [
        "_reserved",
        "_trans",
        "_index",
        "_delay",
        "_disposal",
        "_userin",
    ]

    label = GRAPHIC_HEADER

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, *, trans=False, index=0, delay=0, disposal=0, userin=False):
        '''Build the graphic extension block; defaults match a missing block'''
        self._reserved = 0
        self._trans = bool(trans)
        self._index = index
        self._delay = delay
        self._disposal = disposal
        self._userin = bool(userin)

    #------------------------------------------------
    # Decoding
    #------------------------------------------------
    @classmethod
    def decode(cls, stream, strict=False):
        ''' Reads bytes from the stream.
            Should happen after block header 0x21f9 is discovered
        '''
        ret = cls()

        #Unpack graphics extension block
        block_size, packed_byte = stream.unpack('2B')
        check_block(strict, "graphic extension size", block_size, GRAPHIC_SIZE)

        #Unpack the packed byte
        ret._reserved = (packed_byte >> 5) & 0x7
        ret._disposal = (packed_byte >> 2) & 0x7
        ret._userin = bool((packed_byte >> 1) & 1)
        ret._trans = bool(packed_byte & 1)

        #Unpack extension block
        ret._delay = stream.read_u16()
        ret._index, footer = stream.unpack('2B')
        check_block(strict, "graphic extension footer", footer, BLOCK_FOOTER)
        return ret

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def trans(self):
        '''Get the index of transparency, or None if nontransparent'''
        if self._trans:
            return self._index
        return None

    @property
    def transparency_given(self):
        return self._trans

    @property
    def transparent_index(self):
        '''Get the raw transparent index field, set or not'''
        return self._index

    @property
    def delay(self):
        '''Get the delay time in hundredths of a second'''
        return self._delay

    @property
    def disposal(self):
        '''Get the disposal method, a plain int for undefined values'''
        try:
            return DisposalMethod(self._disposal)
        except ValueError:
            return self._disposal

    @property
    def user_input(self):
        '''Check if the user input flag is set'''
        return self._userin

    @property
    def reserved(self):
        return self._reserved

#================================================================
# GIF components : Comment extension block
#================================================================
class CommentExtension(ExtensionBlock):
    ''' Initialize the comment extension from the file
        There can be arbitrarily many of these in one GIF
    '''

    __slots__ = [
        "_comment",
    ]

    label = COMMENT_HEADER

    def __init__(self, comment=b""):
        '''Initialize extension with comment'''
        self._comment = comment

    @classmethod
    def decode(cls, stream, strict=False):
        ''' Reads bytes from the stream.
            Should happen after block header 0x21fe is found
        '''
        return cls(block_split(stream))

    @property
    def comment(self):
        '''Get the raw comment bytes'''
        return self._comment

    @property
    def text(self):
        '''Get the comment as text, one character per byte'''
        return self._comment.decode("latin-1")

#================================================================
# GIF components : Plain Text Extension
#================================================================
class PlainTextExtension(ExtensionBlock):
    ''' Initialize the plain text extension from the file
        The text grid fields are captured but never checked
    '''

    __slots__ = [
        "_header",
        "_data",
    ]

    label = TEXT_HEADER

    def __init__(self, header=bytes(TEXT_SIZE), data=b""):
        self._header = header
        self._data = data

    @classmethod
    def decode(cls, stream, strict=False):
        ''' Reads bytes from the stream.
            Should happen after block header 0x2101 is found
        '''
        block_size = stream.read_byte()
        check_block(strict, "plain text extension size", block_size, TEXT_SIZE)
        header = stream.read(TEXT_SIZE)
        return cls(header, block_split(stream))

    #------------------------------------------------
    # Properties
    #------------------------------------------------
    @property
    def header(self):
        '''Get the raw 12 byte text grid header'''
        return self._header

    @property
    def data(self):
        return self._data

    @property
    def text(self):
        '''Get the string being displayed'''
        return self._data.decode("latin-1")

    @property
    def position(self):
        '''Get the text grid position'''
        return unpack('<2H', self._header[0:4])

    @property
    def grid(self):
        '''Get the grid dimensions'''
        return unpack('<2H', self._header[4:8])

    @property
    def cell(self):
        '''Get the cell dimensions'''
        return self._header[8], self._header[9]

    @property
    def foreground(self):
        '''Get the foreground color index'''
        return self._header[10]

    @property
    def background(self):
        '''Get the background color index'''
        return self._header[11]

#================================================================
# GIF components : Application Extension
#================================================================
class ApplicationExtension(ExtensionBlock):
    ''' Application data keyed by an 8 byte identifier and 3 byte
        authentication code
    '''

    __slots__ = [
        "_ident",
        "_auth",
        "_data",
    ]

    label = APPLICATION_HEADER

    def __init__(self, ident="", auth="", data=b""):
        ''' Initialize the block from its paramaters'''
        self._ident = ident
        self._auth = auth
        self._data = data

    @classmethod
    def decode(cls, stream, strict=False):
        ''' Decode an application extension, picking the Netscape looping
            block out by its identifier.
            Should happen after block header 0x21ff is found
        '''
        block_size = stream.read_byte()
        check_block(strict, "application extension size", block_size, APPLICATION_SIZE)
        ident = stream.read_string(8)
        auth = stream.read_string(3)

        if ident == NETSCAPE_IDENT:
            size = stream.read_byte()
            if size == NETSCAPE_SIZE:
                sub_id = stream.read_byte()
                iterations = stream.read_u16()
                footer = stream.read_byte()
                check_block(strict, "Netscape extension footer", footer, BLOCK_FOOTER)
                return NetscapeExtension(ident, auth, sub_id, iterations)
            #Some other Netscape sub-block - keep it as opaque data
            logger.debug("Netscape sub-block of size %d kept as data", size)
            check_block(strict, "Netscape extension size", size, NETSCAPE_SIZE)
            data = stream.read(size) + block_split(stream) if size else b""
            return cls(ident, auth, data)

        return cls(ident, auth, block_split(stream))

    #------------------------------------------------
    # Properties
    #------------------------------------------------
    @property
    def application(self):
        '''Get the application owning this extension'''
        return self._ident

    identifier = application

    @property
    def auth_code(self):
        '''Get the authentication code'''
        return self._auth

    @property
    def data(self):
        '''Get the application data'''
        return self._data

class NetscapeExtension(ApplicationExtension):
    ''' The NETSCAPE2.0 looping extension '''

    __slots__ = [
        "_sub_id",
        "_iterations",
    ]

    def __init__(self, ident=NETSCAPE_IDENT, auth="2.0", sub_id=1, iterations=0):
        super().__init__(ident, auth, bytes([sub_id, iterations & 0xFF, iterations >> 8]))
        self._sub_id = sub_id
        self._iterations = iterations

    @property
    def sub_id(self):
        return self._sub_id

    @property
    def iterations(self):
        '''Get the loop count, 0 meaning forever'''
        return self._iterations

    @property
    def loops_forever(self):
        return self._iterations == 0

#================================================================
# GIF components : any other extension
#================================================================
class UnknownExtension(ExtensionBlock):
    ''' Extension with a label this library does not know '''

    __slots__ = [
        "_label",
        "_data",
    ]

    def __init__(self, label, data=b""):
        self._label = label
        self._data = data

    @classmethod
    def decode(cls, stream, label, strict=False):
        return cls(label, block_split(stream))

    @property
    def label(self):
        return self._label

    @property
    def data(self):
        return self._data

#================================================================
# Extension dispatch
#================================================================
EXTENSIONS = {
    GRAPHIC_HEADER: GraphicExtension,
    COMMENT_HEADER: CommentExtension,
    TEXT_HEADER: PlainTextExtension,
    APPLICATION_HEADER: ApplicationExtension,
}

def decode_extension(stream, strict=False):
    ''' Read an extension label and the extension it introduces.
        Should happen after block header 0x21 is found
    '''
    label = stream.read_byte()
    block_cls = EXTENSIONS.get(label)
    if block_cls is None:
        logger.warning("Unknown extension label 0x%02x at offset %d", label, stream.tell() - 1)
        return UnknownExtension.decode(stream, label, strict)
    logger.debug("Extension 0x%02x (%s)", label, block_cls.__name__)
    return block_cls.decode(stream, strict)
