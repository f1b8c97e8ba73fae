''' Frames: a decoded image together with the color table and graphic
    control settings that apply to it. No blending with earlier frames
    happens here.
'''

from .blocks import GraphicExtension
from .errors import MissingColorTable

#--- Constants ---
OPAQUE_BLACK = b"\0\0\0\xff"
TRANSPARENT = b"\0\0\0\0"
INDEXED = "P"
RGBA = "RGBA"

#Settings used for an image with no graphic control extension
DEFAULT_GRAPHIC = GraphicExtension()

#================================================================
# Frame record
#================================================================
class Frame(object):
    '''One image of the stream, ready for a renderer'''

    __slots__ = [
        "_index",
        "_pixels",
        "_mode",
        "_x",
        "_y",
        "_width",
        "_height",
        "_disposal",
        "_delay",
        "_trans",
        "_color_table",
    ]

    def __init__(self, pixels, mode, image, graphic, color_table, index=0):
        self._index = index
        self._pixels = pixels
        self._mode = mode
        self._x, self._y = image.position
        self._width = image.width
        self._height = image.height
        self._disposal = graphic.disposal
        self._delay = graphic.delay
        self._trans = graphic.trans
        self._color_table = color_table

    def __repr__(self):
        return "<Frame %d %s %dx%d at (%d, %d)>" % (
            self._index, self._mode, self._width, self._height, self._x, self._y,
        )

    #------------------------------------------------
    # Pixel data
    #------------------------------------------------
    @property
    def index(self):
        '''Get the position of this frame in the stream'''
        return self._index

    @property
    def pixels(self):
        '''Get the pixels, one byte per pixel or four in RGBA mode'''
        return self._pixels

    @property
    def mode(self):
        '''Get the pixel format, "P" for indices or "RGBA"'''
        return self._mode

    @property
    def color_table(self):
        '''Get the color table the indices refer to'''
        return self._color_table

    #------------------------------------------------
    # Placement
    #------------------------------------------------
    @property
    def position(self):
        return self._x, self._y

    @property
    def left(self):
        return self._x

    @property
    def top(self):
        return self._y

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    #------------------------------------------------
    # Graphic control
    #------------------------------------------------
    @property
    def disposal(self):
        return self._disposal

    @property
    def delay(self):
        '''Get the delay time in hundredths of a second'''
        return self._delay

    @property
    def duration(self):
        '''Get the delay time in milliseconds'''
        return self._delay * 10

    @property
    def trans(self):
        '''Get the transparent index, or None'''
        return self._trans

#================================================================
# Compositing
#================================================================
def to_rgba(pixels, color_table, trans=None):
    '''Look every index up in the color table, giving RGBA bytes'''
    palette = [bytes((r, g, b, 0xFF)) for r, g, b in color_table[:256]]
    palette.extend([OPAQUE_BLACK] * (256 - len(palette)))
    if trans is not None:
        palette[trans] = TRANSPARENT
    return b"".join([palette[i] for i in pixels])

def compose_frame(image, gct, graphic=None, resolve_colors=False, index=0):
    ''' Build the frame for a decoded image.
        The local color table wins over the global one, and a missing
        graphic control extension means no transparency, no delay and no
        disposal.
    '''
    if graphic is None:
        graphic = DEFAULT_GRAPHIC
    color_table = image.lct or gct

    if not resolve_colors:
        return Frame(image.pixels, INDEXED, image, graphic, color_table, index)

    if not color_table:
        raise MissingColorTable(
            "Image %d at (%d, %d) has no local or global color table" % (
                index, image.left, image.top,
            )
        )
    pixels = to_rgba(image.pixels, color_table, graphic.trans)
    return Frame(pixels, RGBA, image, graphic, color_table, index)
