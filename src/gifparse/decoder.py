''' Top-level GIF decoding.
    parse_gif() walks the block stream once, front to back, and reports
    every construct it reads to a DecodeHandler. Gif is a handler that
    simply keeps everything.
'''

import enum
import logging

from .blocks import (
    BLOCK_HEADER,
    IMAGE_HEADER,
    GIF_FOOTER,
    Header,
    ImageBlock,
    GraphicExtension,
    CommentExtension,
    PlainTextExtension,
    ApplicationExtension,
    NetscapeExtension,
    UnknownExtension,
    decode_extension,
)
from .errors import BadBlockError, UnknownBlockSentinel
from .frames import compose_frame
from .stream import ByteStream

logger = logging.getLogger(__name__)

class State(enum.Enum):
    AWAITING_BLOCK = 1
    EXTENSION = 2
    IMAGE = 3
    DONE = 4

#Block introducer -> state that reads the block
SENTINELS = {
    BLOCK_HEADER: State.EXTENSION,
    IMAGE_HEADER: State.IMAGE,
    GIF_FOOTER: State.DONE,
}

#================================================================
# Configuration
#================================================================
class DecodeOptions(object):
    ''' Decoder settings.
        strict: fail on wrong fixed block sizes, non-zero terminators and
            back to back graphic control extensions instead of reading on.
        resolve_colors: give frames RGBA pixels instead of color indices.
    '''

    __slots__ = [
        "strict",
        "resolve_colors",
    ]

    def __init__(self, *, strict=False, resolve_colors=False):
        self.strict = strict
        self.resolve_colors = resolve_colors

    def __repr__(self):
        return "DecodeOptions(strict=%r, resolve_colors=%r)" % (
            self.strict, self.resolve_colors,
        )

#================================================================
# Event sink
#================================================================
class DecodeHandler(object):
    ''' Receives decode events in stream order.
        Override only the events of interest; the rest do nothing.
    '''

    __slots__ = []

    def on_header(self, header):
        pass

    def on_graphic_control(self, block):
        pass

    def on_comment(self, block):
        pass

    def on_plain_text(self, block):
        pass

    def on_application(self, block):
        '''Netscape looping blocks arrive here as NetscapeExtension'''
        pass

    def on_unknown_extension(self, block):
        pass

    def on_image(self, block):
        pass

    def on_frame(self, frame):
        pass

    def on_end(self):
        pass

#Extension class -> handler method
EXTENSION_EVENTS = {
    GraphicExtension: "on_graphic_control",
    CommentExtension: "on_comment",
    PlainTextExtension: "on_plain_text",
    ApplicationExtension: "on_application",
    NetscapeExtension: "on_application",
    UnknownExtension: "on_unknown_extension",
}

#================================================================
# Session state
#================================================================
class DecodeContext(object):
    ''' State of one decode session, threaded through the block loop '''

    __slots__ = [
        "options",
        "header",
        "last_gce",
        "frame_count",
    ]

    def __init__(self, options):
        self.options = options
        self.header = None
        self.last_gce = None
        self.frame_count = 0

    @property
    def gct(self):
        '''Get the global color table, empty when absent'''
        if self.header is None:
            return []
        return self.header.gct

#================================================================
# Block loop
#================================================================
def parse_gif(data, handler=None, options=None):
    ''' Decode a complete GIF held in memory, reporting to handler.
        Returns the DecodeContext of the finished session.
    '''
    if handler is None:
        handler = DecodeHandler()
    if options is None:
        options = DecodeOptions()
    stream = ByteStream(data)
    context = DecodeContext(options)

    context.header = Header.decode(stream)
    logger.debug(
        "GIF%s %dx%d, %d GCT colors",
        context.header.version,
        context.header.width,
        context.header.height,
        len(context.header.gct),
    )
    handler.on_header(context.header)

    state = State.AWAITING_BLOCK
    while state is not State.DONE:
        if state is State.AWAITING_BLOCK:
            sentinel = stream.read_byte()
            state = SENTINELS.get(sentinel)
            if state is None:
                raise UnknownBlockSentinel(
                    "Invalid block header: 0x%02x at offset %d" % (
                        sentinel,
                        stream.tell() - 1,
                    )
                )

        elif state is State.EXTENSION:
            block = decode_extension(stream, options.strict)
            if isinstance(block, GraphicExtension):
                if context.last_gce is not None:
                    if options.strict:
                        raise BadBlockError("Two consecutive graphic extension blocks")
                    logger.warning("Graphic extension replaced before any image used it")
                context.last_gce = block
            elif isinstance(block, PlainTextExtension):
                #Plain text is a graphic rendering block and uses up the extension
                context.last_gce = None
            getattr(handler, EXTENSION_EVENTS[type(block)])(block)
            state = State.AWAITING_BLOCK

        elif state is State.IMAGE:
            image = ImageBlock.decode(stream)
            handler.on_image(image)
            frame = compose_frame(
                image,
                context.gct,
                context.last_gce,
                options.resolve_colors,
                context.frame_count,
            )
            #A graphic extension only governs the image right after it
            context.last_gce = None
            context.frame_count += 1
            handler.on_frame(frame)
            state = State.AWAITING_BLOCK

    if stream.remaining:
        logger.debug("Ignoring %d bytes after the trailer", stream.remaining)
    handler.on_end()
    return context

#================================================================
# GIF Loading
#================================================================
class Gif(DecodeHandler):
    '''Decodes a whole GIF and keeps every block and frame'''

    __slots__ = [
        "_header",
        "_blocks",
        "_frames",
    ]

    #------------------------------------------------
    # Construction
    #------------------------------------------------
    def __init__(self, data, options=None):
        '''Decode the GIF bytes'''
        self._header = None
        self._blocks = []
        self._frames = []
        parse_gif(data, self, options)

    #------------------------------------------------
    # Events
    #------------------------------------------------
    def on_header(self, header):
        self._header = header

    def _keep(self, block):
        self._blocks.append(block)

    on_graphic_control = _keep
    on_comment = _keep
    on_plain_text = _keep
    on_application = _keep
    on_unknown_extension = _keep
    on_image = _keep

    def on_frame(self, frame):
        self._frames.append(frame)

    #------------------------------------------------
    # Accessors
    #------------------------------------------------
    @property
    def header(self):
        return self._header

    @property
    def version(self):
        return self._header.version

    @property
    def width(self):
        '''Get the GIF width'''
        return self._header.width

    @property
    def height(self):
        '''Get the GIF height'''
        return self._header.height

    @property
    def gct(self):
        '''Get the GCT'''
        return self._header.gct

    @property
    def background(self):
        '''Get the background color'''
        return self._header.background

    @property
    def blocks(self):
        '''Get the extension and image blocks in stream order'''
        return self._blocks

    def blocks_filter(self, block_cls):
        '''Get all blocks of the given class'''
        return [b for b in self._blocks if isinstance(b, block_cls)]

    @property
    def images(self):
        return self.blocks_filter(ImageBlock)

    @property
    def frames(self):
        return self._frames

    @property
    def comments(self):
        '''Get the text of every comment extension'''
        return [b.text for b in self.blocks_filter(CommentExtension)]

    @property
    def loop_count(self):
        '''Get the Netscape loop count (0 = forever), or None if absent'''
        for block in self.blocks_filter(NetscapeExtension):
            return block.iterations
        return None

    def __len__(self):
        return len(self._frames)

    def __iter__(self):
        return iter(self._frames)

def decode_frames(data, resolve_colors=False, strict=False):
    '''Decode a GIF and return only its frames'''
    options = DecodeOptions(strict=strict, resolve_colors=resolve_colors)
    return Gif(data, options).frames
