''' Byte-level GIF decoding library.
    Turns a GIF87a / GIF89a byte string into its header, extension blocks
    and frames of color indices or RGBA pixels. Nothing is drawn or saved.
'''

from .blocks import (
    DisposalMethod,
    Header,
    ImageBlock,
    ExtensionBlock,
    GraphicExtension,
    CommentExtension,
    PlainTextExtension,
    ApplicationExtension,
    NetscapeExtension,
    UnknownExtension,
)
from .decoder import (
    DecodeOptions,
    DecodeHandler,
    DecodeContext,
    Gif,
    parse_gif,
    decode_frames,
)
from .errors import (
    GifFormatError,
    UnexpectedEndOfStream,
    InvalidSignature,
    UnknownBlockSentinel,
    InvalidLZWCode,
    BadBlockError,
    MissingColorTable,
)
from .frames import Frame, compose_frame
from .interlace import deinterlace
from .lzw import LzwDecoder, lzw_decompress
from .stream import ByteStream, BitReader, block_split

__version__ = "0.1.0"
