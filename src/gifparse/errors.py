''' Exceptions raised while decoding a GIF stream.
    Every error aborts the whole parse; nothing is resynchronized.
'''

#================================================================
# Error classes
#================================================================
class GifFormatError(RuntimeError):
    '''Raised when invalid format is encountered'''
    pass

class UnexpectedEndOfStream(GifFormatError):
    '''Raised when a read runs past the end of the buffer'''
    pass

class InvalidSignature(GifFormatError):
    '''Raised when the stream does not start with "GIF"'''
    pass

class UnknownBlockSentinel(GifFormatError):
    '''Raised when a top-level block starts with an unknown byte'''
    pass

class InvalidLZWCode(GifFormatError):
    '''Raised when the LZW data refers past the end of the code table'''
    pass

class BadBlockError(GifFormatError):
    '''Raised in strict mode for bad fixed block sizes or terminators'''
    pass

class MissingColorTable(GifFormatError):
    '''Raised when colors are requested for an image with no color table'''
    pass
