import logging

import pytest

from gifparse import (
    ApplicationExtension,
    BadBlockError,
    ByteStream,
    CommentExtension,
    DisposalMethod,
    GraphicExtension,
    Header,
    ImageBlock,
    InvalidSignature,
    NetscapeExtension,
    PlainTextExtension,
    UnknownExtension,
)
from gifparse.blocks import decode_extension

import gifbuild


def extension_stream(raw):
    '''Stream positioned after the 0x21 introducer'''
    assert raw[0] == 0x21
    return ByteStream(raw[1:])


#------------------------------------------------
# Header
#------------------------------------------------
def test_header_fields():
    raw = gifbuild.header(300, 200, gifbuild.RGBW, bgcolor=2, aspect=49, res=4)
    header = Header.decode(ByteStream(raw))
    assert header.signature == "GIF"
    assert header.version == "89a"
    assert (header.width, header.height) == (300, 200)
    assert header.gct_flag
    assert header.gct_size == 4
    assert header.gct == gifbuild.RGBW
    assert header.color_resolution == 5
    assert not header.sorted
    assert header.background_index == 2
    assert header.background == (0, 0, 255)
    assert header.aspect_byte == 49
    assert header.aspect_ratio == 1.0


def test_header_without_gct():
    header = Header.decode(ByteStream(gifbuild.header(1, 1)))
    assert not header.gct_flag
    assert header.gct == []
    assert header.background is None
    assert header.aspect_ratio is None


def test_header_bad_signature():
    with pytest.raises(InvalidSignature):
        Header.decode(ByteStream(b"GIT89a" + bytes(7)))


def test_header_unknown_version_is_decoded(caplog):
    raw = gifbuild.header(2, 3, version=b"90z")
    with caplog.at_level(logging.WARNING, logger="gifparse"):
        header = Header.decode(ByteStream(raw))
    assert header.version == "90z"
    assert "Unknown GIF version" in caplog.text


#------------------------------------------------
# Extensions
#------------------------------------------------
def test_graphic_control():
    raw = gifbuild.graphic_control(delay=25, trans=3, disposal=2, user_input=True)
    block = decode_extension(extension_stream(raw))
    assert isinstance(block, GraphicExtension)
    assert block.delay == 25
    assert block.trans == 3
    assert block.transparency_given
    assert block.disposal is DisposalMethod.RESTORE_BACKGROUND
    assert block.user_input


def test_graphic_control_without_transparency():
    raw = gifbuild.graphic_control(delay=0, disposal=1)
    block = decode_extension(extension_stream(raw))
    assert block.trans is None
    assert block.transparent_index == 0
    assert block.disposal == DisposalMethod.DO_NOT_DISPOSE
    assert not block.user_input


def test_graphic_control_undefined_disposal_is_kept():
    block = decode_extension(extension_stream(gifbuild.graphic_control(disposal=6)))
    assert block.disposal == 6
    assert not isinstance(block.disposal, DisposalMethod)


def test_graphic_control_defaults():
    block = GraphicExtension()
    assert block.trans is None
    assert block.delay == 0
    assert block.disposal is DisposalMethod.NONE


def test_graphic_control_bad_footer():
    raw = gifbuild.graphic_control(footer=7)
    assert decode_extension(extension_stream(raw)).delay == 0
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_graphic_control_bad_size():
    raw = gifbuild.graphic_control(size=5)
    decode_extension(extension_stream(raw))
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_comment():
    text = b"made by hand " * 30
    stream = extension_stream(gifbuild.comment(text) + b";")
    block = decode_extension(stream)
    assert isinstance(block, CommentExtension)
    assert block.comment == text
    assert block.text == text.decode("ascii")
    assert stream.read(1) == b";"


def test_plain_text():
    raw = gifbuild.plain_text(grid=(5, 6, 80, 16), cell=(8, 16), fg=3, bg=1, text=b"Hi there")
    block = decode_extension(extension_stream(raw))
    assert isinstance(block, PlainTextExtension)
    assert len(block.header) == 12
    assert block.position == (5, 6)
    assert block.grid == (80, 16)
    assert block.cell == (8, 16)
    assert (block.foreground, block.background) == (3, 1)
    assert block.text == "Hi there"


def test_plain_text_bad_size():
    raw = gifbuild.plain_text(text=b"odd", size=11)
    assert decode_extension(extension_stream(raw)).text == "odd"
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_application_payload():
    raw = gifbuild.application(ident=b"XMP Data", auth=b"XMP", data=b"<x/>" * 100)
    block = decode_extension(extension_stream(raw))
    assert type(block) is ApplicationExtension
    assert block.application == "XMP Data"
    assert block.identifier == "XMP Data"
    assert block.auth_code == "XMP"
    assert block.data == b"<x/>" * 100


def test_application_bad_size():
    raw = gifbuild.application(data=b"payload", size=10)
    assert decode_extension(extension_stream(raw)).data == b"payload"
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_netscape_loop():
    stream = extension_stream(gifbuild.netscape(loops=5) + b",")
    block = decode_extension(stream)
    assert isinstance(block, NetscapeExtension)
    assert block.application == "NETSCAPE"
    assert block.auth_code == "2.0"
    assert block.sub_id == 1
    assert block.iterations == 5
    assert not block.loops_forever
    assert stream.read(1) == b","


def test_netscape_loop_forever():
    block = decode_extension(extension_stream(gifbuild.netscape(loops=0)))
    assert block.loops_forever


def test_netscape_bad_footer():
    raw = gifbuild.netscape(loops=3, footer=1)
    assert decode_extension(extension_stream(raw)).iterations == 3
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_netscape_other_sub_block():
    #Buffering sub-block: id 2 and a 4 byte buffer size
    raw = gifbuild.application(ident=b"NETSCAPE", auth=b"2.0", data=b"\x02\x00\x10\x00\x00")
    stream = extension_stream(raw + b";")
    block = decode_extension(stream)
    assert type(block) is ApplicationExtension
    assert block.data == b"\x02\x00\x10\x00\x00"
    assert stream.read(1) == b";"
    with pytest.raises(BadBlockError):
        decode_extension(extension_stream(raw), strict=True)


def test_unknown_extension(caplog):
    raw = gifbuild.extension(0x99, b"whatever")
    with caplog.at_level(logging.WARNING, logger="gifparse"):
        block = decode_extension(extension_stream(raw))
    assert isinstance(block, UnknownExtension)
    assert block.label == 0x99
    assert block.data == b"whatever"
    assert "0x99" in caplog.text


#------------------------------------------------
# Images
#------------------------------------------------
def test_image_block():
    pixels = bytes([0, 1, 2, 3] * 6)
    raw = gifbuild.image(pixels, 4, 6, left=3, top=9, lct=gifbuild.RGBW)
    block = ImageBlock.decode(ByteStream(raw[1:]))
    assert block.position == (3, 9)
    assert (block.width, block.height) == (4, 6)
    assert block.lct_flag
    assert block.lct_size == 4
    assert block.lct == gifbuild.RGBW
    assert not block.interlace
    assert block.lzw_min == 2
    assert block.pixels == pixels
    assert block.decompress() == pixels


def test_interlaced_image_block():
    pixels = bytes(range(10 * 11))
    raw = gifbuild.image(pixels, 10, 11, interlaced=True, lzw_min=7)
    block = ImageBlock.decode(ByteStream(raw[1:]))
    assert block.interlace
    assert block.pixels == pixels


def test_short_image_data_is_padded(caplog):
    lzw = gifbuild.lzw_compress(b"\x01\x01\x01", 2)
    raw = gifbuild.image(None, 2, 2, lzw=lzw)
    with caplog.at_level(logging.WARNING, logger="gifparse"):
        block = ImageBlock.decode(ByteStream(raw[1:]))
    assert block.pixels == b"\x01\x01\x01\x00"
    assert "padding" in caplog.text


def test_long_image_data_is_truncated():
    lzw = gifbuild.lzw_compress(b"\x01" * 9, 2)
    block = ImageBlock.decode(ByteStream(gifbuild.image(None, 2, 2, lzw=lzw)[1:]))
    assert block.pixels == b"\x01" * 4
