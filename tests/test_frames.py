import pytest

from gifparse import (
    ByteStream,
    DisposalMethod,
    GraphicExtension,
    ImageBlock,
    MissingColorTable,
    compose_frame,
)
from gifparse.blocks import decode_extension

import gifbuild


def make_image(pixels, width, height, **kwargs):
    raw = gifbuild.image(pixels, width, height, **kwargs)
    return ImageBlock.decode(ByteStream(raw[1:]))


def make_graphic(**kwargs):
    return decode_extension(ByteStream(gifbuild.graphic_control(**kwargs)[1:]))


def test_defaults_without_graphic_control():
    image = make_image(b"\x00\x01\x01\x00", 2, 2, left=1, top=2)
    frame = compose_frame(image, gifbuild.BW)
    assert frame.mode == "P"
    assert frame.pixels == b"\x00\x01\x01\x00"
    assert len(frame.pixels) == frame.width * frame.height
    assert frame.position == (1, 2)
    assert (frame.left, frame.top) == (1, 2)
    assert frame.disposal is DisposalMethod.NONE
    assert frame.delay == 0
    assert frame.trans is None
    assert frame.color_table == gifbuild.BW


def test_graphic_control_settings():
    image = make_image(b"\x00\x01", 2, 1)
    graphic = make_graphic(delay=7, trans=1, disposal=3)
    frame = compose_frame(image, gifbuild.BW, graphic, index=4)
    assert frame.index == 4
    assert frame.delay == 7
    assert frame.duration == 70
    assert frame.trans == 1
    assert frame.disposal is DisposalMethod.RESTORE_PREVIOUS
    assert "Frame 4" in repr(frame)


def test_local_table_wins():
    image = make_image(b"\x00\x01\x02\x03", 4, 1, lct=gifbuild.RGBW)
    assert compose_frame(image, gifbuild.BW).color_table == gifbuild.RGBW


def test_rgba_with_transparency():
    image = make_image(b"\x00\x01\x02\x03", 2, 2, lct=gifbuild.RGBW)
    graphic = GraphicExtension(trans=True, index=2)
    frame = compose_frame(image, [], graphic, resolve_colors=True)
    assert frame.mode == "RGBA"
    assert frame.pixels == (
        b"\xff\x00\x00\xff"
        b"\x00\xff\x00\xff"
        b"\x00\x00\x00\x00"
        b"\xff\xff\xff\xff"
    )
    assert len(frame.pixels) == 4 * frame.width * frame.height


def test_rgba_index_outside_table():
    image = make_image(b"\x00\x03", 2, 1)
    frame = compose_frame(image, gifbuild.BW, resolve_colors=True)
    assert frame.pixels == b"\x00\x00\x00\xff" + b"\x00\x00\x00\xff"


def test_rgba_without_any_table():
    image = make_image(b"\x00\x01", 2, 1)
    assert compose_frame(image, []).mode == "P"
    with pytest.raises(MissingColorTable):
        compose_frame(image, [], resolve_colors=True)
