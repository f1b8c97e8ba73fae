''' Row reordering for interlaced GIF images.
    Interlaced images store every 8th row starting at 0, then every 8th
    row starting at 4, every 4th starting at 2 and finally every 2nd
    starting at 1.
'''

#(first row, row step) for each of the four passes
INTERLACE_PASSES = (
    (0, 8),
    (4, 8),
    (2, 4),
    (1, 2),
)

def interlaced_rows(height):
    '''Yield destination rows in the order an interlaced image stores them'''
    for start, step in INTERLACE_PASSES:
        for row in range(start, height, step):
            yield row

def deinterlace(pixels, width):
    '''Put the rows of an interlaced index buffer back in top-down order'''
    if width <= 0:
        return bytes(pixels)
    height = len(pixels) // width
    out = bytearray(len(pixels))
    for from_row, to_row in enumerate(interlaced_rows(height)):
        src = from_row * width
        dst = to_row * width
        out[dst:dst + width] = pixels[src:src + width]
    #Partial trailing row is not part of any pass
    tail = height * width
    out[tail:] = pixels[tail:]
    return bytes(out)
