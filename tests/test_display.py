from chipvm.runtime.display import Display


def test_blit_sets_pixels():
    display = Display()

    collided = display.blit(2, 3, [0b10100000])

    assert not collided
    assert display.pixel(2, 3)
    assert not display.pixel(3, 3)
    assert display.pixel(4, 3)
    assert display.lit_count() == 2


def test_double_blit_restores_framebuffer():
    display = Display()
    display.blit(10, 10, [0xFF, 0x81, 0xFF])
    before = bytes(display.gfx)
    sprite = [0x3C, 0x42, 0x81, 0x42, 0x3C]

    first = display.blit(8, 9, sprite)
    second = display.blit(8, 9, sprite)

    assert first
    assert second
    assert bytes(display.gfx) == before


def test_second_blit_collides_on_blank_screen():
    display = Display()

    assert not display.blit(0, 0, [0x01])
    assert display.blit(0, 0, [0x01])
    assert display.lit_count() == 0


def test_blit_wraps_horizontally():
    display = Display()

    display.blit(63, 0, [0xFF])

    assert display.pixel(63, 0)
    assert all(display.pixel(x, 0) for x in range(7))
    assert not display.pixel(7, 0)
    assert display.lit_count() == 8


def test_blit_wraps_vertically():
    display = Display()

    display.blit(0, 31, [0x80, 0x80])

    assert display.pixel(0, 31)
    assert display.pixel(0, 0)


def test_coordinates_beyond_screen_wrap():
    display = Display()

    display.blit(64 + 5, 32 + 2, [0x80])

    assert display.pixel(5, 2)


def test_clear():
    display = Display()
    display.blit(0, 0, [0xFF] * 15)

    display.clear()

    assert display.lit_count() == 0


def test_snapshot_and_text():
    display = Display()
    display.blit(0, 0, [0xC0])

    snapshot = display.snapshot()

    assert len(snapshot) == 32
    assert all(len(row) == 64 for row in snapshot)
    assert snapshot[0][:3] == (True, True, False)

    text = display.to_text(on='#', off='.').splitlines()
    assert text[0] == '##' + '.' * 62
    assert text[1] == '.' * 64
