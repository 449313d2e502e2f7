import pytest

from chipvm.common.settings import Settings, load_settings, parse_keymap


def test_defaults():
    settings = load_settings()

    assert settings.cycles_per_frame == 10
    assert settings.load_font
    assert settings.keymap is None


def test_update_keeps_unset_values():
    settings = Settings().update(scale=4).update(verbose=True)

    assert settings.scale == 4
    assert settings.verbose
    assert settings.cycles_per_frame == 10


def test_update_rejects_bad_cycles():
    with pytest.raises(ValueError):
        Settings().update(cycles_per_frame=0)


def test_load_from_file(tmp_path):
    path = tmp_path / 'chipvm.toml'
    path.write_text('\n'.join([
        '[run]',
        'cycles_per_frame = 15',
        'scale = 8',
        'load_font = false',
        '',
        '[keymap]',
        'Up = "2"',
        'down = 8',
        'fire = "A"',
    ]))

    settings = load_settings(path)

    assert settings.cycles_per_frame == 15
    assert settings.scale == 8
    assert not settings.load_font
    assert settings.keymap == {'up': 0x2, 'down': 0x8, 'fire': 0xA}


def test_keymap_out_of_range():
    with pytest.raises(ValueError):
        parse_keymap({'a': 16})
