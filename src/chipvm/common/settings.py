from pathlib import Path
import logging as lg
from typing import Dict
import tomllib


class Settings:
    ''' Host loop tunables, none of them part of machine semantics '''
    cycles_per_frame: int
    scale: int
    frame_delay_ms: int
    verbose: bool
    load_font: bool
    keymap: Dict[str, int] | None

    def __init__(self):
        self.cycles_per_frame = 10
        self.scale = 10
        self.frame_delay_ms = 10
        self.verbose = False
        self.load_font = True
        self.keymap = None

    def update(
        self,
        cycles_per_frame: int | None = None,
        scale: int | None = None,
        frame_delay_ms: int | None = None,
        verbose: bool | None = None,
        load_font: bool | None = None,
        keymap: Dict[str, int] | None = None
    ):
        if cycles_per_frame is not None:
            if cycles_per_frame < 1:
                raise ValueError(f'cycles_per_frame must be positive, got {cycles_per_frame}')

            self.cycles_per_frame = cycles_per_frame

        if scale is not None:
            if scale < 1:
                raise ValueError(f'scale must be positive, got {scale}')

            self.scale = scale

        if frame_delay_ms is not None:
            self.frame_delay_ms = max(0, frame_delay_ms)

        if verbose is not None:
            self.verbose = verbose

        if load_font is not None:
            self.load_font = load_font

        if keymap is not None:
            self.keymap = keymap

        return self


def parse_keymap(table: Dict[str, int | str]) -> Dict[str, int]:
    keymap: Dict[str, int] = dict()

    for name, value in table.items():
        key = int(value, 16) if isinstance(value, str) else int(value)

        if not 0 <= key <= 0xF:
            raise ValueError(f'Key {name} maps outside the keypad: {value}')

        keymap[name.lower()] = key

    return keymap


def load_settings(path: Path | None = None) -> Settings:
    settings = Settings()

    if path is None:
        return settings

    lg.debug(f'Loading settings from {path}')
    config = tomllib.loads(path.read_text())
    run = config.get('run', dict())

    settings.update(
        cycles_per_frame=run.get('cycles_per_frame'),
        scale=run.get('scale'),
        frame_delay_ms=run.get('frame_delay_ms'),
        verbose=run.get('verbose'),
        load_font=run.get('load_font')
    )

    if 'keymap' in config:
        settings.update(keymap=parse_keymap(config['keymap']))

    return settings
