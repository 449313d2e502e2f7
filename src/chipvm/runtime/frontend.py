''' Render and input collaborators: the host side of the machine '''

import os
import sys
import logging as lg
from typing import Dict, Iterable, Protocol, TextIO

from chipvm.common.hwconf import DISPLAY_WIDTH, DISPLAY_HEIGHT
from chipvm.runtime.display import Snapshot
from chipvm.runtime.keypad import Keypad, KeyMapper


KeyEvent = tuple[str, bool]     # (host key name, pressed)

BACKGROUND = (0, 0, 0)
FOREGROUND = (255, 255, 255)


class Frontend(Protocol):
    def attach(self, keypad: Keypad): ...

    def poll(self) -> bool: ...

    def render(self, snapshot: Snapshot): ...

    def sound(self, active: bool): ...

    def close(self): ...


class HeadlessFrontend:
    ''' No window. Key events are scripted per frame, frames can be
        dumped as text to a stream. '''
    frames: int
    last: Snapshot | None

    def __init__(
        self,
        script: Dict[int, Iterable[KeyEvent]] | None = None,
        keymap: Dict[str, int] | None = None,
        stream: TextIO | None = None
    ):
        self.script = dict() if script is None else script
        self.keymap = keymap
        self.stream = stream
        self.mapper: KeyMapper | None = None
        self.polls = 0
        self.frames = 0
        self.last = None
        self.sound_active = False

    def attach(self, keypad: Keypad):
        self.mapper = KeyMapper(keypad, self.keymap)

    def poll(self) -> bool:
        events = self.script.get(self.polls, ())
        self.polls += 1
        quitting = False

        for name, pressed in events:
            if self.mapper is not None and self.mapper.handle(name, pressed):
                quitting = True

        return quitting

    def render(self, snapshot: Snapshot):
        self.frames += 1
        self.last = snapshot

        if self.stream is not None:
            border = '=' * DISPLAY_WIDTH
            rows = [''.join('█' if p else ' ' for p in row) for row in snapshot]
            self.stream.write('\n'.join([border] + rows + [border]) + '\n')
            self.stream.flush()

    def sound(self, active: bool):
        self.sound_active = active

    def close(self):
        pass


class PygameFrontend:
    ''' Window of scale x scale blocks per pixel, keyboard as keypad '''

    def __init__(self, scale: int, keymap: Dict[str, int] | None = None, title: str = 'CHIPVM'):
        os.environ.setdefault('PYGAME_HIDE_SUPPORT_PROMPT', 'hide')
        import pygame

        self.pygame = pygame
        self.scale = scale
        self.keymap = keymap
        self.mapper: KeyMapper | None = None
        self.beeping = False

        pygame.init()
        pygame.display.set_caption(title)
        self.surface = pygame.display.set_mode((DISPLAY_WIDTH * scale, DISPLAY_HEIGHT * scale))
        self.surface.fill(BACKGROUND)
        pygame.display.flip()
        lg.info(f'Window {DISPLAY_WIDTH * scale}x{DISPLAY_HEIGHT * scale} created')

    def attach(self, keypad: Keypad):
        self.mapper = KeyMapper(keypad, self.keymap)

    def poll(self) -> bool:
        pygame = self.pygame
        quitting = False

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quitting = True
            elif event.type in (pygame.KEYDOWN, pygame.KEYUP) and self.mapper is not None:
                name = pygame.key.name(event.key)

                if self.mapper.handle(name, event.type == pygame.KEYDOWN):
                    quitting = True

        return quitting

    def render(self, snapshot: Snapshot):
        pygame = self.pygame
        scale = self.scale
        self.surface.fill(BACKGROUND)

        for y, row in enumerate(snapshot):
            for x, lit in enumerate(row):
                if lit:
                    pygame.draw.rect(self.surface, FOREGROUND, (x * scale, y * scale, scale, scale))

        pygame.display.flip()

    def sound(self, active: bool):
        # Tone generation is left to the host; only the edge is surfaced
        if active != self.beeping:
            lg.debug(f'Sound {"on" if active else "off"}')
            self.beeping = active

    def close(self):
        self.pygame.quit()


def create_frontend(headless: bool, scale: int, keymap: Dict[str, int] | None = None) -> Frontend:
    if headless:
        return HeadlessFrontend(keymap=keymap, stream=sys.stdout)

    return PygameFrontend(scale, keymap)
