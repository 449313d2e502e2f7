import logging as lg
from collections import deque
from typing import Dict

from chipvm.common.hwconf import KEYS


# Host key name -> hex key
#   1 2 3 4      1 2 3 C
#   q w e r  ->  4 5 6 D
#   a s d f      7 8 9 E
#   z x c v      A 0 B F
DEFAULT_KEYMAP: Dict[str, int] = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF,
}

QUIT_KEY = 'escape'


class Keypad:
    ''' 16-key state, written by the input side, read by the CPU '''
    keys: list[bool]

    def __init__(self):
        self.keys = [False] * KEYS
        self.releases: deque[int] = deque(maxlen=KEYS)     # Oldest dropped when full

    def set(self, key: int, pressed: bool):
        if not 0 <= key < KEYS:
            raise ValueError(f'No such key {key:X}')

        was_pressed = self.keys[key]
        self.keys[key] = pressed

        if was_pressed and not pressed:
            self.releases.append(key)

    def press(self, key: int):
        self.set(key, True)

    def release(self, key: int):
        self.set(key, False)

    def is_pressed(self, key: int) -> bool:
        return self.keys[key]

    def clear_events(self):
        self.releases.clear()

    def pop_release(self) -> int | None:
        ''' Oldest press-then-release transition, if any '''
        if not self.releases:
            return None

        return self.releases.popleft()


class KeyMapper:
    ''' Translates symbolic host key events into keypad updates '''
    keymap: Dict[str, int]

    def __init__(self, keypad: Keypad, keymap: Dict[str, int] | None = None):
        self.keypad = keypad
        self.keymap = DEFAULT_KEYMAP if keymap is None else keymap

    def handle(self, name: str, pressed: bool) -> bool:
        ''' Returns True if the event requests quitting '''
        name = name.lower()

        if name == QUIT_KEY:
            return pressed

        key = self.keymap.get(name)

        if key is None:
            return False

        lg.debug(f'Key {name} -> {key:X} {"down" if pressed else "up"}')
        self.keypad.set(key, pressed)
        return False
