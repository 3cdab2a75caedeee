import threading

import pygame

from chip8.addresses import NUM_KEYS

# Sets which keys on the keyboard map to the Chip 8 keys. The left hand side
# of a QWERTY keyboard is laid out like the original hex keypad:
#
#    1 2 3 4        1 2 3 C
#    Q W E R   ->   4 5 6 D
#    A S D F        7 8 9 E
#    Z X C V        A 0 B F
KEY_MAPPINGS = {
    pygame.K_x: 0x0,
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_z: 0xA,
    pygame.K_c: 0xB,
    pygame.K_4: 0xC,
    pygame.K_r: 0xD,
    pygame.K_f: 0xE,
    pygame.K_v: 0xF,
}


class Keypad(object):
    """
    The 16 key hex keypad. The input layer calls set_key from its own
    thread; the CPU polls is_pressed, and the key-wait instruction consumes
    press transitions through start_wait and take_press. Transitions are
    only recorded while a wait is pending.
    """
    def __init__(self):
        self._pressed = [False] * NUM_KEYS
        self._new_presses = []
        self._waiting = False
        self._lock = threading.Lock()

    def set_key(self, key_index, pressed):
        """
        Record a key going down or up. Only a change from released to
        pressed counts as a press transition.

        :param key_index: the hex keypad code, 0x0 - 0xF
        :param pressed: True if the key is now held down
        """
        if not 0 <= key_index < NUM_KEYS:
            raise ValueError("No such key: {}".format(key_index))
        with self._lock:
            if self._waiting and pressed and not self._pressed[key_index]:
                self._new_presses.append(key_index)
            self._pressed[key_index] = bool(pressed)

    def is_pressed(self, key_index):
        with self._lock:
            return self._pressed[key_index & 0xF]

    def start_wait(self):
        """
        Begin collecting press transitions. Presses made before this call
        are never reported.
        """
        with self._lock:
            del self._new_presses[:]
            self._waiting = True

    def take_press(self):
        """
        Returns the first key pressed since start_wait, or None if there
        was none yet. Returning a key ends the wait.
        """
        with self._lock:
            if not self._new_presses:
                return None
            key_index = self._new_presses[0]
            del self._new_presses[:]
            self._waiting = False
            return key_index

    def forget_presses(self):
        with self._lock:
            del self._new_presses[:]
            self._waiting = False

    def release_all(self):
        with self._lock:
            self._pressed = [False] * NUM_KEYS
            del self._new_presses[:]
