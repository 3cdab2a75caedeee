"""
Plain value objects for everything the host configures: the instruction
clock, the quirk toggles, and the window/colour options of the pygame
front end. Parsing command-line arguments into these lives in chip8.main.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple

from chip8.addresses import DEFAULT_CLOCK_HZ, STACK_DEPTH
from chip8.exception import ConfigurationError

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


@dataclass(frozen=True)
class Quirks:
    """
    Behaviours that differ between the original COSMAC VIP interpreter and
    later ones. The defaults are the original hardware's.

    shift_in_place: 8xy6/8xyE shift Vx itself instead of copying Vy first.
    increment_index: Fx55/Fx65 leave I pointing past the last register.
    wrap_sprites: sprite pixels past the screen edge wrap instead of clip.
    reset_vf_on_logic: 8xy1/8xy2/8xy3 clear VF.
    """
    shift_in_place: bool = False
    increment_index: bool = True
    wrap_sprites: bool = False
    reset_vf_on_logic: bool = False


@dataclass
class Configuration:
    rom_path: Optional[str] = None
    clock_hz: int = DEFAULT_CLOCK_HZ
    quirks: Quirks = field(default_factory=Quirks)
    stack_depth: int = STACK_DEPTH
    draw_sync: bool = True
    vsync: bool = True
    fullscreen: bool = False
    scale: int = 10
    window_size: Optional[Tuple[int, int]] = None
    background: Tuple[int, int, int] = BLACK
    foreground: Tuple[int, int, int] = WHITE

    def __post_init__(self):
        if self.clock_hz <= 0:
            raise ConfigurationError("Clock speed must be a positive number of Hz, got {}".format(self.clock_hz))
        if self.stack_depth <= 0:
            raise ConfigurationError("Stack depth must be positive, got {}".format(self.stack_depth))
        if self.scale <= 0:
            raise ConfigurationError("Scale factor must be positive, got {}".format(self.scale))

    @property
    def window_dimensions(self):
        """
        Returns the window size in pixels: an explicit size wins over the
        scale factor.
        """
        if self.window_size is not None:
            return self.window_size
        return 64 * self.scale, 32 * self.scale


def parse_color(values):
    """
    Turn a colour given on the command line into an (r, g, b) tuple. Either
    a single packed 0xRRGGBB value or three separate 0-255 components are
    accepted; numbers may be written in decimal or with a 0x prefix.

    :param values: a list of one or three strings
    :return: the colour as an (r, g, b) tuple
    """
    try:
        numbers = [int(value, 0) for value in values]
    except ValueError:
        raise ConfigurationError("Colour is not a number: {}".format(' '.join(values)))

    if len(numbers) == 1:
        rgb = numbers[0]
        if not 0 <= rgb <= 0xFFFFFF:
            raise ConfigurationError("Invalid rgb value: {:X}".format(rgb))
        return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF

    if len(numbers) == 3:
        for name, hue in zip(('red', 'green', 'blue'), numbers):
            if not 0 <= hue <= 0xFF:
                raise ConfigurationError("Invalid {} value: {}".format(name, hue))
        return tuple(numbers)

    raise ConfigurationError("A colour is one packed rgb value or three components, got {}".format(len(numbers)))
