from pygame import display, Color, draw, FULLSCREEN, SCALED, error as pygame_error

from chip8.addresses import SCREEN_HEIGHT, SCREEN_WIDTH

SCREEN_NAME = 'CHIP8 Emulator'


class Screen(object):
    """
    Presents a DisplayBuffer in a pygame window. The original Chip 8 screen
    was 64 x 32 with 2 colors; here pixel state False is drawn in the
    background color and True in the foreground color. The window only
    ever reads snapshots of the buffer, never the buffer itself.
    """
    def __init__(self, window_size, background=(0, 0, 0), foreground=(255, 255, 255),
                 fullscreen=False, vsync=True):
        """
        :param window_size: the (width, height) of the window in pixels
        :param background: the (r, g, b) color of pixels that are off
        :param foreground: the (r, g, b) color of pixels that are on
        :param fullscreen: start in fullscreen mode
        :param vsync: ask the display driver to wait for vertical retrace
        """
        self.window_size = window_size
        self.pixel_colors = {
            False: Color(*background),
            True: Color(*foreground),
        }
        self.fullscreen = fullscreen
        self.vsync = vsync
        self.screen_surface = None

    @property
    def pixel_size(self):
        """
        The largest whole number of window pixels per Chip 8 pixel.
        """
        width, height = self.screen_surface.get_size()
        return max(1, min(width // SCREEN_WIDTH, height // SCREEN_HEIGHT))

    def init_display(self):
        """
        Attempts to open a window of the configured size. Vsync is only
        honoured by some drivers; when the request is refused the window
        is opened without it.
        """
        display.init()
        flags = FULLSCREEN if self.fullscreen else 0
        try:
            self.screen_surface = display.set_mode(self.window_size, flags | SCALED, vsync=1 if self.vsync else 0)
        except pygame_error:
            self.screen_surface = display.set_mode(self.window_size, flags)
        display.set_caption(SCREEN_NAME)
        self.screen_surface.fill(self.pixel_colors[False])
        display.flip()

    def toggle_fullscreen(self):
        display.toggle_fullscreen()
        self.fullscreen = not self.fullscreen

    def render(self, pixels):
        """
        Draw a full frame and flip it onto the display. The frame is
        centered in the window at an integer scale.

        :param pixels: rows of booleans, as returned by DisplayBuffer.snapshot
        """
        size = self.pixel_size
        width, height = self.screen_surface.get_size()
        x_offset = (width - SCREEN_WIDTH * size) // 2
        y_offset = (height - SCREEN_HEIGHT * size) // 2

        self.screen_surface.fill(self.pixel_colors[False])
        for y_axis_position, row in enumerate(pixels):
            for x_axis_position, pixel in enumerate(row):
                if pixel:
                    draw.rect(self.screen_surface,
                              self.pixel_colors[True],
                              (x_offset + x_axis_position * size, y_offset + y_axis_position * size, size, size))
        display.flip()

    @staticmethod
    def close():
        display.quit()
