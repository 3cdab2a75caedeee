import threading

from chip8.addresses import SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_WIDTH


class DisplayBuffer(object):
    """
    The 64 x 32 monochrome frame buffer. Only the CPU writes to it (clear
    and draw); renderers read it through snapshot(), which copies the grid
    under the same lock the writers take, so a frame is never read half
    drawn.
    """
    def __init__(self, width=SCREEN_WIDTH, height=SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self._pixels = [[False] * width for _ in range(height)]
        self._lock = threading.Lock()
        self._dirty = True

    def clear(self):
        """
        Turns off all the pixels.
        """
        with self._lock:
            for row in self._pixels:
                row[:] = [False] * self.width
            self._dirty = True

    def get_pixel(self, x_position, y_position):
        with self._lock:
            return self._pixels[y_position][x_position]

    def draw_sprite(self, x_position, y_position, sprite_rows, wrap=False):
        """
        XOR a sprite onto the buffer. Each byte of sprite_rows is one row
        of 8 pixels, most significant bit leftmost. The starting position
        always wraps onto the screen; pixels running past the right or
        bottom edge are wrapped when wrap is set and dropped otherwise.

        :param x_position: the column of the sprite's top left pixel
        :param y_position: the row of the sprite's top left pixel
        :param sprite_rows: the sprite bytes
        :param wrap: wrap pixels past the edge instead of clipping them
        :return: True if any pixel that was on got turned off
        """
        x_position %= self.width
        y_position %= self.height
        collision = False
        with self._lock:
            for row_index, row_byte in enumerate(sprite_rows):
                y_coord = y_position + row_index
                if y_coord >= self.height:
                    if not wrap:
                        break
                    y_coord %= self.height
                row = self._pixels[y_coord]

                for bit in range(SPRITE_WIDTH):
                    if not (row_byte >> (SPRITE_WIDTH - 1 - bit)) & 0x1:
                        continue
                    x_coord = x_position + bit
                    if x_coord >= self.width:
                        if not wrap:
                            break
                        x_coord %= self.width
                    if row[x_coord]:
                        collision = True
                    row[x_coord] = not row[x_coord]

            self._dirty = True
        return collision

    def snapshot(self):
        """
        Returns an immutable copy of the grid as a tuple of rows.
        """
        with self._lock:
            return tuple(tuple(row) for row in self._pixels)

    def take_dirty(self):
        """
        Returns whether the buffer changed since the last call, and resets
        the flag.
        """
        with self._lock:
            dirty = self._dirty
            self._dirty = False
            return dirty
