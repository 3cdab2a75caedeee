import array
import logging

from pygame import mixer, error as pygame_error

logger = logging.getLogger(__name__)

SAMPLE_RATE = 48000
TONE_HZ = 261.63
VOLUME = 1024


def square_wave(sample_rate=SAMPLE_RATE, frequency=TONE_HZ, volume=VOLUME):
    """
    Returns one period of a softened square wave as signed 16-bit mono
    samples. Each sample is blended with the previous one to take the edge
    off the tone.
    """
    half_period = int(sample_rate / (frequency * 2))
    samples = array.array('h')
    previous = 0
    for phase in range(half_period * 2):
        square = volume if phase < half_period else -volume
        previous = int(previous * 0.6) + square
        samples.append(previous)
    return samples


class Buzzer(object):
    """
    The Chip 8 has a single tone that plays while the sound timer is above
    zero. update() is called with that flag once per frame.
    """
    def __init__(self):
        self.sound = None
        self.playing = False

    def init_audio(self):
        """
        Open the audio device. Running without sound is allowed, so a
        missing device is logged rather than raised.
        """
        try:
            mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
        except pygame_error as error:
            logger.warning("No audio device, running without sound: %s", error)
            return
        self.sound = mixer.Sound(buffer=square_wave().tobytes())

    def update(self, active):
        if self.sound is None or active == self.playing:
            return
        if active:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = active

    def close(self):
        self.update(False)
        if self.sound is not None:
            mixer.quit()
            self.sound = None
