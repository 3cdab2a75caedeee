import argparse
import logging
import sys
import threading

import pygame

from chip8.addresses import DEFAULT_CLOCK_HZ, STACK_DEPTH
from chip8.audio import Buzzer
from chip8.clock import Scheduler
from chip8.config import Configuration, Quirks, parse_color
from chip8.cpu import CPU
from chip8.exception import Chip8Error, LoadError
from chip8.keypad import KEY_MAPPINGS, Keypad
from chip8.screen import Screen

logger = logging.getLogger(__name__)

# How often the window polls for input and presents frames
POLL_RATE = 120


def load_rom_file(rom_path):
    """
    Read a ROM image from disk.

    :param rom_path: the path of the ROM file
    :return: the raw program bytes
    """
    try:
        with open(rom_path, 'rb') as rom_file:
            return rom_file.read()
    except OSError as error:
        raise LoadError("Cannot read ROM {}: {}".format(rom_path, error.strerror))


def ask_rom_path():
    """
    Ask for a ROM with a file-open dialog. Returns an empty string if the
    dialog is cancelled.
    """
    from tkinter import TclError, Tk, filedialog

    try:
        root = Tk()
    except TclError as error:
        raise LoadError("Missing path to the rom and no dialog available: {}".format(error))
    root.withdraw()
    try:
        return filedialog.askopenfilename(
            title="Open a Chip 8 ROM",
            filetypes=[("Chip 8 ROMs", "*.ch8 *.c8"), ("All files", "*")])
    finally:
        root.destroy()


def resolve_rom_path(rom_path, ask_path=ask_rom_path):
    """
    Returns rom_path, or the path picked with ask_path when none was given
    on the command line.
    """
    if rom_path:
        return rom_path
    rom_path = ask_path()
    if not rom_path:
        raise LoadError("Missing path to the rom!")
    return rom_path


def handle_event(event, keypad, screen, stop_event):
    """
    Apply one pygame event: quitting, fullscreen toggling, or a Chip 8 key
    going up or down.
    """
    if event.type == pygame.QUIT:
        stop_event.set()
    elif event.type == pygame.KEYDOWN:
        if event.key == pygame.K_ESCAPE:
            stop_event.set()
        elif event.key == pygame.K_F11:
            screen.toggle_fullscreen()
        elif event.key in KEY_MAPPINGS:
            keypad.set_key(KEY_MAPPINGS[event.key], True)
    elif event.type == pygame.KEYUP and event.key in KEY_MAPPINGS:
        keypad.set_key(KEY_MAPPINGS[event.key], False)
    elif event.type == pygame.WINDOWFOCUSLOST:
        # Key up events are not delivered to an unfocused window
        keypad.release_all()


def screen_cpu_connector(configuration):
    """
    Runs the emulator with the specified configuration. The CPU runs on its
    own thread under a Scheduler; this thread handles pygame events, draws
    frames when the scheduler signals a redraw, and drives the buzzer.

    :param configuration: the Configuration to run with
    :return: the session-fatal error, or None if the user quit
    """
    program = load_rom_file(configuration.rom_path)
    keypad = Keypad()
    project_cpu = CPU(keypad=keypad, quirks=configuration.quirks, stack_depth=configuration.stack_depth)
    project_cpu.load(program)
    logger.info("Loaded %s (%d bytes), clock %d Hz", configuration.rom_path, len(program), configuration.clock_hz)

    redraw = threading.Event()
    scheduler = Scheduler(project_cpu, configuration.clock_hz, configuration.draw_sync, on_redraw=redraw.set)

    pygame.init()
    project_screen = Screen(configuration.window_dimensions,
                            background=configuration.background,
                            foreground=configuration.foreground,
                            fullscreen=configuration.fullscreen,
                            vsync=configuration.vsync)
    project_screen.init_display()
    buzzer = Buzzer()
    buzzer.init_audio()

    stop_event = threading.Event()
    worker = threading.Thread(target=scheduler.run, args=(stop_event,), name='chip8-cpu', daemon=True)
    worker.start()
    frame_clock = pygame.time.Clock()

    try:
        while worker.is_alive() and not stop_event.is_set():
            for event in pygame.event.get():
                handle_event(event, keypad, project_screen, stop_event)

            if redraw.is_set():
                redraw.clear()
                project_screen.render(project_cpu.cpu_display.snapshot())
            buzzer.update(project_cpu.sound_active)
            frame_clock.tick(POLL_RATE)
    finally:
        stop_event.set()
        worker.join()
        buzzer.close()
        project_screen.close()
        pygame.quit()

    return scheduler.error


def build_parser():
    parser = argparse.ArgumentParser(
        description="Starts a simple Chip 8 emulator"
                    )
    parser.add_argument(
        "rom", nargs="?", help="the ROM file to load on startup, picked with "
                                "a file dialog when left out")
    parser.add_argument(
        "-c", "--clock", help="the number of instructions to execute per "
                              "second (default is {})".format(DEFAULT_CLOCK_HZ),
        type=int, default=DEFAULT_CLOCK_HZ, dest="clock_hz")
    parser.add_argument(
        "-s", "--scale", help="the scale factor to apply to the 64x32 display "
                              "(default is 10)", type=int, default=10, dest="scale")
    parser.add_argument(
        "-w", "--window-size", help="the window size in pixels, overrides the scale factor",
        type=int, nargs=2, metavar=("WIDTH", "HEIGHT"), dest="window_size")
    parser.add_argument(
        "-bg", "--background", help="the color of pixels that are off, either "
                                    "0xRRGGBB or R G B (default is black)",
        nargs="+", metavar="COLOR", dest="background")
    parser.add_argument(
        "-fg", "--foreground", help="the color of pixels that are on, either "
                                    "0xRRGGBB or R G B (default is white)",
        nargs="+", metavar="COLOR", dest="foreground")
    parser.add_argument(
        "-fs", "--fullscreen", help="start in fullscreen mode", action="store_true")
    parser.add_argument(
        "--nodrawsync", help="present every change to the display instead of "
                             "once per 60Hz frame", action="store_false", dest="draw_sync")
    parser.add_argument(
        "--novsync", help="turn off vertical sync", action="store_false", dest="vsync")
    parser.add_argument(
        "--stack-depth", help="the number of nested subroutine calls allowed "
                              "(default is {})".format(STACK_DEPTH),
        type=int, default=STACK_DEPTH, dest="stack_depth")
    parser.add_argument(
        "--shift-in-place", help="8xy6/8xyE shift Vx instead of Vy", action="store_true")
    parser.add_argument(
        "--no-index-increment", help="Fx55/Fx65 leave the index register unchanged",
        action="store_false", dest="increment_index")
    parser.add_argument(
        "--wrap-sprites", help="wrap sprites around the screen edges instead of "
                               "clipping them", action="store_true")
    parser.add_argument(
        "--reset-vf", help="8xy1/8xy2/8xy3 clear VF", action="store_true", dest="reset_vf_on_logic")
    parser.add_argument(
        "-v", "--verbose", help="log debugging information", action="store_true")
    return parser


def parse_configuration(args, ask_path=ask_rom_path):
    """
    Turn parsed command-line arguments into a Configuration. Without a ROM
    argument, ask_path is called to pick one.
    """
    quirks = Quirks(shift_in_place=args.shift_in_place,
                    increment_index=args.increment_index,
                    wrap_sprites=args.wrap_sprites,
                    reset_vf_on_logic=args.reset_vf_on_logic)
    configuration = Configuration(rom_path=resolve_rom_path(args.rom, ask_path),
                                  clock_hz=args.clock_hz,
                                  quirks=quirks,
                                  stack_depth=args.stack_depth,
                                  draw_sync=args.draw_sync,
                                  vsync=args.vsync,
                                  fullscreen=args.fullscreen,
                                  scale=args.scale,
                                  window_size=tuple(args.window_size) if args.window_size else None)
    if args.background:
        configuration.background = parse_color(args.background)
    if args.foreground:
        configuration.foreground = parse_color(args.foreground)
    return configuration


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="[%(levelname)s]:  %(message)s", stream=sys.stdout)
    try:
        error = screen_cpu_connector(parse_configuration(args))
    except Chip8Error as load_error:
        error = load_error
    if error is not None:
        print(error, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
