#!/usr/bin/env python3
"""chip8-vm Command Line Interface.

Run a CHIP-8 program headless for a fixed number of frames and print the
resulting machine state and display.

Usage:
    python main.py roms/IBM.ch8
    python main.py roms/PONG.ch8 --frames 300 --hold w --seed 1
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from chip8_vm import Chip8CPU, Chip8Config, Chip8Error
from chip8_vm.keymap import host_keys_to_chip8


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="chip8-vm: CHIP-8 Virtual Machine Interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run a ROM for 2 seconds of machine time (120 frames at 60 Hz)
    python main.py roms/IBM.ch8

    # Run longer, holding the W key (keypad 5) down the whole time
    python main.py roms/PONG.ch8 --frames 600 --hold w

    # Reproducible RND output
    python main.py roms/RANDOM.ch8 --seed 42 --quiet
        """
    )

    parser.add_argument(
        "rom",
        type=str,
        help="Path to CHIP-8 program image"
    )
    parser.add_argument(
        "--frames", "-f",
        type=int,
        default=120,
        help="Number of 60 Hz frames to run. Default: 120"
    )
    parser.add_argument(
        "--ips",
        type=int,
        default=Chip8Config.DEFAULT_INSTRUCTIONS_PER_SECOND,
        help=f"Instructions per second. Default: {Chip8Config.DEFAULT_INSTRUCTIONS_PER_SECOND}"
    )
    parser.add_argument(
        "--timer-hz",
        type=int,
        default=Chip8Config.DEFAULT_TIMER_HZ,
        help=f"Timer tick rate. Default: {Chip8Config.DEFAULT_TIMER_HZ}"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        help="Seed for the random number generator"
    )
    parser.add_argument(
        "--hold",
        type=str,
        default="",
        help="Host keys held down for the whole run (e.g. 'wq'), QWERTY layout"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (display only)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    try:
        config = Chip8Config(
            instructions_per_second=args.ips,
            timer_hz=args.timer_hz,
            seed=args.seed
        )
        held = host_keys_to_chip8(args.hold)
    except (ValueError, KeyError) as e:
        parser.error(str(e))

    cpu = Chip8CPU(config=config)

    try:
        cpu.load_rom_file(args.rom)
    except Chip8Error as e:
        print(f"Error: {e}")
        return 1

    if not args.quiet:
        print(f"Loading program: {args.rom}")
        print("-" * 64)

    cpu.set_keys(held)

    status = 0
    try:
        for _ in range(args.frames):
            cpu.run_frame()
    except Chip8Error as e:
        print(f"Execution error: {e}")
        status = 1

    if not args.quiet:
        summary = cpu.get_summary()
        print(f"Cycles: {summary['cycles']}")
        print(f"PC: 0x{summary['pc']:04X}  I: 0x{summary['index']:04X}")
        print(f"Timers: DT={summary['delay_timer']} ST={summary['sound_timer']}")
        print(f"Registers: {summary['registers']}")
        print("-" * 64)

    for line in cpu.state.render_text():
        print(line)

    return status


if __name__ == "__main__":
    sys.exit(main())
