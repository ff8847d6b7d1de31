#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
onkyo-receiver: control the volume and mute state of an Onkyo receiver from the command line.
"""

from __future__ import annotations

import sys
import argparse
import json
import asyncio
import logging
from signal import SIGINT, SIGTERM

import colorama # type: ignore[import]
from colorama import Fore, Style
from dotenv import load_dotenv

from onkyo_receiver.internal_types import *
from onkyo_receiver import (
    __version__ as pkg_version,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    OnkyoReceiverClient,
    OnkyoReceiverClientConfig,
  )

PROG = "onkyo-receiver"

class CmdExitError(RuntimeError):
    """Raised to end the command with a specific exit code."""
    exit_code: int

    def __init__(self, exit_code: int, msg: Optional[str]=None):
        super().__init__(f"Exit code {exit_code}" if msg is None else msg)
        self.exit_code = exit_code

class ArgparseExitError(CmdExitError):
    pass

class NoExitArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that raises ArgparseExitError instead of calling sys.exit()."""
    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, sys.stderr)
        raise ArgparseExitError(status, message)

class CommandHandler:
    _argv: Optional[Sequence[str]]
    _args: argparse.Namespace
    _show_traceback: bool = False
    _use_color: bool = False
    _config: Optional[OnkyoReceiverClientConfig] = None

    def __init__(self, argv: Optional[Sequence[str]]=None):
        self._argv = argv

    @property
    def config(self) -> OnkyoReceiverClientConfig:
        """Client configuration: command-line options over environment and config file."""
        if self._config is None:
            self._config = OnkyoReceiverClientConfig(
                default_host=self._args.host,
                default_port=self._args.port,
                timeout_secs=self._args.timeout,
              )
        return self._config

    @property
    def host(self) -> str:
        host = self.config.default_host
        if host is None:
            raise CmdExitError(1, "No receiver host specified; use --host or set ONKYO_RECEIVER_HOST")
        return host

    def new_client(self) -> OnkyoReceiverClient:
        return OnkyoReceiverClient(config=self.config)

    def print_result(self, value: Jsonable) -> None:
        print(json.dumps(value))

    def report_error(self, ex: Exception) -> None:
        desc = str(ex) or ex.__class__.__name__
        if self._use_color:
            desc = f"{Fore.RED}{PROG}: error: {desc}{Style.RESET_ALL}"
        else:
            desc = f"{PROG}: error: {desc}"
        print(desc, file=sys.stderr)

    # ======================= Commands

    async def cmd_bare(self) -> int:
        print(f"{PROG}: a command is required; see '{PROG} -h'", file=sys.stderr)
        return 1

    async def cmd_volume_up(self) -> int:
        await self.new_client().volume_up(self.host, confirm=self._args.confirm)
        return 0

    async def cmd_volume_down(self) -> int:
        await self.new_client().volume_down(self.host, confirm=self._args.confirm)
        return 0

    async def cmd_get_volume(self) -> int:
        self.print_result(await self.new_client().query_volume(self.host))
        return 0

    async def cmd_set_volume(self) -> int:
        await self.new_client().set_volume(self.host, self._args.level)
        return 0

    async def cmd_mute(self) -> int:
        await self.new_client().set_mute(self.host, True)
        return 0

    async def cmd_unmute(self) -> int:
        await self.new_client().set_mute(self.host, False)
        return 0

    async def cmd_get_mute(self) -> int:
        self.print_result(await self.new_client().query_mute(self.host))
        return 0

    async def cmd_emulator(self) -> int:
        from onkyo_receiver.emulator import OnkyoReceiverEmulator
        emulator = OnkyoReceiverEmulator(
            bind_addr=self._args.bind,
            port=self.config.default_port,
            initial_volume=self._args.volume,
          )
        loop = asyncio.get_running_loop()
        def on_signal() -> None:
            emulator.close(CmdExitError(1, "Emulator stopped by signal"))
        for sig in (SIGINT, SIGTERM):
            loop.add_signal_handler(sig, on_signal)
        try:
            await emulator.run()
        finally:
            for sig in (SIGINT, SIGTERM):
                loop.remove_signal_handler(sig)
        return 0

    async def cmd_version(self) -> int:
        print(pkg_version)
        return 0

    # ======================= Argument parsing

    def build_parser(self) -> argparse.ArgumentParser:
        parser = NoExitArgumentParser(
            prog=PROG,
            description="Control the master volume and muting of an Onkyo/Integra receiver over eISCP.")
        parser.add_argument('--traceback', '--tb', action='store_true', default=False,
                            help='Show a full traceback when a command fails')
        parser.add_argument('--log-level', dest='log_level', default='warning',
                            choices=['debug', 'info', 'warning', 'error', 'critical'],
                            help='Logging level. Default: warning')
        parser.add_argument('--no-color', dest='no_color', action='store_true', default=False,
                            help='Do not colorize error messages')
        parser.add_argument('--host', default=None,
                            help='Receiver IP address or hostname. Default: env var ONKYO_RECEIVER_HOST')
        parser.add_argument('--port', default=None, type=int,
                            help=f"Receiver eISCP port. Default: env var ONKYO_RECEIVER_PORT, or {DEFAULT_PORT}")
        parser.add_argument('--timeout', default=None, type=float,
                            help=f"Seconds allowed for each receiver operation. Default: env var ONKYO_RECEIVER_TIMEOUT, or {DEFAULT_TIMEOUT}")
        parser.set_defaults(func=self.cmd_bare)

        subparsers = parser.add_subparsers(
                            title='Commands',
                            help='Use "<command> -h" for help on a command')

        for name, func, desc in (
                ('volume-up', self.cmd_volume_up, "Step the master volume up one notch."),
                ('volume-down', self.cmd_volume_down, "Step the master volume down one notch."),
              ):
            step_parser = subparsers.add_parser(name, description=desc)
            step_parser.add_argument('--confirm', action='store_true', default=False,
                            help='Wait for the receiver to echo the new volume instead of returning once sent')
            step_parser.set_defaults(func=func)

        set_volume_parser = subparsers.add_parser('set-volume', description="Set the master volume.")
        set_volume_parser.add_argument('level', type=int,
                            help='Volume level, 0-100. Values outside the range are clamped.')
        set_volume_parser.set_defaults(func=self.cmd_set_volume)

        for name, func, desc in (
                ('get-volume', self.cmd_get_volume, "Print the master volume level."),
                ('mute', self.cmd_mute, "Mute the audio."),
                ('unmute', self.cmd_unmute, "Unmute the audio."),
                ('get-mute', self.cmd_get_mute, "Print true if the audio is muted, else false."),
                ('version', self.cmd_version, "Print the version of this tool."),
              ):
            subparsers.add_parser(name, description=desc).set_defaults(func=func)

        emulator_parser = subparsers.add_parser('emulator',
                            description="Run a receiver emulator on --port until interrupted.")
        emulator_parser.add_argument('-b', '--bind', default="0.0.0.0",
                            help='Local address to listen on. Default: 0.0.0.0')
        emulator_parser.add_argument('--volume', default=0x29, type=int,
                            help='Initial volume level. Default: 41')
        emulator_parser.set_defaults(func=self.cmd_emulator)

        return parser

    async def arun(self) -> int:
        """Parses the arguments and runs the selected command.

        Returns:
            int: The process exit code.
        """
        try:
            args = self.build_parser().parse_args(self._argv)
        except ArgparseExitError as ex:
            return ex.exit_code
        self._args = args
        self._show_traceback = args.traceback
        self._use_color = sys.stderr.isatty() and not args.no_color

        logging.basicConfig(level=logging.getLevelName(args.log_level.upper()))
        func: Callable[[], Awaitable[int]] = args.func
        logging.debug(f"Running {func.__name__}")
        try:
            rc = await func()
        except Exception as ex:
            rc = ex.exit_code if isinstance(ex, CmdExitError) else 1
            if rc != 0 and self._show_traceback:
                raise
            self.report_error(ex)
        logging.debug(f"{func.__name__} exited with {rc}")
        return rc

def run(argv: Optional[Sequence[str]]=None) -> int:
    """Console script entry point."""
    load_dotenv()
    colorama.just_fix_windows_console()
    try:
        return asyncio.run(CommandHandler(argv).arun())
    except CmdExitError as ex:
        return ex.exit_code

async def arun(argv: Optional[Sequence[str]]=None) -> int:
    """Runs the command line tool from within an event loop."""
    try:
        return await CommandHandler(argv).arun()
    except CmdExitError as ex:
        return ex.exit_code

if __name__ == "__main__":
    sys.exit(run())
