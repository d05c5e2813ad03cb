"""Command-line interface for triptrack."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from triptrack import create_room_store as create_room_store
from triptrack import load_config as load_config
from triptrack import write_config as write_config
from triptrack.cli.app import main as main
from triptrack.cli.commands import data as data_command
from triptrack.cli.commands import init as init_command
from triptrack.cli.commands import sync as sync_command
from triptrack.cli.parser import build_parser as build_parser

_format_status = sync_command.format_status

_run_init = init_command.run_init
_run_show = data_command.run_show
_run_export = data_command.run_export
_run_import = data_command.run_import
_run_link = data_command.run_link
_run_open_link = data_command.run_open_link
_run_sync = sync_command.run_sync
