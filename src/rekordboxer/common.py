'''
Helpers shared across modules: logging setup, argument path normalization and file naming.
'''

import os
import logging
import argparse

from . import config

def configure_log(name: str, level: int = logging.DEBUG, path: str | None = None) -> None:
    '''Configures the root logger to write to `<log dir>/<name>.log`.

    Args:
        name: Log file name without extension
        level: Minimum level to record
        path: Optional log directory, defaults to config.LOG_DIR
    '''
    log_dir = path or str(config.LOG_DIR)
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(filename=f"{log_dir}{os.sep}{name}.log",
                        level=level,
                        format='%(asctime)s [%(levelname)s] %(module)s: %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S',
                        filemode='a')

def configure_log_module(module_file: str, level: int = logging.DEBUG) -> None:
    '''Configures logging using the module's file name as the log name.'''
    configure_log(filename_no_ext(module_file), level=level)

def filename_no_ext(path: str) -> str:
    '''Returns the file name of `path` without its directory or extension.'''
    return os.path.splitext(os.path.basename(path))[0]

def normalize_arg_paths(args: argparse.Namespace, names: list[str]) -> None:
    '''Normalizes each named path argument in place, skipping unset values.'''
    for name in names:
        value = getattr(args, name, None)
        if value:
            setattr(args, name, os.path.normpath(os.path.expanduser(value)))

def log_dry_run(operation: str, detail: str) -> None:
    logging.info(f"[DRY-RUN] Would {operation}: {detail}")
