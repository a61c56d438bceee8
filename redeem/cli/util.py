"""
Utility functions and classes for the redeem CLI.

Key Features:
--------------
1. **Logging Utilities**:
    - `setup_logger`: Configures the console logger and logs a run header.
    - `write_logfile`: Mirrors the log of a command into a file.

2. **Custom Click Enhancements**:
    - `GlobalLogLevelGroup`: A custom Click group setting the global log level.
    - `AdvancedHelpCommand`: Adds a --helphelp option listing hidden options.

3. **Parameter Transformation**:
    - `transform_threads`: Resolves -1 to the number of available CPUs.
    - `transform_fraction`: Validates options that must lie within (0, 1].

4. **Performance Reporting**:
    - `measure_memory_usage_and_time`: Logs wall time and memory usage of a command.

Dependencies:
--------------
- `click`: For building CLI commands and options.
- `loguru`: For logging.
- `psutil`: For system and memory information.
"""

import multiprocessing
import platform
import sys
import time
from datetime import datetime
from functools import wraps
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
import psutil
from loguru import logger


class GlobalLogLevelGroup(click.Group):
    """
    Custom click Group class for setting global log level and header.
    """

    def invoke(self, ctx):
        log_level = ctx.params.get("log_level", "INFO").upper()
        colorize = ctx.params.get("log_colorize", True)
        header = setup_logger(log_level=log_level, colorize=colorize)
        ctx.obj = {"LOG_LEVEL": log_level, "LOG_HEADER": header}
        return super().invoke(ctx)


class AdvancedHelpCommand(click.Command):
    """
    Custom Click command class that adds a --helphelp option showing hidden options too.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.params.insert(
            0,
            click.Option(
                ["--helphelp"],
                is_flag=True,
                is_eager=True,
                expose_value=False,
                help="Show advanced help with all options.",
                callback=self._show_advanced_help,
            ),
        )

    def _show_advanced_help(self, ctx, param, value):
        if not value:
            return
        ctx.ensure_object(dict)
        ctx.obj["show_advanced"] = True
        click.echo(ctx.get_help(), color=ctx.color)
        ctx.exit()

    def format_options(self, ctx, formatter):
        ctx.ensure_object(dict)
        show_advanced = ctx.obj.get("show_advanced", False)

        opts = []
        for param in self.get_params(ctx):
            if param.name == "helphelp":
                continue

            help_record = param.get_help_record(ctx)

            # Hidden options have no help record of their own
            if show_advanced and getattr(param, "hidden", False):
                opt_decl = " / ".join(sorted(param.opts + param.secondary_opts))
                if isinstance(param.type, click.Choice):
                    opt_decl += f" [{'/'.join(param.type.choices)}]"
                elif not param.is_flag and hasattr(param.type, "name"):
                    opt_decl += f" {param.type.name.upper()}"

                default_part = ""
                if param.show_default and param.default is not None:
                    default_part = f"  [default: {param.default}]"
                help_record = (opt_decl, (param.help or "") + default_part)

            if help_record is not None:
                opts.append(help_record)

        if not show_advanced:
            opts.append(("--helphelp", "Show advanced help with all options"))

        if opts:
            with formatter.section("Options"):
                formatter.write_dl(opts, col_max=35, col_spacing=6)


_LOGGER_INITIALIZED = False  # Module-level flag
_LOG_HEADER = None


def get_version():
    try:
        return version("redeem")
    except PackageNotFoundError:
        return "unknown"


def get_system_info():
    """Get OS, Python version, CPU, and RAM info."""
    return (
        f"OS: {platform.system()} {platform.release()} | "
        f"Python: {platform.python_version()} | "
        f"CPU: {psutil.cpu_count()} cores | "
        f"RAM: {psutil.virtual_memory().total / (1024**3):.1f} GB"
    )


def get_execution_context():
    """Get the exact CLI command used (works with Click subcommands)."""
    return " ".join([sys.executable] + sys.argv)


def setup_logger(log_level, colorize=True):
    """
    Adds the console sink and logs the run header once per process.

    Returns:
        str: The run header, also written at the top of every log file.
    """

    def formatter(record):
        if log_level != "INFO":
            mod_func_line = f"{record['name']}::{record['function']}:{record['line']}"
            width = 50
        else:
            mod_func_line = f"{record['module']}::{record['line']}"
            width = 27
        return (
            f"[ <green>{record['time']:YYYY-MM-DD at HH:mm:ss}</green> | "
            f"<level>{record['level']: <7}</level> | "
            f"{mod_func_line: <{width}} ] "
            f"<level>{record['message']}</level>\n"
        )

    global _LOGGER_INITIALIZED, _LOG_HEADER
    if _LOGGER_INITIALIZED:
        return _LOG_HEADER

    header = (
        f"redeem v{get_version()}\n"
        f"Execution time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"System: {get_system_info()}\n"
        f"Command: {get_execution_context()}\n"
    )

    logger.remove()
    logger.add(
        sys.stdout,
        format="{message}",
        level=log_level,
        filter=lambda record: "simple" in record["extra"],
    )
    logger.bind(simple=True).info(header)

    logger.add(
        sys.stdout,
        colorize=colorize,
        format=formatter,
        level=log_level,
        filter=lambda record: "simple" not in record["extra"],
    )

    _LOGGER_INITIALIZED = True
    _LOG_HEADER = header

    return header


def write_logfile(log_level, log_file, log_header=None):
    def formatter(record):
        mod_func_line = f"{record['module']}::{record['function']}:{record['line']}"
        return (
            f"[ {record['time']:YYYY-MM-DD at HH:mm:ss} | "
            f"{record['level']: <7} | "
            f"{mod_func_line: <45} ] "
            f"{record['message']}\n"
        )

    log_file = Path(log_file)
    if log_file.exists():
        log_file.unlink()

    if log_header:
        with log_file.open("w") as f:
            f.write(log_header)

    return logger.add(
        log_file,
        colorize=False,
        format=formatter,
        level=log_level,
        filter=lambda record: "simple" not in record["extra"],
    )


# Parameter transformation functions
def transform_threads(ctx, param, value):
    if value == -1:
        value = multiprocessing.cpu_count()
    elif value < 1:
        raise click.BadParameter("threads must be -1 or a positive integer.")
    return value


def transform_fraction(ctx, param, value):
    if not 0 < value <= 1:
        raise click.BadParameter(f"{param.name} must be within (0, 1].")
    return value


def format_bytes(size):
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} TB"


def format_time(seconds):
    """Format the time in seconds into a human-readable format."""
    minutes = int(seconds // 60)
    seconds = seconds % 60
    if minutes > 0:
        return f"{minutes} minutes, {seconds:.2f} seconds"
    return f"{seconds:.2f} seconds"


def measure_memory_usage_and_time(func):
    """Decorator to log the execution time and the resident memory of a command."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        process = psutil.Process()
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            rss = process.memory_info().rss
            logger.info(
                f"redeem {func.__name__} took {format_time(time.perf_counter() - start_time)}; "
                f"Memory Usage: {format_bytes(rss)}."
            )

    return wrapper
