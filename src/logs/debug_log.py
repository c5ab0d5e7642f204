import logging
import sys
import json
import inspect
import datetime
from functools import wraps
import traceback

from src.core.exceptions import KanbanError
from src.logs.server_log import get_log_dir

# ANSI colors for console output
BLUE = '\033[94m'
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
PURPLE = '\033[95m'
CYAN = '\033[96m'
BOLD = '\033[1m'
END = '\033[0m'

REDACTED = "***"

# Header and field names whose values must never reach a log record
SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "password",
    "password_confirmation",
    "access_token",
    "refresh_token",
    "secret",
    "access_secret",
    "refresh_secret",
    "token",
}


def redact(data):
    """Return a copy of a mapping with sensitive values masked"""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in SENSITIVE_KEYS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


def format_object(obj):
    if isinstance(obj, (list, dict, tuple, set)):
        try:
            return json.dumps(redact(obj), indent=2, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(obj)
    return str(obj)


class DebugLogger:
    """Verbose debug logger with caller info and colored console output"""

    def __init__(self, name="debug", level=logging.DEBUG):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        if self.logger.handlers:
            self.logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )

        file_handler = logging.FileHandler(get_log_dir() / "debug.log", encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def debug(self, message, *args, **kwargs):
        """Debug record prefixed with the calling file, line and function"""
        frame = inspect.currentframe().f_back
        filename = frame.f_code.co_filename
        lineno = frame.f_lineno
        function = frame.f_code.co_name

        if "src" in filename:
            filename = filename[filename.index("src"):]

        caller_info = f"{BLUE}[{filename}:{lineno} - {function}]{END}"
        self.logger.debug(f"{caller_info} {message}", *args, **kwargs)

    def info(self, message, *args, **kwargs):
        self.logger.info(f"{GREEN}{message}{END}", *args, **kwargs)

    def warning(self, message, *args, **kwargs):
        self.logger.warning(f"{YELLOW}{message}{END}", *args, **kwargs)

    def error(self, message, *args, **kwargs):
        trace = traceback.format_exc()
        if trace and trace != 'NoneType: None\n':
            message = f"{message}\n{RED}Traceback:{END}\n{trace}"
        self.logger.error(f"{RED}{message}{END}", *args, **kwargs)

    def start_func(self, func_name, params=None):
        params_str = ""
        if params:
            params_str = f" with params: {format_object(params)}"
        self.debug(f"{PURPLE}Entering {func_name}{END}{params_str}")

    def end_func(self, func_name, result=None, execution_time=None):
        result_str = ""
        if result is not None:
            result_str = f", result: {format_object(result)[:1000]}"

        time_str = ""
        if execution_time:
            time_str = f", took {execution_time:.4f}s"

        self.debug(f"{PURPLE}Leaving {func_name}{END}{result_str}{time_str}")

    def log_exception(self, message="Unhandled exception"):
        exc_type, exc_value, exc_traceback = sys.exc_info()
        if exc_type:
            tb_str = ''.join(traceback.format_exception(exc_type, exc_value, exc_traceback))
            self.logger.error(f"{RED}{message}: {exc_type.__name__}: {exc_value}\n{tb_str}{END}")
        else:
            self.logger.error(f"{RED}{message}{END}")

    def log_request(self, request, extra_info=None):
        """Log an incoming HTTP request, credentials masked"""
        method = getattr(request, 'method', 'UNKNOWN')
        url = getattr(getattr(request, 'url', None), 'path', 'UNKNOWN')
        client = getattr(request, 'client', None)
        client_host = client.host if client else "unknown"
        headers = redact(dict(getattr(request, 'headers', {})))

        info = (
            f"{CYAN}HTTP request:{END} {method} {url}\n"
            f"{CYAN}Client:{END} {client_host}\n"
            f"{CYAN}Headers:{END} {json.dumps(headers, indent=2, ensure_ascii=False)}"
        )

        if extra_info:
            info += f"\n{CYAN}Extra:{END} {extra_info}"

        self.debug(info)

    def log_response(self, response, process_time=None):
        status_code = getattr(response, 'status_code', 0)

        color = GREEN if 200 <= status_code < 400 else YELLOW if 400 <= status_code < 500 else RED

        info = f"{CYAN}HTTP response:{END} {color}status {status_code}{END}"
        if process_time is not None:
            info += f" {CYAN}in{END} {process_time:.3f}s"

        self.debug(info)


def _collect_args(func, args, kwargs, hidden):
    func_args = dict(zip(inspect.getfullargspec(func).args, args))
    func_args.update(kwargs)
    for name in ("self", "cls", "db"):
        func_args.pop(name, None)
    for name in hidden:
        if name in func_args:
            func_args[name] = REDACTED
    return func_args


def log_function(logger=None, hide=()):
    """Log entry, exit and failures of a sync or async function.

    Arguments named in ``hide`` are masked in the entry record.
    """
    def decorator(func):
        log = logger or debug_logger

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = datetime.datetime.now()
                log.start_func(func.__name__, _collect_args(func, args, kwargs, hide))
                try:
                    result = await func(*args, **kwargs)
                except KanbanError as e:
                    log.warning(f"{func.__name__} rejected: {e.message}")
                    raise
                except Exception:
                    log.log_exception(f"Error in {func.__name__}")
                    raise
                execution_time = (datetime.datetime.now() - start_time).total_seconds()
                log.end_func(func.__name__, None, execution_time)
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.datetime.now()
            log.start_func(func.__name__, _collect_args(func, args, kwargs, hide))
            try:
                result = func(*args, **kwargs)
            except KanbanError as e:
                log.warning(f"{func.__name__} rejected: {e.message}")
                raise
            except Exception:
                log.log_exception(f"Error in {func.__name__}")
                raise
            execution_time = (datetime.datetime.now() - start_time).total_seconds()
            log.end_func(func.__name__, None, execution_time)
            return result

        return wrapper

    return decorator


debug_logger = DebugLogger()
