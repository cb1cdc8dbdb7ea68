"""Tracing for form and submission operations, backed by Pydantic Logfire.

Services wrap their work in named spans (``form.create``, ``form.update``,
``form.delete``, ``submission.create``, ``submission.export``) and hook
dispatch adds ``hook.action:*`` / ``hook.filter:*`` spans beneath them.
With ``logfire.instrument_pydantic`` set, every submission model generated
from a form's fields is traced as it validates.

Everything here is a no-op unless logfire is installed and enabled in
settings, so call sites never need to check.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formforge.config import LogfireConfig, Settings

_logfire = None


def is_available() -> bool:
    return _logfire is not None


def _configure_kwargs(config: LogfireConfig, console_options: Any) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "service_name": config.service_name,
        "send_to_logfire": "if-token-present",
    }
    if config.environment:
        kwargs["environment"] = config.environment
    if config.sample_rate != 1.0:
        kwargs["trace_sample_rate"] = config.sample_rate
    if config.console:
        kwargs["console"] = console_options()
    return kwargs


def configure(settings: Settings) -> None:
    """Initialize logfire from ``settings.logfire`` when enabled."""
    global _logfire

    config = settings.logfire
    if not config.enabled:
        return

    try:
        import logfire as lf
    except ImportError:
        return

    lf.configure(**_configure_kwargs(config, lf.ConsoleOptions))
    if config.instrument_pydantic:
        lf.instrument_pydantic()
    _logfire = lf


def instrument_app(app):
    """Wrap an ASGI app with request tracing; returns it unchanged if unavailable."""
    if not is_available():
        return app
    return _logfire.instrument_asgi(app)


def instrument_sqlalchemy(engine) -> None:
    if is_available():
        _logfire.instrument_sqlalchemy(engine=engine)


@contextmanager
def span(name: str, **attrs: Any):
    """Trace the enclosed block as ``name``; yields None when tracing is off."""
    if is_available():
        with _logfire.span(name, **attrs) as s:
            yield s
    else:
        yield None


def warn(msg: str, **kwargs: Any) -> None:
    if is_available():
        _logfire.warn(msg, **kwargs)


def exception(msg: str, **kwargs: Any) -> bool:
    """Report an exception with traceback. Returns False when logfire is unavailable."""
    if is_available():
        _logfire.exception(msg, **kwargs)
        return True
    return False
