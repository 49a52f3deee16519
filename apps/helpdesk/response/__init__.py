"""Response formatting helpers."""

from .envelope import SUCCESS_MESSAGE, Envelope, error_body, install_exception_handlers, ok

__all__ = ["SUCCESS_MESSAGE", "Envelope", "error_body", "install_exception_handlers", "ok"]
