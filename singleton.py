"""One shared instance per class for the config and language loaders."""
from __future__ import annotations

from threading import RLock


class _OneInstance(type):
    """Metaclass: the first call builds the instance, later calls return it."""

    def __call__(cls, *args, **kwargs):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__call__(*args, **kwargs)
        return cls._instance

    def reset(cls) -> None:
        """Forget the instance; the next call reads its files again."""
        with cls._lock:
            cls._instance = None


def singleton(cls: type) -> type:
    namespace = {k: v for k, v in vars(cls).items() if k not in ("__dict__", "__weakref__")}
    namespace["_instance"] = None
    namespace["_lock"] = RLock()
    return _OneInstance(cls.__name__, cls.__bases__, namespace)
