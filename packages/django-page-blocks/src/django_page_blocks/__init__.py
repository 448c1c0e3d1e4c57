__version__ = "0.1.0"

__all__ = [
    "PageRecord",
    "PageDocument",
    "BlockInstance",
    "BlockRegistry",
    "BlockPlugin",
    "BlockEditor",
    "BlockRenderer",
    "DocumentStore",
]

_LAZY = {
    "PageRecord": "models",
    "PageDocument": "documents",
    "BlockInstance": "documents",
    "BlockRegistry": "registry",
    "BlockPlugin": "registry",
    "BlockEditor": "editor",
    "BlockRenderer": "renderer",
    "DocumentStore": "store",
}


def __getattr__(name):
    if name in _LAZY:
        import importlib

        module = importlib.import_module(f"{__name__}.{_LAZY[name]}")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
