"""Resolve ``cachepool.__version__``.

An installed cachepool reports the version recorded in its wheel metadata.
A source tree that was never installed falls back to ``pyproject.toml`` next
to the package, and to ``0.0.0-dev`` if that cannot be read either.
"""

try:
    from importlib.metadata import version

    __version__ = version("cachepool")
except Exception:
    # not installed: use the version declared in the checkout
    import tomllib
    from pathlib import Path

    try:
        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    except Exception:
        __version__ = "0.0.0-dev"
