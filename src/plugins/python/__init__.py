"""Python language support: tree decoding, extraction and source dumping."""

from plugins.python.plugin import PythonPlugin

__all__ = ["PythonPlugin"]
