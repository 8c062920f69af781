# Juicebar
"""
Juicebar - battery status item for the Linux system tray.
"""

__version__ = "0.3.0"
