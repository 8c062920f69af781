# Juicebar UI Module
"""
System tray integration for Juicebar.
"""
