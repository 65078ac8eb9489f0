"""
Devices package for inkhat hardware.
"""
