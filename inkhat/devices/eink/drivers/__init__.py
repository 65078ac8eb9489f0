"""
Panel drivers. Each module exposes a Driver class implementing EInkDeviceInterface.
"""
