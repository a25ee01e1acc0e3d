"""
Apps package - runnable applications of the tracking console project.

- tracking_console: NiceGUI administration console for a GPS-tracking server
"""
