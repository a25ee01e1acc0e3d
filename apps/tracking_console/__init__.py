"""NiceGUI administration console for a GPS-tracking server."""
