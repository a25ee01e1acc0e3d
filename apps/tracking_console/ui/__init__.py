"""Layout and page plumbing for the NiceGUI tracking console."""
