"""Data-synchronization core: session, gateway, resources, poller, projector."""
