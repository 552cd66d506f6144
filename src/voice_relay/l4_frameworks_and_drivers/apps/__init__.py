"""App subclasses — ListenApp."""

from voice_relay.l4_frameworks_and_drivers.apps.listen import ListenApp

__all__ = ['ListenApp']
