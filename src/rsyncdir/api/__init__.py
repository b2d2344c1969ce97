from rsyncdir.api.publish import configure_logging, publish_snapshot

__all__ = [
    "configure_logging",
    "publish_snapshot",
]
